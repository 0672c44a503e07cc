"""
Pydantic models (schemas) for API request/response types.

All models are re-exported here for convenience:
    from ollama_companion.api.models import HealthResponse, SubmitResponse, ...
"""

from ollama_companion.api.models.system import (
    OllamaStatus,
    HealthResponse,
    ModelListResponse,
    ModelSelectRequest,
    ErrorResponse,
)
from ollama_companion.api.models.conversations import (
    ConversationSummary,
    ConversationListResponse,
)
from ollama_companion.api.models.session import (
    MessageSubmit,
    SessionResponse,
    SubmitResponse,
    StopResponse,
)

__all__ = [
    "OllamaStatus",
    "HealthResponse",
    "ModelListResponse",
    "ModelSelectRequest",
    "ErrorResponse",
    "ConversationSummary",
    "ConversationListResponse",
    "MessageSubmit",
    "SessionResponse",
    "SubmitResponse",
    "StopResponse",
]
