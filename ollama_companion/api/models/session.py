"""
Session-related API models: submitting messages and stopping generation.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from ollama_companion.models import Conversation
from ollama_companion.session import SessionState


class MessageSubmit(BaseModel):
    """Request to send a user message."""
    content: str


class SessionResponse(BaseModel):
    """Current session state."""
    state: SessionState
    selected_model: str
    error_message: Optional[str] = None
    conversation: Optional[Conversation] = None


class SubmitResponse(BaseModel):
    """Result of sending a message."""
    status: str  # started, completed, cancelled
    message_id: Optional[UUID] = None
    conversation: Optional[Conversation] = None


class StopResponse(BaseModel):
    """Result of a stop request."""
    cancelled: bool
