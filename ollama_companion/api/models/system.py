"""
System-related API models: health and model selection.
"""

from typing import Optional

from pydantic import BaseModel, Field


class OllamaStatus(BaseModel):
    """Ollama server status for health check."""
    available: bool
    base_url: str
    models_loaded: Optional[list[str]] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    ollama: OllamaStatus
    conversation_count: int


class ModelListResponse(BaseModel):
    """Available models and the one used for the next request."""
    models: list[str]
    selected: str


class ModelSelectRequest(BaseModel):
    """Request to change the model for the next request."""
    model: str = Field(min_length=1)


class ErrorResponse(BaseModel):
    """Error response."""
    error: str
    detail: Optional[str] = None
