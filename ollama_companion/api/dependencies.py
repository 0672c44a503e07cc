"""
Common API dependencies: session components held on app state, error mapping.
"""

from fastapi import HTTPException, Request

from ollama_companion.ollama_client import OllamaClient, OllamaError, ServerNotRunningError
from ollama_companion.session import SessionController
from ollama_companion.store import ConversationStore


def get_controller(request: Request) -> SessionController:
    return request.app.state.controller


def get_store(request: Request) -> ConversationStore:
    return request.app.state.store


def get_client(request: Request) -> OllamaClient:
    return request.app.state.client


def ollama_http_error(error: OllamaError) -> HTTPException:
    """Map an Ollama failure to the HTTP error reported to API callers."""
    if isinstance(error, ServerNotRunningError):
        return HTTPException(status_code=503, detail=error.user_message)
    return HTTPException(status_code=502, detail=error.user_message)
