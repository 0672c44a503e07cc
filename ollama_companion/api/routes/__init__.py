"""
Route modules for the Ollama Companion API.

Each module defines a FastAPI APIRouter for a specific domain.
All routers are collected in ``all_routers`` for easy inclusion.
"""

from ollama_companion.api.routes.system import router as system_router
from ollama_companion.api.routes.conversations import router as conversations_router
from ollama_companion.api.routes.session import router as session_router

all_routers = [
    system_router,
    conversations_router,
    session_router,
]

__all__ = ["all_routers"]
