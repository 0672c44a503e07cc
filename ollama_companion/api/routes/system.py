"""
System routes: /health, /models, /models/selected
"""

import logging

from fastapi import APIRouter, Depends

from ollama_companion import __version__
from ollama_companion.api.dependencies import (
    get_client,
    get_controller,
    get_store,
    ollama_http_error,
)
from ollama_companion.api.models.system import (
    HealthResponse,
    ModelListResponse,
    ModelSelectRequest,
    OllamaStatus,
)
from ollama_companion.ollama_client import OllamaClient, OllamaError
from ollama_companion.session import SessionController
from ollama_companion.store import ConversationStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["System"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    client: OllamaClient = Depends(get_client),
    controller: SessionController = Depends(get_controller),
    store: ConversationStore = Depends(get_store),
):
    """
    Health check endpoint.
    Reports whether the Ollama server answers and which models it serves.
    """
    available = await client.is_available()
    return HealthResponse(
        status="ok",
        version=__version__,
        ollama=OllamaStatus(
            available=available,
            base_url=client.base_url,
            models_loaded=controller.available_models if available else None,
        ),
        conversation_count=len(store.conversations),
    )


@router.get("/models", response_model=ModelListResponse)
async def list_models(controller: SessionController = Depends(get_controller)):
    """
    Refresh and list the models available on the Ollama server.
    """
    try:
        models = await controller.refresh_models()
    except OllamaError as e:
        logger.error("List models error: %s", e)
        raise ollama_http_error(e)
    return ModelListResponse(models=models, selected=controller.selected_model)


@router.put("/models/selected", response_model=ModelListResponse)
async def select_model(
    request: ModelSelectRequest,
    controller: SessionController = Depends(get_controller),
):
    """
    Choose the model used for the next message.
    """
    controller.select_model(request.model)
    return ModelListResponse(
        models=controller.available_models,
        selected=controller.selected_model,
    )
