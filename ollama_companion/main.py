"""
Ollama Companion - FastAPI Application
A local daemon that runs chat sessions against an Ollama server and keeps
their transcripts on disk.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ollama_companion import __version__
from ollama_companion.api.routes import all_routers
from ollama_companion.config import ChatSettings, config
from ollama_companion.ollama_client import OllamaClient
from ollama_companion.prompts import LocationProvider
from ollama_companion.session import SessionController
from ollama_companion.store import ConversationStore, StorageError

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)


def create_app(
    store: Optional[ConversationStore] = None,
    client: Optional[OllamaClient] = None,
    settings: Optional[ChatSettings] = None,
    location_provider: Optional[LocationProvider] = None,
) -> FastAPI:
    """
    Build the API application.

    Components that are not passed in are created from configuration on
    startup. A client created here is closed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger.info("Starting Ollama Companion...")
        config.validate()

        app.state.store = store or ConversationStore()
        app.state.store.initialize()

        app.state.client = client or OllamaClient()
        app.state.controller = SessionController(
            client=app.state.client,
            store=app.state.store,
            settings=settings or ChatSettings.from_config(),
            location_provider=location_provider,
        )
        await app.state.controller.fetch_models()
        logger.info(
            "Ollama at %s, default model %s",
            app.state.client.base_url,
            app.state.controller.selected_model,
        )

        yield

        # Shutdown
        logger.info("Shutting down Ollama Companion...")
        app.state.controller.cancel()
        if client is None:
            await app.state.client.aclose()

    app = FastAPI(
        title="Ollama Companion",
        description="Streaming chat sessions against a local Ollama server",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for router in all_routers:
        app.include_router(router)

    @app.exception_handler(StorageError)
    async def storage_error_handler(request, exc):
        logger.error("Storage error: %s", exc)
        return JSONResponse(
            status_code=500,
            content={"error": "Storage error", "detail": str(exc)}
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request, exc):
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "detail": str(exc)}
        )

    return app


app = create_app()


# Entry point for running with uvicorn directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "ollama_companion.main:app",
        host=config.API_HOST,
        port=config.API_PORT,
        reload=False,
        log_level=config.LOG_LEVEL.lower()
    )
