"""
Pytest configuration and shared fixtures for Ollama Companion tests.
"""

import asyncio
import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from ollama_companion.config import ChatSettings
from ollama_companion.ollama_client import ChatUpdate
from ollama_companion.session import SessionController
from ollama_companion.store import ConversationStore

# Marks the end of a fake stream
STREAM_DONE = object()


class FakeOllamaClient:
    """
    Stand-in for OllamaClient.

    ``script`` holds cumulative texts (or exceptions) replayed by
    stream_chat. In ``live`` mode items are pulled from a queue instead,
    so a test can decide when each update arrives.
    """

    base_url = "http://ollama.test"

    def __init__(self):
        self.script: list = []
        self.live = False
        self.queue: asyncio.Queue = asyncio.Queue()
        self.models: list[str] = []
        self.models_error = None
        self.calls: list[dict] = []
        self.closed = False

    def push(self, item) -> None:
        self.queue.put_nowait(item)

    async def stream_chat(
        self,
        messages,
        model,
        system_prompt=None,
        temperature=None,
        max_tokens=None,
    ):
        self.calls.append({
            "messages": messages,
            "model": model,
            "system_prompt": system_prompt,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })
        content = ""
        while True:
            if self.live:
                item = await self.queue.get()
            elif self.script:
                item = self.script.pop(0)
                await asyncio.sleep(0)
            else:
                item = STREAM_DONE

            if item is STREAM_DONE:
                yield ChatUpdate(content=content, done=True)
                return
            if isinstance(item, BaseException):
                raise item
            content = item
            yield ChatUpdate(content=content)

    async def list_models(self) -> list[str]:
        if self.models_error is not None:
            raise self.models_error
        return list(self.models)

    async def is_available(self) -> bool:
        return self.models_error is None

    async def aclose(self):
        self.closed = True


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def store(temp_dir: Path) -> ConversationStore:
    """Create an initialized store in a temporary directory."""
    conversation_store = ConversationStore(temp_dir / "conversations")
    conversation_store.initialize()
    return conversation_store


@pytest.fixture
def settings() -> ChatSettings:
    """Chat settings with no system prompt configured."""
    return ChatSettings(
        default_model="llama3.2",
        temperature=0.5,
        max_tokens=256,
    )


@pytest.fixture
def fake_client() -> FakeOllamaClient:
    """Create a scriptable fake Ollama client."""
    return FakeOllamaClient()


@pytest.fixture
def controller(
    fake_client: FakeOllamaClient,
    store: ConversationStore,
    settings: ChatSettings,
) -> SessionController:
    """Create a session controller wired to the fake client and temp store."""
    return SessionController(client=fake_client, store=store, settings=settings)


@pytest.fixture
def stream_done():
    """Sentinel that ends a fake stream."""
    return STREAM_DONE


@pytest.fixture
def settle():
    """Let pending tasks on the event loop run for a few iterations."""
    async def _settle(rounds: int = 10) -> None:
        for _ in range(rounds):
            await asyncio.sleep(0)
    return _settle
