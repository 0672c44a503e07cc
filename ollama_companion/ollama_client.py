"""
Ollama client module for Ollama Companion.
Streams chat completions from a local Ollama server and lists its models.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import AsyncIterator, Optional

import httpx
from pydantic import BaseModel, ValidationError

from ollama_companion.config import Config

logger = logging.getLogger(__name__)

# Status codes Ollama (or whatever sits at the address) returns when it is not serving
SERVER_DOWN_STATUSES = (404, 503)


class OllamaError(Exception):
    """Base class for failures talking to the Ollama server."""

    default_message = "Unexpected error talking to the Ollama server."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)

    @property
    def user_message(self) -> str:
        return str(self)


class ServerNotRunningError(OllamaError):
    """Server unreachable, refusing connections, or answering 404/503."""

    default_message = "Ollama server is not running. Please start Ollama and try again."


class InvalidResponseError(OllamaError):
    """Unexpected status code or an unparsable response body."""

    default_message = "Invalid response from Ollama server."


class OllamaConnectionError(OllamaError):
    """Transport failure or timeout, possibly in the middle of a stream."""

    default_message = "Connection error. Please try again."


# Wire models

class ChunkMessage(BaseModel):
    role: str = "assistant"
    content: str = ""


class ChatChunk(BaseModel):
    """One line of a streamed /api/chat response."""
    model: str
    message: Optional[ChunkMessage] = None
    done: bool
    done_reason: Optional[str] = None
    total_duration: Optional[int] = None
    eval_count: Optional[int] = None


class ModelInfo(BaseModel):
    name: str
    model: Optional[str] = None
    modified_at: Optional[str] = None
    size: Optional[int] = None
    digest: Optional[str] = None
    details: dict = {}


class ModelsResponse(BaseModel):
    models: list[ModelInfo] = []


@dataclass
class ChatUpdate:
    """
    Cumulative assistant text received so far.

    ``content`` always holds the full text, never a fragment. The final
    update of a stream has ``done`` set and carries the completion stats.
    """
    content: str
    done: bool = False
    done_reason: Optional[str] = None
    total_duration: Optional[int] = None
    eval_count: Optional[int] = None


class OllamaClient:
    """Async client for the Ollama HTTP API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (base_url or Config.OLLAMA_BASE_URL).rstrip("/")
        self.timeout = timeout or Config.REQUEST_TIMEOUT
        self.client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout)
        )

    def build_chat_payload(
        self,
        messages: list[dict[str, str]],
        model: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> dict:
        """Build the JSON body for a streaming /api/chat request."""
        chat_messages = []
        if system_prompt:
            chat_messages.append({"role": "system", "content": system_prompt})
        chat_messages.extend(
            {"role": m["role"], "content": m["content"]} for m in messages
        )

        return {
            "model": model,
            "messages": chat_messages,
            "stream": True,
            "options": {
                "temperature": Config.LLM_TEMPERATURE if temperature is None else temperature,
                "num_predict": max_tokens or Config.LLM_MAX_TOKENS,
            },
        }

    async def stream_chat(
        self,
        messages: list[dict[str, str]],
        model: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> AsyncIterator[ChatUpdate]:
        """
        Stream a chat completion as cumulative updates.

        Args:
            messages: Prior turns as dicts with 'role' and 'content' keys.
            model: The model to generate with.
            system_prompt: Optional system instruction sent first.
            temperature: Override default temperature.
            max_tokens: Override default max tokens.

        Yields:
            ChatUpdate with the full text received so far.

        Raises:
            ServerNotRunningError: Server unreachable or answering 404/503.
            InvalidResponseError: Any other non-200 status or an undecodable body.
            OllamaConnectionError: Timeout or transport failure. The timeout
                covers the whole exchange, not each read.
        """
        payload = self.build_chat_payload(
            messages, model, system_prompt, temperature, max_tokens
        )
        logger.info("Generating chat completion with model: %s", model)

        deadline = asyncio.get_running_loop().time() + self.timeout
        full_response = ""
        try:
            async with self.client.stream(
                "POST",
                f"{self.base_url}/api/chat",
                json=payload,
                headers={"Connection": "close"},
            ) as resp:
                logger.debug("Response status code: %s", resp.status_code)
                self._check_status(resp.status_code)

                async for line in self._lines_until(resp, deadline):
                    if not line.strip():
                        continue
                    try:
                        chunk = ChatChunk.model_validate_json(line)
                    except ValidationError as e:
                        logger.debug("Skipping malformed stream line %r: %s", line, e)
                        continue

                    if chunk.message is not None and chunk.message.content:
                        full_response += chunk.message.content
                        yield ChatUpdate(content=full_response)

                    if chunk.done:
                        logger.info(
                            "Stream completed (%s)", chunk.done_reason or "done"
                        )
                        yield ChatUpdate(
                            content=full_response,
                            done=True,
                            done_reason=chunk.done_reason,
                            total_duration=chunk.total_duration,
                            eval_count=chunk.eval_count,
                        )
                        return

                logger.warning("Stream ended without a done chunk")
        except asyncio.CancelledError:
            logger.info("Chat request was cancelled")
            raise
        except httpx.ConnectError as e:
            logger.error("Cannot connect to Ollama at %s: %s", self.base_url, e)
            raise ServerNotRunningError() from e
        except asyncio.TimeoutError as e:
            logger.error("Chat request exceeded %ss", self.timeout)
            raise OllamaConnectionError() from e
        except httpx.TransportError as e:
            logger.error("Connection error during chat stream: %s", e)
            raise OllamaConnectionError() from e
        except httpx.DecodingError as e:
            logger.error("Undecodable chat stream: %s", e)
            raise InvalidResponseError() from e
        except httpx.RequestError as e:
            logger.error("Chat request failed: %s", e)
            raise OllamaConnectionError() from e

    @staticmethod
    async def _lines_until(
        resp: httpx.Response, deadline: float
    ) -> AsyncIterator[str]:
        """Yield response lines, raising asyncio.TimeoutError once the deadline passes."""
        loop = asyncio.get_running_loop()
        lines = resp.aiter_lines()

        async def next_line() -> Optional[str]:
            async for line in lines:
                return line
            return None

        while True:
            line = await asyncio.wait_for(next_line(), deadline - loop.time())
            if line is None:
                return
            yield line

    async def list_models(self) -> list[str]:
        """
        Fetch the names of the models available on the server.

        Raises:
            ServerNotRunningError: Server unreachable or answering 404/503.
            InvalidResponseError: Other non-200 status or unparsable body.
            OllamaConnectionError: Timeout or transport failure.
        """
        url = f"{self.base_url}/api/tags"
        logger.debug("Fetching models from: %s", url)

        try:
            response = await self.client.get(url, headers={"Connection": "close"})
        except httpx.ConnectError as e:
            logger.error("Cannot connect to Ollama at %s: %s", self.base_url, e)
            raise ServerNotRunningError() from e
        except httpx.TransportError as e:
            logger.error("Network error fetching models: %s", e)
            raise OllamaConnectionError() from e
        except httpx.DecodingError as e:
            logger.error("Undecodable model list: %s", e)
            raise InvalidResponseError() from e
        except httpx.RequestError as e:
            logger.error("Model list request failed: %s", e)
            raise OllamaConnectionError() from e

        self._check_status(response.status_code)

        try:
            data = ModelsResponse.model_validate_json(response.content)
        except ValidationError as e:
            logger.error("Unparsable model list: %s", e)
            raise InvalidResponseError() from e

        models = [m.name for m in data.models]
        logger.info("Found models: %s", models)
        return models

    async def is_available(self) -> bool:
        """Return True when the server answers the model listing."""
        try:
            await self.list_models()
        except OllamaError:
            return False
        return True

    async def aclose(self):
        """Close the HTTP client."""
        await self.client.aclose()

    @staticmethod
    def _check_status(status_code: int) -> None:
        if status_code in SERVER_DOWN_STATUSES:
            raise ServerNotRunningError()
        if status_code != 200:
            raise InvalidResponseError(
                f"Invalid response from Ollama server (HTTP {status_code})."
            )
