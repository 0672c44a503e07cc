"""
Session controller for Ollama Companion.

Owns the active conversation and runs at most one streaming generation at
a time. All state changes happen on the event loop that calls into the
controller; the streaming request runs as an asyncio task whose updates
are folded into the assistant placeholder by message id.
"""

import asyncio
import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional
from uuid import UUID

from ollama_companion.config import ChatSettings
from ollama_companion.models import Conversation, Message, Role
from ollama_companion.ollama_client import OllamaClient, OllamaError
from ollama_companion.prompts import LocationProvider, build_system_prompt
from ollama_companion.store import ConversationStore, StorageError

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"


class GenerationStatus(str, Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class GenerationResult:
    """Outcome of one generation request."""
    status: GenerationStatus
    message_id: Optional[UUID] = None
    error: Optional[OllamaError] = None


ChangeListener = Callable[[Optional[Conversation]], None]


class SessionController:
    """Manages the current conversation and its in-flight generation."""

    def __init__(
        self,
        client: OllamaClient,
        store: ConversationStore,
        settings: Optional[ChatSettings] = None,
        location_provider: Optional[LocationProvider] = None,
        on_change: Optional[ChangeListener] = None,
    ):
        self.client = client
        self.store = store
        self.settings = settings or ChatSettings.from_config()
        self.location_provider = location_provider
        self.on_change = on_change

        self.selected_model = self.settings.default_model
        self.available_models: list[str] = []
        self.current_conversation: Optional[Conversation] = None
        self.error_message: Optional[str] = None

        self._request_ids = itertools.count(1)
        self._active_request: Optional[int] = None
        self._pending_message_id: Optional[UUID] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def state(self) -> SessionState:
        if self._active_request is None:
            return SessionState.IDLE
        return SessionState.GENERATING

    @property
    def is_generating(self) -> bool:
        return self._active_request is not None

    @property
    def messages(self) -> list[Message]:
        if self.current_conversation is None:
            return []
        return self.current_conversation.messages

    # Models

    async def fetch_models(self) -> list[str]:
        """Refresh the available model list, reporting failures via error_message."""
        try:
            return await self.refresh_models()
        except OllamaError as e:
            logger.error("Error fetching models: %s", e)
            self.error_message = e.user_message
            return []

    async def refresh_models(self) -> list[str]:
        """
        Refresh the available model list from the server.

        Raises:
            OllamaError: If the server could not be queried.
        """
        models = await self.client.list_models()
        self.available_models = models
        # Only switch models when the selected one is gone and there is an alternative
        if models and self.selected_model not in models:
            logger.info(
                "Model %s not available, switching to %s", self.selected_model, models[0]
            )
            self.selected_model = models[0]
        return models

    def select_model(self, model: str) -> None:
        """Choose the model for the next request. The in-flight one is unaffected."""
        self.selected_model = model

    # Generation

    def submit(self, content: str) -> Optional[asyncio.Task]:
        """
        Start generating a reply to ``content``.

        Must be called from the running event loop. Returns the generation
        task, which resolves to a GenerationResult, or None when the
        message is blank or a generation is already in flight.
        """
        if not content.strip():
            return None
        if self.is_generating:
            logger.warning("Rejecting message: a generation is already in progress")
            return None

        self.error_message = None
        model = self.selected_model
        user_message = Message.create(Role.USER, content)
        placeholder = Message(role=Role.ASSISTANT)

        if self.current_conversation is None:
            self.current_conversation = Conversation(
                model=model,
                messages=[user_message, placeholder],
            )
            logger.info("Created conversation %s", self.current_conversation.id)
        else:
            self.current_conversation.messages.extend([user_message, placeholder])
            self.current_conversation.model = model

        history = self.current_conversation.history(exclude=placeholder.id)
        self._persist()

        request_id = next(self._request_ids)
        self._active_request = request_id
        self._pending_message_id = placeholder.id
        self._task = asyncio.create_task(
            self._run_generation(
                request_id, placeholder.id, history, model, self._system_prompt()
            )
        )
        return self._task

    async def send_message(self, content: str) -> Optional[GenerationResult]:
        """Submit ``content`` and wait for the generation to finish."""
        task = self.submit(content)
        if task is None:
            return None
        message_id = self._pending_message_id

        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            if self._task is task:
                self.cancel()
            raise

        if task.cancelled():
            return GenerationResult(GenerationStatus.CANCELLED, message_id)
        return task.result()

    def cancel(self) -> bool:
        """
        Stop the in-flight generation.

        Updates from the cancelled request are ignored from here on. An
        assistant placeholder that never received content is removed.
        Returns False when nothing was generating.
        """
        if self._active_request is None:
            return False

        logger.info("Cancelling generation %s", self._active_request)
        task = self._task
        message_id = self._pending_message_id
        self._clear_request()

        if task is not None and not task.done():
            task.cancel()

        self._discard_if_empty(message_id)
        self._persist()
        return True

    async def _run_generation(
        self,
        request_id: int,
        message_id: UUID,
        history: list[dict[str, str]],
        model: str,
        system_prompt: Optional[str],
    ) -> GenerationResult:
        status: Optional[GenerationStatus] = None
        error: Optional[OllamaError] = None
        try:
            async for update in self.client.stream_chat(
                history,
                model=model,
                system_prompt=system_prompt,
                temperature=self.settings.temperature,
                max_tokens=self.settings.max_tokens,
            ):
                self._apply_update(request_id, message_id, update.content)
            status = GenerationStatus.COMPLETED
        except OllamaError as e:
            status, error = GenerationStatus.FAILED, e
            if request_id == self._active_request:
                logger.error("Generation failed: %s", e)
                self.error_message = e.user_message
        finally:
            # A cancelled request was already settled by cancel()
            if request_id == self._active_request:
                self._clear_request()
                if status is not GenerationStatus.COMPLETED:
                    self._discard_if_empty(message_id)
                self._persist()

        return GenerationResult(status, message_id, error)

    def _apply_update(self, request_id: int, message_id: UUID, content: str) -> None:
        if request_id != self._active_request or self.current_conversation is None:
            logger.debug("Discarding stale update from request %s", request_id)
            return

        message = self.current_conversation.get_message(message_id)
        if message is None:
            return
        message.set_content(content)
        self._persist()

    def _clear_request(self) -> None:
        self._active_request = None
        self._pending_message_id = None
        self._task = None

    def _discard_if_empty(self, message_id: Optional[UUID]) -> None:
        if self.current_conversation is None or message_id is None:
            return
        message = self.current_conversation.get_message(message_id)
        if message is not None and not message.is_user and message.is_empty:
            self.current_conversation.remove_message(message_id)

    def _system_prompt(self) -> Optional[str]:
        location = None
        if self.settings.include_location and self.location_provider is not None:
            location = self.location_provider.current_location()
        return build_system_prompt(self.settings, location=location)

    # Conversations

    def load_conversation(self, conversation: Conversation) -> None:
        """Make ``conversation`` the current one, saving the previous one first."""
        current = self.current_conversation
        if current is not None and current.id == conversation.id:
            return

        if self.is_generating:
            self.cancel()
        self._save_current()

        self.current_conversation = conversation.model_copy(deep=True)
        self.selected_model = conversation.model
        self.error_message = None
        self._notify()

    def start_new_conversation(self) -> None:
        """Clear the session; the next message starts a new conversation."""
        if self.is_generating:
            self.cancel()
        self._save_current()

        self.current_conversation = None
        self.error_message = None
        self._notify()

    def delete_conversation(self, conversation_id: UUID) -> None:
        """
        Delete a conversation. Deleting the current one clears the session.

        Raises:
            StorageError: If the record could not be removed.
        """
        current = self.current_conversation
        if current is not None and current.id == conversation_id:
            if self.is_generating:
                self.cancel()
            self.current_conversation = None

        self.store.delete(conversation_id)
        self._notify()

    # Persistence

    def _persist(self) -> None:
        conversation = self.current_conversation
        if conversation is None:
            return

        conversation.refresh_title()
        conversation.touch()
        self._save(conversation)
        self._notify()

    def _save_current(self) -> None:
        if self.current_conversation is not None:
            self._save(self.current_conversation)

    def _save(self, conversation: Conversation) -> None:
        try:
            self.store.save(conversation)
        except StorageError as e:
            # In-memory state is kept; the next save retries the write
            logger.error("Could not persist conversation %s: %s", conversation.id, e)
            self.error_message = str(e)

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change(self.current_conversation)
