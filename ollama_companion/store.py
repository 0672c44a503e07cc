"""
Transcript store for Ollama Companion.
Persists one JSON record per conversation and keeps an in-memory index
ordered by most recent update.
"""

import logging
import os
import threading
from pathlib import Path
from typing import Optional, Union
from uuid import UUID

from pydantic import ValidationError

from ollama_companion.config import config
from ollama_companion.models import Conversation

logger = logging.getLogger(__name__)

RECORD_SUFFIX = ".json"


class StorageError(Exception):
    """A conversation record could not be written or removed."""


def _sorted_by_recency(conversations: list[Conversation]) -> list[Conversation]:
    return sorted(conversations, key=lambda c: c.updated_at, reverse=True)


class ConversationStore:
    """File-backed conversation store."""

    def __init__(self, directory: Optional[Path] = None):
        self.directory = Path(directory or config.CONVERSATIONS_DIR)
        self._lock = threading.Lock()
        self._conversations: list[Conversation] = []

    def initialize(self) -> None:
        """Create the storage directory and load existing records."""
        logger.info("Initializing conversation store at %s", self.directory)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create {self.directory}: {e}") from e

        loaded = self.load_all()
        with self._lock:
            self._conversations = loaded
        logger.info("Loaded %d conversations", len(loaded))

    @property
    def conversations(self) -> list[Conversation]:
        """Snapshot of the index, most recently updated first."""
        with self._lock:
            return list(self._conversations)

    def get(self, conversation_id: UUID) -> Optional[Conversation]:
        with self._lock:
            for conversation in self._conversations:
                if conversation.id == conversation_id:
                    return conversation
        return None

    def record_path(self, conversation_id: UUID) -> Path:
        return self.directory / f"{conversation_id}{RECORD_SUFFIX}"

    def save(self, conversation: Conversation) -> None:
        """
        Insert or replace a conversation record.

        The record is written to a temporary file and moved into place so
        a crash never leaves a half-written record behind. The index keeps
        its own copy, so later in-place edits by the caller are not visible
        until the next save.

        Raises:
            StorageError: If the record could not be written.
        """
        snapshot = conversation.model_copy(deep=True)
        path = self.record_path(snapshot.id)
        tmp_path = path.with_name(f".{path.name}.tmp")

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(snapshot.model_dump_json(indent=2), encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error("Error saving conversation %s: %s", snapshot.id, e)
            raise StorageError(f"Could not save conversation: {e}") from e

        with self._lock:
            others = [c for c in self._conversations if c.id != snapshot.id]
            self._conversations = _sorted_by_recency(others + [snapshot])

    def load_all(self) -> list[Conversation]:
        """
        Read every record in the storage directory.

        Unreadable or invalid records are skipped so one corrupt file
        cannot hide the rest of the list.
        """
        if not self.directory.is_dir():
            return []

        conversations = []
        for path in self.directory.iterdir():
            if path.name.startswith(".") or path.suffix != RECORD_SUFFIX:
                continue
            try:
                conversations.append(
                    Conversation.model_validate_json(path.read_text(encoding="utf-8"))
                )
            except (OSError, UnicodeDecodeError, ValidationError) as e:
                logger.warning("Skipping unreadable conversation record %s: %s", path.name, e)

        return _sorted_by_recency(conversations)

    def delete(self, conversation: Union[Conversation, UUID]) -> None:
        """
        Remove a conversation record. Deleting a missing record is a no-op.

        Raises:
            StorageError: If the record exists but could not be removed.
        """
        conversation_id = (
            conversation.id if isinstance(conversation, Conversation) else conversation
        )
        try:
            self.record_path(conversation_id).unlink(missing_ok=True)
        except OSError as e:
            logger.error("Error deleting conversation %s: %s", conversation_id, e)
            raise StorageError(f"Could not delete conversation: {e}") from e

        with self._lock:
            self._conversations = [
                c for c in self._conversations if c.id != conversation_id
            ]
