"""
Conversation data model for Ollama Companion.
Messages and conversations are pydantic models so the transcript store
and the API share one serialization.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from ollama_companion.thinking import parse_thinking

NEW_CONVERSATION_TITLE = "New Conversation"
TITLE_WORD_LIMIT = 6


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Role(str, Enum):
    """Author of a message."""
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """One turn in a conversation."""

    model_config = ConfigDict(validate_assignment=True)

    id: UUID = Field(default_factory=uuid4, frozen=True)
    role: Role = Field(frozen=True)
    content: str = ""
    thinking_content: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now, frozen=True)
    show_thinking: bool = False

    @classmethod
    def create(cls, role: Role, content: str = "") -> "Message":
        """Create a message, splitting any thinking block out of ``content``."""
        message = cls(role=role)
        message.set_content(content)
        return message

    @property
    def is_user(self) -> bool:
        return self.role is Role.USER

    @property
    def is_empty(self) -> bool:
        """True when neither visible text nor reasoning has arrived."""
        return not self.content and not self.thinking_content

    def set_content(self, raw: str) -> None:
        """Replace the content, re-deriving the thinking segment."""
        split = parse_thinking(raw)
        self.content = split.content
        self.thinking_content = split.thinking


class Conversation(BaseModel):
    """An ordered chat transcript plus its metadata."""

    model_config = ConfigDict(validate_assignment=True)

    id: UUID = Field(default_factory=uuid4, frozen=True)
    title: str = NEW_CONVERSATION_TITLE
    model: str
    created_at: datetime = Field(default_factory=utc_now, frozen=True)
    updated_at: datetime = Field(default_factory=utc_now)
    messages: list[Message] = Field(default_factory=list)

    def index_of(self, message_id: UUID) -> Optional[int]:
        for index, message in enumerate(self.messages):
            if message.id == message_id:
                return index
        return None

    def get_message(self, message_id: UUID) -> Optional[Message]:
        index = self.index_of(message_id)
        return None if index is None else self.messages[index]

    def remove_message(self, message_id: UUID) -> bool:
        index = self.index_of(message_id)
        if index is None:
            return False
        del self.messages[index]
        return True

    def refresh_title(self) -> None:
        self.title = generate_title(self.messages)

    def touch(self) -> None:
        """Bump ``updated_at`` to now."""
        self.updated_at = utc_now()

    def history(self, exclude: Optional[UUID] = None) -> list[dict[str, str]]:
        """
        Role/content pairs replayed as context on a generation request.

        Only visible content is included; reasoning segments of earlier
        assistant turns are never sent back to the model.
        """
        return [
            {"role": message.role.value, "content": message.content}
            for message in self.messages
            if message.id != exclude
        ]


def generate_title(messages: list[Message]) -> str:
    """Create a title from the first few words of the first message."""
    if not messages:
        return NEW_CONVERSATION_TITLE

    content = messages[0].content
    words = " ".join([word for word in content.split(" ") if word][:TITLE_WORD_LIMIT])
    return words + ("..." if len(content) > len(words) else "")
