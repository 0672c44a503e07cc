"""
Conversation-related API models.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from ollama_companion.models import Conversation


class ConversationSummary(BaseModel):
    """Conversation list entry."""
    id: UUID
    title: str
    model: str
    created_at: datetime
    updated_at: datetime
    message_count: int

    @classmethod
    def from_conversation(cls, conversation: Conversation) -> "ConversationSummary":
        return cls(
            id=conversation.id,
            title=conversation.title,
            model=conversation.model,
            created_at=conversation.created_at,
            updated_at=conversation.updated_at,
            message_count=len(conversation.messages),
        )


class ConversationListResponse(BaseModel):
    """Conversations, most recently updated first."""
    conversations: list[ConversationSummary]
    count: int
