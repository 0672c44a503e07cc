"""
Conversation routes: /conversations, /conversations/{id}, /conversations/{id}/open
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from ollama_companion.api.dependencies import get_controller, get_store
from ollama_companion.api.models.conversations import (
    ConversationListResponse,
    ConversationSummary,
)
from ollama_companion.api.models.session import SessionResponse
from ollama_companion.models import Conversation
from ollama_companion.session import SessionController
from ollama_companion.store import ConversationStore, StorageError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Conversations"])


def session_response(controller: SessionController) -> SessionResponse:
    return SessionResponse(
        state=controller.state,
        selected_model=controller.selected_model,
        error_message=controller.error_message,
        conversation=controller.current_conversation,
    )


def _require_conversation(store: ConversationStore, conversation_id: UUID) -> Conversation:
    conversation = store.get(conversation_id)
    if conversation is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return conversation


@router.get("/conversations", response_model=ConversationListResponse)
async def list_conversations(store: ConversationStore = Depends(get_store)):
    """
    List saved conversations, most recently updated first.
    """
    summaries = [ConversationSummary.from_conversation(c) for c in store.conversations]
    return ConversationListResponse(conversations=summaries, count=len(summaries))


@router.post("/conversations/new", response_model=SessionResponse)
async def start_new_conversation(controller: SessionController = Depends(get_controller)):
    """
    Clear the session. The next message starts a new conversation.
    """
    controller.start_new_conversation()
    return session_response(controller)


@router.get("/conversations/{conversation_id}", response_model=Conversation)
async def get_conversation(
    conversation_id: UUID,
    store: ConversationStore = Depends(get_store),
):
    """
    Get a conversation with all messages.
    """
    return _require_conversation(store, conversation_id)


@router.post("/conversations/{conversation_id}/open", response_model=SessionResponse)
async def open_conversation(
    conversation_id: UUID,
    controller: SessionController = Depends(get_controller),
    store: ConversationStore = Depends(get_store),
):
    """
    Make a saved conversation the current session.
    """
    controller.load_conversation(_require_conversation(store, conversation_id))
    return session_response(controller)


@router.delete("/conversations/{conversation_id}")
async def delete_conversation(
    conversation_id: UUID,
    controller: SessionController = Depends(get_controller),
    store: ConversationStore = Depends(get_store),
):
    """
    Delete a conversation.
    """
    _require_conversation(store, conversation_id)
    try:
        controller.delete_conversation(conversation_id)
    except StorageError as e:
        logger.error("Delete conversation error: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
    return {"id": str(conversation_id), "status": "deleted"}
