"""
Session routes: /session, /session/messages, /session/stop
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from ollama_companion.api.dependencies import get_controller, ollama_http_error
from ollama_companion.api.models.session import (
    MessageSubmit,
    SessionResponse,
    StopResponse,
    SubmitResponse,
)
from ollama_companion.api.routes.conversations import session_response
from ollama_companion.session import GenerationStatus, SessionController

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Session"])


@router.get("/session", response_model=SessionResponse)
async def get_session(controller: SessionController = Depends(get_controller)):
    """
    Current session state, including the conversation being generated.
    """
    return session_response(controller)


@router.post("/session/messages", response_model=SubmitResponse)
async def send_message(
    request: MessageSubmit,
    wait: bool = Query(False, description="Wait for the reply to finish"),
    controller: SessionController = Depends(get_controller),
):
    """
    Send a user message and start generating the assistant reply.

    Without ``wait`` the call returns as soon as generation has started;
    poll ``/session`` for progress.
    """
    if not request.content.strip():
        raise HTTPException(status_code=400, detail="Message must not be empty")
    if controller.is_generating:
        raise HTTPException(status_code=409, detail="A reply is already being generated")

    if not wait:
        controller.submit(request.content)
        return SubmitResponse(
            status="started",
            message_id=controller.messages[-1].id,
            conversation=controller.current_conversation,
        )

    result = await controller.send_message(request.content)
    if result.status is GenerationStatus.FAILED:
        raise ollama_http_error(result.error)
    return SubmitResponse(
        status=result.status.value,
        message_id=result.message_id,
        conversation=controller.current_conversation,
    )


@router.post("/session/stop", response_model=StopResponse)
async def stop_generation(controller: SessionController = Depends(get_controller)):
    """
    Stop the reply currently being generated.
    """
    return StopResponse(cancelled=controller.cancel())
