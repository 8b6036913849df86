"""FastAPI router for the mortgage assistant chat."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from mortgage_assistant.ai.chat.dependencies import get_chat_service
from mortgage_assistant.ai.chat.schemas import (
    ChatRequest,
    ChatResponse,
    MessageResponse,
    SessionHistoryResponse,
)
from mortgage_assistant.ai.chat.service import MortgageChatService
from mortgage_assistant.utils.logger import logger

router = APIRouter(prefix="/chat", tags=["Chat"])


@router.post("", response_model=ChatResponse, response_model_exclude_none=True)
async def chat(
    request: ChatRequest,
    response: Response,
    chat_service: Annotated[MortgageChatService, Depends(get_chat_service)],
) -> ChatResponse:
    """
    Send a message to the mortgage assistant or resolve a pending calculation.

    Args:
        request: Either a message or an approval decision for an existing session
        response: Outgoing response, used to set the session header
        chat_service: Chat service dependency

    Returns:
        ChatResponse: Assistant reply with the session id and approval status
    """
    logger.info(
        "Chat request",
        session_id=request.session_id or "none",
        is_approval=request.approval is not None,
    )

    result = await chat_service.execute(
        message=request.message,
        session_id=request.session_id,
        approval=request.approval.approved if request.approval else None,
    )

    response.headers["x-session-id"] = result.session_id
    return ChatResponse.model_validate(result.model_dump())


@router.get(
    "/{session_id}/history",
    response_model=SessionHistoryResponse,
    response_model_exclude_none=True,
)
async def get_history(
    session_id: str,
    chat_service: Annotated[MortgageChatService, Depends(get_chat_service)],
) -> SessionHistoryResponse:
    """
    Get the messages and approval state of a session.

    Raises:
        SessionNotFoundError: If the session id is unknown (404)
    """
    session = chat_service.get_session(session_id)
    pending = session.pending_interrupt
    return SessionHistoryResponse(
        session_id=session.session_id,
        state=session.state,
        messages=[
            MessageResponse(role=message.role.value, text=message.text)
            for message in session.messages
        ],
        pending_calculation=pending.tool_input if pending else None,
    )
