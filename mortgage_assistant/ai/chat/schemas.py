"""
Pydantic schemas for chat sessions and the chat endpoint.

This module contains the session state kept by the conversation store and
the request and response models of the chat API.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from mortgage_assistant.ai.base import ChatMessage

# ========== Session Schemas ==========


class SessionState(str, Enum):
    """Approval state of a session."""

    IDLE = "idle"
    AWAITING_APPROVAL = "awaiting_approval"


class PendingInterrupt(BaseModel):
    """A tool call paused until the user approves or rejects it."""

    interrupt: dict[str, Any] = Field(..., description="Provider descriptor of the paused tool call")
    tool_input: dict[str, Any] = Field(default_factory=dict, description="Arguments the model passed to the tool")
    previous_response: Any = Field(None, description="Provider conversation snapshot used to resume")


class Session(BaseModel):
    """Server-side conversation state for one session id."""

    session_id: str
    messages: list[ChatMessage] = Field(default_factory=list)
    pending_interrupt: PendingInterrupt | None = None

    @property
    def state(self) -> SessionState:
        if self.pending_interrupt is not None:
            return SessionState.AWAITING_APPROVAL
        return SessionState.IDLE


class ChatResult(BaseModel):
    """Outcome of one chat turn."""

    model_config = ConfigDict(populate_by_name=True)

    response: str = Field(..., description="Assistant reply or approval prompt")
    session_id: str = Field(..., alias="sessionId", description="Session the turn belongs to")
    requires_approval: bool = Field(
        False, alias="requiresApproval", description="True while a calculation awaits approval"
    )
    pending_calculation: dict[str, Any] | None = Field(
        None, alias="pendingCalculation", description="Tool input awaiting approval"
    )


# ========== Request Schemas ==========


class ApprovalDecision(BaseModel):
    """The user's answer to a pending calculation."""

    approved: bool = Field(..., description="True to run the calculation, False to cancel it")


class ChatRequest(BaseModel):
    """Request body of POST /chat."""

    model_config = ConfigDict(populate_by_name=True)

    message: str | None = Field(None, description="User message")
    session_id: str | None = Field(None, alias="sessionId", description="Existing session id")
    approval: ApprovalDecision | None = Field(None, description="Decision on a pending calculation")

    @model_validator(mode="after")
    def check_message_or_approval(self) -> "ChatRequest":
        if self.message is None and self.approval is None:
            raise ValueError("Either message or approval must be provided")
        if self.message is not None and self.approval is not None:
            raise ValueError("Provide either message or approval, not both")
        if self.message is not None and not self.message.strip():
            raise ValueError("message cannot be empty")
        if self.approval is not None and not self.session_id:
            raise ValueError("sessionId is required when approval is provided")
        return self


# ========== Response Schemas ==========


class ChatResponse(ChatResult):
    """Response body of POST /chat."""


class MessageResponse(BaseModel):
    """A stored conversation message."""

    role: str
    text: str


class SessionHistoryResponse(BaseModel):
    """Response body of GET /chat/{session_id}/history."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., alias="sessionId")
    state: SessionState
    messages: list[MessageResponse]
    pending_calculation: dict[str, Any] | None = Field(None, alias="pendingCalculation")
