"""
Mortgage chat service.

Coordinates one chat turn: picks between a new session, a continuing
session and the resumption of a calculation waiting for approval, calls the
AI provider and writes the outcome back to the conversation store.
"""

import asyncio
import uuid
from http import HTTPStatus

from mortgage_assistant.ai.base import (
    AIProvider,
    ApprovalRequiredTurn,
    ChatMessage,
    MessageRole,
    Tool,
)
from mortgage_assistant.ai.chat.schemas import ChatResult, PendingInterrupt, Session
from mortgage_assistant.ai.chat.store import ConversationStore
from mortgage_assistant.exceptions import (
    AIGenerationError,
    AppError,
    RepositoryError,
    SessionNotFoundError,
    ValidationError,
)
from mortgage_assistant.utils.logger import crop_text, logger

APPROVED_MESSAGE = "Yes, proceed with the calculation"
REJECTED_MESSAGE = "No, cancel the calculation"


class MortgageChatService:
    """Service for the mortgage assistant chat with human approval of calculations."""

    def __init__(
        self,
        store: ConversationStore,
        provider: AIProvider,
        tool: Tool,
    ):
        """
        Initialize the chat service.

        Args:
            store: Conversation store holding session history
            provider: AI provider that generates replies and resumes interrupts
            tool: Tool the assistant may call (the mortgage calculator)
        """
        self.store = store
        self.provider = provider
        self.tool = tool
        self._session_locks: dict[str, asyncio.Lock] = {}

    async def execute(
        self,
        message: str | None,
        session_id: str | None = None,
        approval: bool | None = None,
    ) -> ChatResult:
        """
        Run one chat turn.

        Args:
            message: User message (ignored when resolving an approval)
            session_id: Existing session id, or None to start a new session
            approval: The user's decision on a pending calculation

        Returns:
            ChatResult: Reply, session id and approval status
        """
        operation = "resume" if approval is not None else "chat"
        try:
            if approval is not None:
                if session_id is None:
                    raise ValidationError("Session ID is required to resolve an approval")
                lock = self._lock_for_existing_session(session_id)
                if lock is None:
                    raise RepositoryError(
                        "No pending approval found for this session", HTTPStatus.BAD_REQUEST
                    )
                async with lock:
                    return await self._resume_with_approval(session_id, approval)

            if not message or not message.strip():
                raise ValidationError("Message cannot be empty")

            lock = self._lock_for_existing_session(session_id) if session_id else None
            if lock is None:
                return await self._chat_turn(message, None)

            async with lock:
                return await self._chat_turn(message, session_id)

        except AppError as e:
            logger.error(
                "Chat turn failed",
                layer="chat_service",
                operation=operation,
                session_id=session_id or "none",
                error=e.message,
                error_type=type(e).__name__,
            )
            raise
        except Exception as e:
            logger.exception(
                "Unexpected error in chat turn",
                layer="chat_service",
                operation=operation,
                session_id=session_id or "none",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise AIGenerationError(str(e)) from e

    def _lock_for_existing_session(self, session_id: str) -> asyncio.Lock | None:
        # Locks exist only for stored sessions; unknown ids never get one
        if self.store.get_history(session_id) is None:
            return None
        return self._session_locks.setdefault(session_id, asyncio.Lock())

    async def _chat_turn(self, message: str, session_id: str | None) -> ChatResult:
        history = self.store.get_history(session_id) if session_id else None

        if history is None:
            session_id = str(uuid.uuid4())
            logger.info("Starting new session", session_id=session_id)
            context = None
        else:
            logger.info(
                "Continuing session",
                session_id=session_id,
                message_count=len(history.messages),
            )
            context = history.messages

        logger.info("[USER_INPUT]", session_id=session_id, input=crop_text(message))
        outcome = await self.provider.generate(message, context, self.tool)

        if isinstance(outcome, ApprovalRequiredTurn):
            self.store.set_history(
                Session(
                    session_id=session_id,
                    messages=[
                        ChatMessage(role=MessageRole.USER, text=message),
                        ChatMessage(role=MessageRole.MODEL, text=outcome.prompt_text),
                    ],
                    pending_interrupt=PendingInterrupt(
                        interrupt=outcome.interrupt,
                        tool_input=outcome.tool_input,
                        previous_response=outcome.raw_response,
                    ),
                )
            )
            logger.info(
                "Calculation awaiting approval",
                session_id=session_id,
                tool_input=outcome.tool_input,
            )
            return ChatResult(
                response=outcome.prompt_text,
                session_id=session_id,
                requires_approval=True,
                pending_calculation=outcome.tool_input,
            )

        self.store.set_history(
            Session(
                session_id=session_id,
                messages=[
                    ChatMessage(role=MessageRole.USER, text=message),
                    ChatMessage(role=MessageRole.MODEL, text=outcome.text),
                ],
            )
        )
        logger.info("[AGENT_OUTPUT]", session_id=session_id, output=crop_text(outcome.text))
        return ChatResult(response=outcome.text, session_id=session_id)

    async def _resume_with_approval(self, session_id: str, approved: bool) -> ChatResult:
        session = self.store.get_history(session_id)
        if session is None or session.pending_interrupt is None:
            raise RepositoryError(
                "No pending approval found for this session", HTTPStatus.BAD_REQUEST
            )

        pending = session.pending_interrupt
        logger.info("Resolving pending approval", session_id=session_id, approved=approved)

        text = await self.provider.resume(
            pending.interrupt, approved, pending.previous_response, self.tool
        )

        self.store.set_history(
            Session(
                session_id=session_id,
                messages=[
                    ChatMessage(
                        role=MessageRole.USER,
                        text=APPROVED_MESSAGE if approved else REJECTED_MESSAGE,
                    ),
                    ChatMessage(role=MessageRole.MODEL, text=text),
                ],
                pending_interrupt=None,
            )
        )
        logger.info("[AGENT_OUTPUT]", session_id=session_id, output=crop_text(text))
        return ChatResult(response=text, session_id=session_id)

    def get_session(self, session_id: str) -> Session:
        """
        Get the stored session.

        Raises:
            SessionNotFoundError: If the session id is unknown
        """
        session = self.store.get_history(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session
