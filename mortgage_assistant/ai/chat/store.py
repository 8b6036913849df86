"""
In-memory conversation store.

Keeps one Session per session id for the lifetime of the process. Nothing
is persisted and sessions are never evicted.
"""

from mortgage_assistant.ai.chat.schemas import Session
from mortgage_assistant.exceptions import ValidationError
from mortgage_assistant.utils.logger import logger


class ConversationStore:
    """Mapping of session id to conversation history and pending approval."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def list_session_ids(self) -> list[str]:
        return list(self._sessions)

    def get_history(self, session_id: str) -> Session | None:
        """
        Get a copy of the stored session.

        Args:
            session_id: Session id to look up

        Returns:
            Session | None: The session, or None when the id is unknown

        Raises:
            ValidationError: If session_id is empty or blank
        """
        if not session_id or not session_id.strip():
            raise ValidationError("Session ID cannot be empty")

        session = self._sessions.get(session_id)
        if session is None:
            logger.info("[ConversationStore] Session not found", session_id=session_id)
            return None
        return session.model_copy(deep=True)

    def set_history(self, session: Session) -> None:
        """
        Insert a session or merge it into the stored one.

        New messages are appended after the stored ones, and the stored
        pending interrupt is replaced by the incoming value, so passing
        ``pending_interrupt=None`` clears it.

        Args:
            session: Session carrying the messages of the current turn
        """
        if not session.session_id or not session.session_id.strip():
            raise ValidationError("Session ID cannot be empty")

        incoming = session.model_copy(deep=True)
        stored = self._sessions.get(session.session_id)

        if stored is None:
            self._sessions[session.session_id] = incoming
            logger.info(
                "[ConversationStore] Created session",
                session_id=session.session_id,
                message_count=len(incoming.messages),
            )
            return

        stored.messages.extend(incoming.messages)
        stored.pending_interrupt = incoming.pending_interrupt
        logger.info(
            "[ConversationStore] Updated session",
            session_id=session.session_id,
            message_count=len(stored.messages),
            state=stored.state.value,
        )
