"""Application error taxonomy.

Every error raised on purpose by the service derives from ``AppError`` and
carries the HTTP status code the transport layer should answer with.
"""

from http import HTTPStatus


class AppError(Exception):
    """Base exception for all application errors."""

    def __init__(
        self,
        message: str,
        status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR,
        is_operational: bool = True,
    ) -> None:
        """Initialize AppError.

        Args:
            message: Human readable error message
            status_code: HTTP status code the error maps to
            is_operational: False for programming errors that should never reach a client
        """
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.is_operational = is_operational

    def __str__(self) -> str:
        return self.message

    @property
    def public_message(self) -> str:
        """Message safe to return to API clients."""
        if self.status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
            return "Internal server error"
        return self.message


class ValidationError(AppError):
    """Raised for bad or missing input (400)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, HTTPStatus.BAD_REQUEST)


class RepositoryError(AppError):
    """Raised for conversation store and session state failures."""

    def __init__(
        self, message: str, status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR
    ) -> None:
        super().__init__(message, status_code)


class SessionNotFoundError(AppError):
    """Raised when a session id does not resolve to a stored session (404)."""

    def __init__(self, session_id: str) -> None:
        super().__init__(
            f"Session with ID {session_id} not found", HTTPStatus.NOT_FOUND
        )
        self.session_id = session_id


class AIGenerationError(AppError):
    """Raised when the AI provider produced no usable output (500)."""

    def __init__(self, message: str) -> None:
        super().__init__(f"AI generation failed: {message}")

    @property
    def public_message(self) -> str:
        return "AI generation failed"
