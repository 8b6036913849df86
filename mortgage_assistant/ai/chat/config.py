"""
Configuration for the mortgage chat service.

Loaded from environment variables prefixed with ``CHAT_``.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from mortgage_assistant.utils.logger import logger


class ChatSettings(BaseSettings):
    """Configuration for the chat service using Pydantic settings."""

    model_config = SettingsConfigDict(
        case_sensitive=False, extra="ignore", env_prefix="CHAT_", env_file=".env"
    )

    require_approval: bool = Field(
        default=True,
        description="Pause every mortgage calculation until the user approves it",
    )


_chat_settings: ChatSettings | None = None


def get_chat_settings() -> ChatSettings:
    """
    Get the global chat settings instance.

    Returns:
        ChatSettings: The global settings instance
    """
    global _chat_settings
    if _chat_settings is None:
        _chat_settings = ChatSettings()
        logger.info(
            "Chat settings loaded", require_approval=_chat_settings.require_approval
        )
    return _chat_settings


def set_chat_settings(settings: ChatSettings) -> None:
    """
    Set the global chat settings instance.

    Args:
        settings: The settings to set
    """
    global _chat_settings
    _chat_settings = settings
