"""Gemini AI integration package."""

from mortgage_assistant.ai.gemini.config import (
    GeminiSettings,
    get_gemini_settings,
    set_gemini_settings,
)
from mortgage_assistant.ai.gemini.exceptions import (
    GeminiAuthenticationError,
    GeminiContentGenerationError,
    GeminiError,
    GeminiToolLoopError,
)

__all__ = [
    "GeminiAuthenticationError",
    "GeminiContentGenerationError",
    "GeminiError",
    "GeminiSettings",
    "GeminiToolLoopError",
    "get_gemini_settings",
    "set_gemini_settings",
]
