"""AI provider implementations."""

from mortgage_assistant.ai.providers.gemini import GeminiProvider

__all__ = ["GeminiProvider"]
