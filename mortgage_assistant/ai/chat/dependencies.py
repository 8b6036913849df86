"""
FastAPI dependencies for the mortgage chat.

The conversation store and the chat service are process-wide singletons:
sessions live in memory for the lifetime of the process.
"""

from fastapi import Depends

from mortgage_assistant.ai.base import AIProvider
from mortgage_assistant.ai.chat.config import get_chat_settings
from mortgage_assistant.ai.chat.service import MortgageChatService
from mortgage_assistant.ai.chat.store import ConversationStore
from mortgage_assistant.ai.providers.gemini import GeminiProvider
from mortgage_assistant.config import get_app_settings
from mortgage_assistant.tools.mortgage_calculator import MortgageCalculatorTool
from mortgage_assistant.utils.logger import logger

_conversation_store: ConversationStore | None = None
_ai_provider: AIProvider | None = None
_chat_service: MortgageChatService | None = None


def get_conversation_store() -> ConversationStore:
    """
    Get or create the conversation store singleton.

    Returns:
        ConversationStore: The in-memory store
    """
    global _conversation_store
    if _conversation_store is None:
        _conversation_store = ConversationStore()
        logger.info("Initialized ConversationStore")
    return _conversation_store


def get_ai_provider() -> AIProvider:
    """
    Get or create the AI provider singleton.

    Returns:
        AIProvider: The configured provider
    """
    global _ai_provider
    if _ai_provider is None:
        project_name = get_app_settings().braintrust_project_name
        _ai_provider = GeminiProvider(
            enable_braintrust=project_name is not None,
            braintrust_project_name=project_name,
        )
        logger.info("Initialized GeminiProvider", braintrust_enabled=project_name is not None)
    return _ai_provider


def get_chat_service(
    store: ConversationStore = Depends(get_conversation_store),
    provider: AIProvider = Depends(get_ai_provider),
) -> MortgageChatService:
    """
    Get or create the chat service singleton.

    Args:
        store: The conversation store from dependency injection
        provider: The AI provider from dependency injection

    Returns:
        MortgageChatService: The chat service instance
    """
    global _chat_service
    if _chat_service is None:
        tool = MortgageCalculatorTool(
            require_approval=get_chat_settings().require_approval
        )
        _chat_service = MortgageChatService(store, provider, tool)
        logger.info("Initialized MortgageChatService")
    return _chat_service
