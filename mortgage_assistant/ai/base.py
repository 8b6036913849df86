"""Base classes for AI provider abstraction."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Literal, Protocol

from pydantic import BaseModel, ConfigDict


class MessageRole(str, Enum):
    """Author of a conversation message."""

    USER = "user"
    MODEL = "model"


class ChatMessage(BaseModel):
    """A single message in a conversation, immutable once created."""

    model_config = ConfigDict(frozen=True)

    role: MessageRole
    text: str


class CompletedTurn(BaseModel):
    """Provider finished the turn with plain text."""

    kind: Literal["completed"] = "completed"
    text: str


class ApprovalRequiredTurn(BaseModel):
    """Provider paused because a tool call needs the user's approval.

    ``interrupt`` identifies the paused tool call, ``raw_response`` is the
    provider-side conversation snapshot needed to resume it later.
    """

    kind: Literal["approval_required"] = "approval_required"
    interrupt: dict[str, Any]
    tool_input: dict[str, Any]
    prompt_text: str
    raw_response: Any = None


GenerationOutcome = CompletedTurn | ApprovalRequiredTurn


class Tool(Protocol):
    """A function the model may call, optionally gated by human approval."""

    name: str
    description: str

    def parameters_schema(self) -> dict[str, Any]: ...

    def requires_approval(self, tool_input: dict[str, Any]) -> bool: ...

    def run(self, tool_input: dict[str, Any]) -> dict[str, Any]: ...

    def cancel(self, tool_input: dict[str, Any]) -> dict[str, Any]: ...

    def describe_request(self, tool_input: dict[str, Any]) -> str: ...


class AIProvider(ABC):
    """Abstract base class for AI providers.

    Provides the two operations the chat service depends on: generating a
    reply that may pause for tool approval, and resuming a paused generation
    with the user's decision.
    """

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        history: list[ChatMessage] | None,
        tool: Tool,
    ) -> GenerationOutcome:
        """Generate a reply to ``prompt``.

        Args:
            prompt: The user's latest message
            history: Prior messages of the conversation, oldest first
            tool: Tool the model is allowed to call

        Returns:
            CompletedTurn or ApprovalRequiredTurn
        """
        pass

    @abstractmethod
    async def resume(
        self,
        interrupt: dict[str, Any],
        approved: bool,
        raw_response: Any,
        tool: Tool,
    ) -> str:
        """Continue a paused generation.

        Args:
            interrupt: Descriptor returned in ApprovalRequiredTurn.interrupt
            approved: The user's decision
            raw_response: Snapshot returned in ApprovalRequiredTurn.raw_response
            tool: The tool that was interrupted

        Returns:
            str: Final reply text
        """
        pass

