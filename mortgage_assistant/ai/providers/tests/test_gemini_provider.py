"""Tests for GeminiProvider with a mocked google-genai client."""

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from google.genai import types

from mortgage_assistant.ai.base import (
    ApprovalRequiredTurn,
    ChatMessage,
    CompletedTurn,
    MessageRole,
)
from mortgage_assistant.ai.gemini.config import GeminiSettings
from mortgage_assistant.ai.gemini.exceptions import (
    GeminiContentGenerationError,
    GeminiError,
    GeminiToolLoopError,
)
from mortgage_assistant.ai.providers.gemini import GeminiProvider
from mortgage_assistant.tools.mortgage_calculator import MortgageCalculatorTool

TOOL_INPUT = {
    "homePrice": 300000,
    "downPayment": 60000,
    "loanTerm": 30,
    "interestRate": 6,
    "zipCode": "94105",
}


def text_response(text: str) -> types.GenerateContentResponse:
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(
                content=types.Content(role="model", parts=[types.Part(text=text)])
            )
        ]
    )


def function_call_response(
    args: dict, text: str | None = None, name: str = "mortgageCalculator"
) -> types.GenerateContentResponse:
    parts = [types.Part(text=text)] if text else []
    parts.append(
        types.Part(function_call=types.FunctionCall(id="call-1", name=name, args=args))
    )
    return types.GenerateContentResponse(
        candidates=[types.Candidate(content=types.Content(role="model", parts=parts))]
    )


def function_responses(contents: list[types.Content]) -> list[types.FunctionResponse]:
    return [
        part.function_response
        for content in contents
        for part in content.parts or []
        if part.function_response
    ]


@pytest.fixture
def genai_client():
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock()
    return client


@pytest.fixture
def provider(genai_client):
    settings = GeminiSettings(api_key="test-key", model_name="gemini-test", max_tool_rounds=3)
    return GeminiProvider(settings=settings, client=genai_client)


@pytest.fixture
def tool():
    return MortgageCalculatorTool()


class TestGenerate:
    @pytest.mark.asyncio
    async def test_plain_text_completes_turn(self, provider, genai_client, tool):
        genai_client.aio.models.generate_content.return_value = text_response(
            "A fixed-rate mortgage keeps the same rate for the whole term."
        )
        history = [
            ChatMessage(role=MessageRole.USER, text="Hi"),
            ChatMessage(role=MessageRole.MODEL, text="Hello! How can I help?"),
        ]

        outcome = await provider.generate("What is a fixed-rate mortgage?", history, tool)

        assert isinstance(outcome, CompletedTurn)
        assert outcome.text.startswith("A fixed-rate mortgage")

        call = genai_client.aio.models.generate_content.call_args
        assert call.kwargs["model"] == "gemini-test"
        contents = call.kwargs["contents"]
        assert [c.role for c in contents] == ["user", "model", "user"]
        assert contents[-1].parts[0].text == "What is a fixed-rate mortgage?"

        config = call.kwargs["config"]
        assert config.automatic_function_calling.disable is True
        declaration = config.tools[0].function_declarations[0]
        assert declaration.name == "mortgageCalculator"
        assert "homePrice" in declaration.parameters_json_schema["properties"]
        assert "mortgage" in config.system_instruction.lower()

    @pytest.mark.asyncio
    async def test_tool_call_requiring_approval_pauses(self, provider, genai_client, tool):
        genai_client.aio.models.generate_content.return_value = function_call_response(
            TOOL_INPUT
        )

        outcome = await provider.generate("Calculate my mortgage", None, tool)

        assert isinstance(outcome, ApprovalRequiredTurn)
        assert outcome.tool_input == TOOL_INPUT
        assert outcome.interrupt == {
            "name": "mortgageCalculator",
            "id": "call-1",
            "args": TOOL_INPUT,
        }
        assert outcome.prompt_text == tool.describe_request(TOOL_INPUT)
        # Snapshot holds the user turn and the model's function call
        assert [item["role"] for item in outcome.raw_response] == ["user", "model"]
        genai_client.aio.models.generate_content.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_model_text_is_used_as_approval_prompt(self, provider, genai_client, tool):
        genai_client.aio.models.generate_content.return_value = function_call_response(
            TOOL_INPUT, text="Shall I run the numbers for a $300,000 home?"
        )

        outcome = await provider.generate("Calculate my mortgage", None, tool)

        assert isinstance(outcome, ApprovalRequiredTurn)
        assert outcome.prompt_text == "Shall I run the numbers for a $300,000 home?"

    @pytest.mark.asyncio
    async def test_tool_without_approval_runs_inline(self, provider, genai_client):
        tool = MortgageCalculatorTool(require_approval=False)
        genai_client.aio.models.generate_content.side_effect = [
            function_call_response(TOOL_INPUT),
            text_response("Your monthly payment is $1,438.92."),
        ]

        outcome = await provider.generate("Calculate my mortgage", None, tool)

        assert outcome == CompletedTurn(text="Your monthly payment is $1,438.92.")
        second_contents = genai_client.aio.models.generate_content.call_args_list[1].kwargs[
            "contents"
        ]
        responses = function_responses(second_contents)
        assert len(responses) == 1
        assert responses[0].name == "mortgageCalculator"
        assert responses[0].response["monthlyPayment"] == pytest.approx(1438.92)

    @pytest.mark.asyncio
    async def test_empty_text_raises(self, provider, genai_client, tool):
        genai_client.aio.models.generate_content.return_value = types.GenerateContentResponse(
            candidates=[]
        )

        with pytest.raises(GeminiContentGenerationError):
            await provider.generate("Hello", None, tool)

    @pytest.mark.asyncio
    async def test_sdk_errors_are_wrapped(self, provider, genai_client, tool):
        genai_client.aio.models.generate_content.side_effect = RuntimeError("quota exceeded")

        with pytest.raises(GeminiContentGenerationError, match="quota exceeded"):
            await provider.generate("Hello", None, tool)

    @pytest.mark.asyncio
    async def test_endless_tool_calls_are_bounded(self, provider, genai_client):
        tool = MortgageCalculatorTool(require_approval=False)
        genai_client.aio.models.generate_content.return_value = function_call_response(
            TOOL_INPUT
        )

        with pytest.raises(GeminiToolLoopError):
            await provider.generate("Calculate", None, tool)

        assert genai_client.aio.models.generate_content.await_count == 3


class TestResume:
    @pytest_asyncio.fixture
    async def paused(self, provider, genai_client, tool):
        genai_client.aio.models.generate_content.return_value = function_call_response(
            TOOL_INPUT
        )
        return await provider.generate("Calculate my mortgage", None, tool)

    @pytest.mark.asyncio
    async def test_approved_runs_calculation(self, provider, genai_client, tool, paused):
        genai_client.aio.models.generate_content.reset_mock()
        genai_client.aio.models.generate_content.return_value = text_response(
            "Your monthly payment is $1,438.92."
        )

        text = await provider.resume(paused.interrupt, True, paused.raw_response, tool)

        assert text == "Your monthly payment is $1,438.92."
        contents = genai_client.aio.models.generate_content.call_args.kwargs["contents"]
        assert [c.role for c in contents] == ["user", "model", "user"]
        responses = function_responses(contents)
        assert responses[0].id == "call-1"
        assert responses[0].response["totalAmount"] == pytest.approx(518011.20)

    @pytest.mark.asyncio
    async def test_rejected_sends_cancellation(self, provider, genai_client, tool, paused):
        genai_client.aio.models.generate_content.reset_mock()
        genai_client.aio.models.generate_content.return_value = text_response(
            "No problem, I did not run the calculation."
        )

        text = await provider.resume(paused.interrupt, False, paused.raw_response, tool)

        assert text == "No problem, I did not run the calculation."
        contents = genai_client.aio.models.generate_content.call_args.kwargs["contents"]
        response = function_responses(contents)[0].response
        assert response["status"] == "cancelled"
        assert "monthlyPayment" not in response

    @pytest.mark.asyncio
    @pytest.mark.parametrize("overrides", [{"loanTerm": 0}, {"loanTerm": 100000}])
    async def test_invalid_arguments_are_reported_to_model(
        self, provider, genai_client, tool, overrides
    ):
        bad_input = dict(TOOL_INPUT, **overrides)
        genai_client.aio.models.generate_content.side_effect = [
            function_call_response(bad_input),
            text_response("That loan term is out of range."),
        ]
        paused = await provider.generate("Calculate", None, tool)

        text = await provider.resume(paused.interrupt, True, paused.raw_response, tool)

        assert text == "That loan term is out of range."
        contents = genai_client.aio.models.generate_content.call_args.kwargs["contents"]
        assert function_responses(contents)[0].response["status"] == "error"

    @pytest.mark.asyncio
    async def test_missing_snapshot_raises(self, provider, tool):
        with pytest.raises(GeminiError):
            await provider.resume({"name": "mortgageCalculator", "args": {}}, True, None, tool)
