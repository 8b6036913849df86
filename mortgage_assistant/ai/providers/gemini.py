"""Gemini provider implementation."""

from pathlib import Path
from typing import Any

from braintrust.wrappers.google_genai import setup_genai
from google import genai
from google.genai import types

from mortgage_assistant.ai.base import (
    AIProvider,
    ApprovalRequiredTurn,
    ChatMessage,
    CompletedTurn,
    GenerationOutcome,
    Tool,
)
from mortgage_assistant.ai.gemini.config import GeminiSettings, get_gemini_settings
from mortgage_assistant.ai.gemini.exceptions import (
    GeminiAuthenticationError,
    GeminiContentGenerationError,
    GeminiError,
    GeminiToolLoopError,
)
from mortgage_assistant.exceptions import ValidationError
from mortgage_assistant.utils.logger import crop_text, logger

SYSTEM_PROMPT_FILE = Path(__file__).parent.parent / "chat" / "system_prompt.md"
FALLBACK_SYSTEM_PROMPT = (
    "You are a mortgage assistant that helps users in a web chatbot to get their "
    "mortgage simulations done and explains everything about the mortgage process "
    "in the U.S."
)


def load_system_prompt(path: Path = SYSTEM_PROMPT_FILE) -> str:
    """Read the assistant instructions, falling back to a minimal prompt."""
    try:
        prompt = path.read_text(encoding="utf-8")
        logger.info("Loaded system prompt", file_name=path.name)
        return prompt
    except OSError as e:
        logger.error("Failed to load system prompt file", error=str(e))
        return FALLBACK_SYSTEM_PROMPT


class GeminiProvider(AIProvider):
    """Gemini provider implementation.

    Declares the tool as a Gemini function with automatic function calling
    disabled, so every function call comes back to us. Calls that the tool
    wants approved are turned into an ApprovalRequiredTurn carrying the
    serialized conversation, which ``resume`` replays with the tool output.
    """

    def __init__(
        self,
        settings: GeminiSettings | None = None,
        enable_braintrust: bool = False,
        braintrust_project_name: str | None = None,
        client: genai.Client | None = None,
    ):
        """Initialize Gemini provider.

        Args:
            settings: Gemini settings, loaded from the environment when omitted
            enable_braintrust: Whether to enable Braintrust tracing for this provider instance
            braintrust_project_name: Braintrust project name (only used if enable_braintrust=True)
            client: Pre-built google-genai client
        """
        self._client = client
        self.enable_braintrust = enable_braintrust
        self.braintrust_project_name = braintrust_project_name
        self.settings = settings or get_gemini_settings()
        self.system_prompt = load_system_prompt()

    def _get_client(self) -> genai.Client:
        """Get or create the Gemini client.

        Automatically sets up Braintrust tracing if enabled.
        """
        if self._client is None:
            try:
                if self.enable_braintrust and self.braintrust_project_name:
                    logger.info(
                        f"Setting up Gemini with Braintrust tracing enabled (project: {self.braintrust_project_name})"
                    )
                    setup_genai(project_name=self.braintrust_project_name)

                self._client = genai.Client(api_key=self.settings.api_key)
                logger.info("Gemini client initialized")
            except Exception as e:
                logger.error("Failed to initialize Gemini client", error=str(e))
                raise GeminiAuthenticationError(f"Failed to authenticate: {e}")
        return self._client

    def _build_config(self, tool: Tool) -> types.GenerateContentConfig:
        declaration = types.FunctionDeclaration(
            name=tool.name,
            description=tool.description,
            parameters_json_schema=tool.parameters_schema(),
        )
        return types.GenerateContentConfig(
            system_instruction=self.system_prompt,
            temperature=self.settings.temperature,
            tools=[types.Tool(function_declarations=[declaration])],
            automatic_function_calling=types.AutomaticFunctionCallingConfig(
                disable=True
            ),
        )

    @staticmethod
    def _to_contents(history: list[ChatMessage] | None) -> list[types.Content]:
        return [
            types.Content(
                role=message.role.value,
                parts=[types.Part.from_text(text=message.text)],
            )
            for message in history or []
        ]

    @staticmethod
    def _dump_contents(contents: list[types.Content]) -> list[dict[str, Any]]:
        return [content.model_dump(exclude_none=True) for content in contents]

    @staticmethod
    def _load_contents(raw_response: Any) -> list[types.Content]:
        if not isinstance(raw_response, list):
            raise GeminiError("Cannot resume: conversation snapshot is missing")
        return [types.Content.model_validate(item) for item in raw_response]

    @staticmethod
    def _function_response(
        call: types.FunctionCall, output: dict[str, Any]
    ) -> types.Content:
        return types.Content(
            role="user",
            parts=[
                types.Part(
                    function_response=types.FunctionResponse(
                        id=call.id, name=call.name, response=output
                    )
                )
            ],
        )

    @staticmethod
    def _execute(tool: Tool, tool_input: dict[str, Any], approved: bool) -> dict[str, Any]:
        if not approved:
            return tool.cancel(tool_input)
        try:
            return tool.run(tool_input)
        except ValidationError as e:
            # Invalid arguments go back to the model so it can ask the user again
            return {"status": "error", "message": e.message}

    async def _generate_content(
        self, contents: list[types.Content], tool: Tool
    ) -> types.GenerateContentResponse:
        client = self._get_client()
        logger.info(
            "Generating content with model",
            model_name=self.settings.model_name,
            content_count=len(contents),
        )
        try:
            return await client.aio.models.generate_content(
                model=self.settings.model_name,
                contents=list(contents),
                config=self._build_config(tool),
            )
        except Exception as e:
            logger.error("Content generation failed", error=str(e))
            raise GeminiContentGenerationError(f"Content generation failed: {e}")

    async def _run_until_text_or_interrupt(
        self, contents: list[types.Content], tool: Tool
    ) -> GenerationOutcome:
        for _ in range(self.settings.max_tool_rounds):
            response = await self._generate_content(contents, tool)
            function_calls = response.function_calls or []

            if not function_calls:
                if not response.text:
                    raise GeminiContentGenerationError("Model returned no text")
                return CompletedTurn(text=response.text)

            if response.candidates and response.candidates[0].content:
                contents.append(response.candidates[0].content)
            else:
                contents.append(
                    types.Content(
                        role="model",
                        parts=[types.Part(function_call=call) for call in function_calls],
                    )
                )

            call = function_calls[0]
            tool_input = dict(call.args or {})
            if call.name != tool.name:
                logger.warning("Model requested an unknown tool", tool_name=call.name)
                contents.append(
                    self._function_response(
                        call, {"error": f"Unknown tool: {call.name}"}
                    )
                )
                continue

            if tool.requires_approval(tool_input):
                logger.info("Tool call requires approval", tool_name=call.name)
                prompt_text = response.text or tool.describe_request(tool_input)
                return ApprovalRequiredTurn(
                    interrupt={"name": call.name, "id": call.id, "args": tool_input},
                    tool_input=tool_input,
                    prompt_text=prompt_text,
                    raw_response=self._dump_contents(contents),
                )

            logger.info("Running tool without approval", tool_name=call.name)
            contents.append(
                self._function_response(call, self._execute(tool, tool_input, True))
            )

        raise GeminiToolLoopError(
            f"Model requested tools more than {self.settings.max_tool_rounds} times"
        )

    async def generate(
        self,
        prompt: str,
        history: list[ChatMessage] | None,
        tool: Tool,
    ) -> GenerationOutcome:
        """Generate a reply with Gemini, pausing on tool calls that need approval."""
        logger.info(
            "Generating reply",
            prompt=crop_text(prompt),
            history_length=len(history or []),
        )
        contents = self._to_contents(history)
        contents.append(
            types.Content(role="user", parts=[types.Part.from_text(text=prompt)])
        )
        return await self._run_until_text_or_interrupt(contents, tool)

    async def resume(
        self,
        interrupt: dict[str, Any],
        approved: bool,
        raw_response: Any,
        tool: Tool,
    ) -> str:
        """Answer the paused function call with the tool output or a cancellation."""
        contents = self._load_contents(raw_response)
        call = types.FunctionCall(
            id=interrupt.get("id"),
            name=interrupt.get("name", tool.name),
            args=interrupt.get("args", {}),
        )
        tool_input = dict(call.args or {})

        logger.info("Resuming tool call", tool_name=call.name, approved=approved)
        output = self._execute(tool, tool_input, approved)

        contents.append(self._function_response(call, output))
        outcome = await self._run_until_text_or_interrupt(contents, tool)

        # A second approval request inside a resume is not something the
        # chat flow can surface, so report its prompt as the reply.
        if isinstance(outcome, ApprovalRequiredTurn):
            return outcome.prompt_text
        return outcome.text
