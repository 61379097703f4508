from __future__ import annotations

import asyncio
import json
import logging
import uuid
from typing import Any, Mapping, Sequence

import vertexai
from google.api_core import exceptions as google_exceptions
from vertexai.generative_models import (
    Content,
    FunctionDeclaration,
    GenerationConfig,
    GenerativeModel,
    Part,
    Tool,
)

from .business_defaults import fallback_suggestions
from .errors import AITransportError
from .models.action import Action
from .models.conversation import (
    BusinessInfo,
    ChatMessage,
    RoundTripRequest,
    RoundTripResponse,
    TokenUsage,
    ToolDeclaration,
)
from .prompt_builder import build_field_suggestion_prompt

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (
    google_exceptions.ResourceExhausted,
    google_exceptions.ServiceUnavailable,
    google_exceptions.InternalServerError,
    google_exceptions.DeadlineExceeded,
)


class VertexAIAdapter:
    """Adapter for Vertex AI Gemini models.

    Implements the round-trip transport (``complete``) with function calling, plus
    plain text/JSON helpers used for onboarding suggestions and section copy.
    """

    def __init__(
        self,
        *,
        project_id: str,
        location: str = "asia-northeast1",
        model_name: str = "gemini-1.5-pro",
        timeout_seconds: float = 60.0,
    ) -> None:
        """Initialize Vertex AI adapter.

        Args:
            project_id: GCP project ID
            location: Vertex AI location
            model_name: Model name (e.g., "gemini-1.5-pro")
            timeout_seconds: Upper bound for one round trip
        """
        self.project_id = project_id
        self.location = location
        self.model_name = model_name
        self.timeout_seconds = timeout_seconds

        vertexai.init(project=project_id, location=location)

        self.model = GenerativeModel(model_name)

    async def complete(self, request: RoundTripRequest) -> RoundTripResponse:
        """Run one round trip with the action taxonomy exposed as function declarations.

        Raises:
            AITransportError: the call failed, timed out, or returned no candidates
        """
        # system instructions change per request, so the model handle does too
        model = GenerativeModel(self.model_name, system_instruction=request.system_instructions)
        generation_config = GenerationConfig(
            max_output_tokens=request.max_tokens,
            **({"temperature": request.temperature} if request.temperature is not None else {}),
        )
        tools = [self._to_vertex_tool(request.tool_schemas)] if request.tool_schemas else None

        try:
            response = await asyncio.wait_for(
                model.generate_content_async(
                    self._to_contents(request.messages),
                    generation_config=generation_config,
                    tools=tools,
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            raise AITransportError("Vertex AI request timed out", retryable=True) from exc
        except google_exceptions.GoogleAPICallError as exc:
            logger.error("Vertex AI request failed", exc_info=True, extra={"model": self.model_name})
            raise AITransportError(str(exc), retryable=isinstance(exc, RETRYABLE_ERRORS)) from exc

        return self._to_response(response)

    def generate_content(
        self,
        prompt: str,
        *,
        temperature: float = 0.7,
        max_output_tokens: int = 8192,
        response_format: str | None = None,
    ) -> str:
        """Generate content using Vertex AI.

        Args:
            prompt: Input prompt
            temperature: Sampling temperature (0.0 - 1.0)
            max_output_tokens: Maximum output tokens
            response_format: Optional response format ("json" for JSON mode)

        Returns:
            Generated text
        """
        generation_config = GenerationConfig(
            temperature=temperature,
            max_output_tokens=max_output_tokens,
        )

        if response_format == "json":
            prompt = f"{prompt}\n\nPlease respond with valid JSON only."

        response = self.model.generate_content(
            prompt,
            generation_config=generation_config,
        )

        generated_text = response.text

        logger.info(
            "Generated content with Vertex AI",
            extra={
                "model": self.model_name,
                "temperature": temperature,
                "input_length": len(prompt),
                "output_length": len(generated_text),
            },
        )

        return generated_text

    def generate_json(
        self,
        prompt: str,
        *,
        temperature: float = 0.7,
        max_output_tokens: int = 8192,
    ) -> Any:
        """Generate a structured JSON response.

        Raises:
            ValueError: the model did not return parseable JSON
        """
        response = self.generate_content(
            prompt,
            temperature=temperature,
            max_output_tokens=max_output_tokens,
            response_format="json",
        )
        return parse_json_reply(response)

    def suggest_field_values(
        self,
        *,
        field: str,
        business: BusinessInfo,
        current_value: str = "",
    ) -> list[str]:
        """Suggest values for an onboarding field, e.g. three taglines.

        Falls back to canned suggestions when the model call fails.
        """
        prompt = build_field_suggestion_prompt(field, current_value, business)
        try:
            result = self.generate_json(prompt, temperature=0.8)
        except Exception:
            logger.error(
                "Failed to suggest field values with Vertex AI",
                exc_info=True,
                extra={"field": field},
            )
            return fallback_suggestions(field, business)

        if isinstance(result, list) and all(isinstance(item, str) for item in result):
            return result[:3]
        logger.warning("Unexpected JSON structure from Vertex AI", extra={"result": result})
        return fallback_suggestions(field, business)

    def enhance_section_copy(
        self,
        *,
        section_type: str,
        business: BusinessInfo,
        current: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Rewrite a section's title/subtitle/content for the business.

        Returns the current copy unchanged on failure.
        """
        prompt = f"""You are an expert website copywriter.
Improve the copy of a {section_type} section for "{business.name}", a {business.type} business.
{f"Business description: {business.description}" if business.description else ""}

Current copy:
{json.dumps(dict(current), ensure_ascii=False, indent=2)}

Requirements:
- Keep the same meaning and facts
- Be specific to the business, friendly and concise
- Keep any "items" array the same length

Return a JSON object with the same keys."""

        try:
            result = self.generate_json(prompt, temperature=0.8)
        except Exception:
            logger.error(
                "Failed to enhance section copy with Vertex AI",
                exc_info=True,
                extra={"section_type": section_type},
            )
            return dict(current)

        if not isinstance(result, dict):
            logger.warning("Unexpected JSON structure from Vertex AI", extra={"result": result})
            return dict(current)
        return {key: result.get(key, value) for key, value in current.items()}

    @staticmethod
    def _to_vertex_tool(declarations: Sequence[ToolDeclaration]) -> Tool:
        return Tool(
            function_declarations=[
                FunctionDeclaration(
                    name=declaration.name,
                    description=declaration.description,
                    parameters=dict(declaration.parameters),
                )
                for declaration in declarations
            ]
        )

    @staticmethod
    def _to_contents(messages: Sequence[ChatMessage]) -> list[Content]:
        return [
            Content(role="model" if message.role == "assistant" else "user", parts=[Part.from_text(message.content)])
            for message in messages
        ]

    def _to_response(self, response: Any) -> RoundTripResponse:
        if not response.candidates:
            raise AITransportError("Vertex AI returned no candidates")
        candidate = response.candidates[0]

        texts: list[str] = []
        tool_calls: list[Action] = []
        for part in candidate.content.parts:
            data = part.to_dict()
            call = data.get("function_call")
            if call:
                tool_calls.append(
                    Action(
                        id=f"call_{uuid.uuid4().hex[:12]}",
                        name=call.get("name", ""),
                        arguments=call.get("args") or {},
                    )
                )
            elif data.get("text"):
                texts.append(data["text"])

        finish_reason = "stop"
        if tool_calls:
            finish_reason = "tool_use"
        elif getattr(candidate.finish_reason, "name", "") == "MAX_TOKENS":
            finish_reason = "max_tokens"

        usage = None
        metadata = getattr(response, "usage_metadata", None)
        if metadata is not None:
            usage = TokenUsage(
                input_tokens=metadata.prompt_token_count,
                output_tokens=metadata.candidates_token_count,
            )

        return RoundTripResponse(
            content="".join(texts),
            tool_calls=tool_calls,
            model=self.model_name,
            usage=usage,
            finish_reason=finish_reason,
        )


def parse_json_reply(response: str) -> Any:
    """Parse a model reply as JSON, stripping markdown code fences if present."""
    try:
        response = response.strip()
        if response.startswith("```json"):
            response = response[7:]
        if response.startswith("```"):
            response = response[3:]
        if response.endswith("```"):
            response = response[:-3]

        return json.loads(response.strip())
    except json.JSONDecodeError as exc:
        logger.error(
            "Failed to parse JSON response",
            exc_info=True,
            extra={"response": response},
        )
        raise ValueError(f"Invalid JSON response: {exc}") from exc


__all__ = ["VertexAIAdapter", "parse_json_reply"]
