from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Mapping, Protocol, Sequence

from .dictionaries import DEFAULT_STYLE_FALLBACKS
from .errors import AITransportError
from .models.action import ActionOutcome
from .models.content import ContentModel, SiteStyles
from .models.conversation import (
    BusinessInfo,
    ChatMessage,
    RoundTripRequest,
    RoundTripResponse,
    ToolDeclaration,
)
from .prompt_builder import build_system_instructions
from .tool_schemas import TOOL_DECLARATIONS

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "I couldn't process that request."


class AITransport(Protocol):
    async def complete(self, request: RoundTripRequest) -> RoundTripResponse:
        ...


def _to_messages(history: Iterable[ChatMessage | Mapping[str, str]]) -> list[ChatMessage]:
    messages: list[ChatMessage] = []
    for item in history:
        role = item.role if isinstance(item, ChatMessage) else item.get("role")
        content = item.content if isinstance(item, ChatMessage) else item.get("content", "")
        # system turns are replaced by the freshly built instructions
        if role not in ("user", "assistant"):
            continue
        messages.append(ChatMessage(role=role, content=content))
    return messages


class AssistantRoundTrip:
    """One request/response exchange with the model, built from the current snapshot."""

    def __init__(
        self,
        transport: AITransport,
        *,
        tools: Sequence[ToolDeclaration] = TOOL_DECLARATIONS,
        max_tokens: int = 1024,
        temperature: float | None = None,
        style_defaults: SiteStyles | None = DEFAULT_STYLE_FALLBACKS,
    ) -> None:
        self._transport = transport
        self._tools = tuple(tools)
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._style_defaults = style_defaults

    def build_request(
        self,
        model: ContentModel,
        history: Iterable[ChatMessage | Mapping[str, str]],
        command: str,
        *,
        business: BusinessInfo | None = None,
    ) -> RoundTripRequest:
        messages = _to_messages(history)
        messages.append(ChatMessage(role="user", content=command))
        return RoundTripRequest(
            system_instructions=build_system_instructions(
                model, tools=self._tools, business=business, style_defaults=self._style_defaults
            ),
            messages=messages,
            tool_schemas=self._tools,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )

    async def run(
        self,
        model: ContentModel,
        history: Iterable[ChatMessage | Mapping[str, str]],
        command: str,
        *,
        business: BusinessInfo | None = None,
    ) -> RoundTripResponse:
        request = self.build_request(model, history, command, business=business)
        try:
            response = await self._transport.complete(request)
        except AITransportError:
            raise
        except (TimeoutError, asyncio.TimeoutError) as exc:
            raise AITransportError("Model round trip timed out", retryable=True) from exc

        logger.info(
            "Model round trip completed",
            extra={
                "model": response.model,
                "tool_call_count": len(response.tool_calls),
                "content_length": len(response.content),
            },
        )
        return response


def compose_reply(response: RoundTripResponse, outcomes: Sequence[ActionOutcome]) -> str:
    """The text shown to the user.

    The model's own text wins. Without it, successful outcomes are summarised;
    failed ones are left out of user-facing prose.
    """
    if response.content.strip():
        return response.content
    descriptions = [outcome.description for outcome in outcomes if outcome.success]
    if descriptions:
        return ". ".join(descriptions) + "."
    return FALLBACK_REPLY


__all__ = ["AITransport", "AssistantRoundTrip", "FALLBACK_REPLY", "compose_reply"]
