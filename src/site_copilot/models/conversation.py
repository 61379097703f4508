from __future__ import annotations

from typing import Any, Literal, Mapping, Sequence

from pydantic import BaseModel, Field

from .action import Action


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ToolDeclaration(BaseModel):
    name: str
    description: str
    parameters: Mapping[str, Any]


class TokenUsage(BaseModel):
    input_tokens: int = 0
    output_tokens: int = 0


class RoundTripRequest(BaseModel):
    system_instructions: str
    messages: Sequence[ChatMessage]
    tool_schemas: Sequence[ToolDeclaration] = Field(default_factory=list)
    max_tokens: int = 1024
    temperature: float | None = None


class RoundTripResponse(BaseModel):
    content: str = ""
    tool_calls: list[Action] = Field(default_factory=list)
    model: str
    usage: TokenUsage | None = None
    finish_reason: Literal["stop", "tool_use", "max_tokens", "error"] = "stop"


class BusinessInfo(BaseModel):
    name: str
    type: str
    description: str | None = None


__all__ = [
    "BusinessInfo",
    "ChatMessage",
    "RoundTripRequest",
    "RoundTripResponse",
    "TokenUsage",
    "ToolDeclaration",
]
