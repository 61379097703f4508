from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Sequence

from pydantic import BaseModel, Field

from .action import Action, ActionOutcome


class CommandStatus(str, Enum):
    applied = "APPLIED"
    no_op = "NO_OP"
    conversational = "CONVERSATIONAL"


class CommandRecord(BaseModel):
    id: str
    site_id: str
    prompt: str | None = None
    model: str | None = None
    status: CommandStatus
    reply: str | None = None
    actions: Sequence[Action] = Field(default_factory=list)
    outcomes: Sequence[ActionOutcome] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)


__all__ = ["CommandRecord", "CommandStatus"]
