from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Collection, Generic, Mapping, Sequence, TypeVar

from pydantic import BaseModel

from ..models.action import ActionErrorCode, ActionName
from ..models.content import ContentModel, SiteStyles


ArgsT = TypeVar("ArgsT", bound=BaseModel)


class ActionError(Exception):
    """Raised by a handler to fail one action; the executor turns it into an outcome."""

    def __init__(self, code: ActionErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


def new_section_id(existing: Collection[str]) -> str:
    while True:
        candidate = f"section_{uuid.uuid4().hex[:8]}"
        if candidate not in existing:
            return candidate


@dataclass(frozen=True)
class ActionContext:
    section_types: Sequence[str]
    default_titles: Mapping[str, str]
    style_defaults: SiteStyles | None = None
    id_factory: Callable[[Collection[str]], str] = new_section_id


@dataclass
class ActionEffect:
    description: str
    changes: dict[str, Any] = field(default_factory=dict)
    mutated: bool = True


class BaseAction(Generic[ArgsT]):
    name: ActionName
    ArgsModel: type[ArgsT]

    def run(self, model: ContentModel, args: ArgsT, *, ctx: ActionContext) -> ActionEffect:
        """Mutate ``model`` in place. The executor hands every call its own copy."""
        raise NotImplementedError


__all__ = ["ActionContext", "ActionEffect", "ActionError", "BaseAction", "new_section_id"]
