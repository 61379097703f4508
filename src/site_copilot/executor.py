from __future__ import annotations

import logging
from typing import Callable, Collection, Iterable, Mapping, Sequence

from pydantic import BaseModel, Field, ValidationError

from .actions.base import ActionContext, ActionError, BaseAction, new_section_id
from .actions.info import GetSiteInfo
from .actions.sections import AddSection, EditSection, RemoveSection, ReorderSections
from .actions.styles import UpdateColors, UpdateFonts, UpdateSeo
from .dictionaries import DEFAULT_SECTION_TITLES, DEFAULT_STYLE_FALLBACKS, SECTION_TYPES
from .models.action import Action, ActionErrorCode, ActionOutcome
from .models.content import ContentModel, SiteStyles
from .validation import validate

logger = logging.getLogger(__name__)


DEFAULT_HANDLERS: Mapping[str, BaseAction] = {
    handler.name.value: handler
    for handler in (
        AddSection(),
        RemoveSection(),
        EditSection(),
        ReorderSections(),
        UpdateColors(),
        UpdateFonts(),
        UpdateSeo(),
        GetSiteInfo(),
    )
}


class ApplyResult(BaseModel):
    model: ContentModel
    outcomes: list[ActionOutcome] = Field(default_factory=list)
    changed: bool = False

    @property
    def succeeded(self) -> list[ActionOutcome]:
        return [outcome for outcome in self.outcomes if outcome.success]

    @property
    def failed(self) -> list[ActionOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.success]


def _describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "arguments"
        parts.append(f"{location}: {error.get('msg')}")
    return "; ".join(parts)


class ActionExecutor:
    """Applies a batch of model-issued actions to a content snapshot.

    Actions run strictly left to right, each against the result of the ones before
    it. A failing action is recorded and skipped; it never aborts the batch and
    nothing is raised across ``apply``.
    """

    def __init__(
        self,
        *,
        handlers: Mapping[str, BaseAction] = DEFAULT_HANDLERS,
        section_types: Sequence[str] = SECTION_TYPES,
        default_titles: Mapping[str, str] = DEFAULT_SECTION_TITLES,
        style_defaults: SiteStyles | None = DEFAULT_STYLE_FALLBACKS,
        id_factory: Callable[[Collection[str]], str] = new_section_id,
    ) -> None:
        self._handlers = dict(handlers)
        self._section_types = tuple(section_types)
        self._context = ActionContext(
            section_types=self._section_types,
            default_titles=default_titles,
            style_defaults=style_defaults,
            id_factory=id_factory,
        )

    @property
    def action_names(self) -> list[str]:
        return list(self._handlers)

    def apply(self, model: ContentModel, actions: Iterable[Action]) -> ApplyResult:
        working = model.model_copy(deep=True)
        outcomes: list[ActionOutcome] = []
        changed = False

        for position, action in enumerate(actions):
            outcome, candidate = self._apply_one(working, action)
            if candidate is not None:
                working = candidate
                changed = True
            outcomes.append(outcome)

            log_extra = {
                "action_name": action.name,
                "action_position": position,
                "action_success": outcome.success,
            }
            if outcome.success:
                logger.info("Applied action", extra=log_extra)
            else:
                logger.warning(
                    "Action failed",
                    extra={**log_extra, "action_error": outcome.error.value, "action_detail": outcome.detail},
                )

        return ApplyResult(model=working, outcomes=outcomes, changed=changed)

    def _apply_one(self, working: ContentModel, action: Action) -> tuple[ActionOutcome, ContentModel | None]:
        handler = self._handlers.get(action.name)
        if handler is None:
            return (
                ActionOutcome(
                    action=action.name,
                    success=False,
                    description=f"Unknown action: {action.name}",
                    error=ActionErrorCode.malformed_action,
                    detail="Action not implemented",
                ),
                None,
            )

        try:
            args = handler.ArgsModel.model_validate(action.arguments)
        except ValidationError as exc:
            return (
                ActionOutcome(
                    action=action.name,
                    success=False,
                    description=f"Invalid arguments for {action.name}",
                    error=ActionErrorCode.malformed_action,
                    detail=_describe_validation_error(exc),
                ),
                None,
            )

        candidate = working.model_copy(deep=True)
        try:
            effect = handler.run(candidate, args, ctx=self._context)
        except ActionError as exc:
            return (
                ActionOutcome(
                    action=action.name,
                    success=False,
                    description=exc.message,
                    error=exc.code,
                    detail=exc.message,
                ),
                None,
            )

        outcome = ActionOutcome(
            action=action.name, success=True, description=effect.description, changes=effect.changes
        )
        if not effect.mutated:
            return outcome, None

        # only reject what this action introduced; a snapshot loaded with problems stays editable
        baseline = {(v.code, v.message) for v in validate(working, section_types=self._section_types)}
        violations = [
            v
            for v in validate(candidate, section_types=self._section_types)
            if (v.code, v.message) not in baseline
        ]
        if violations:
            return (
                ActionOutcome(
                    action=action.name,
                    success=False,
                    description=f"{action.name} would leave the site invalid",
                    error=ActionErrorCode.validation_failed,
                    detail="; ".join(violation.message for violation in violations),
                ),
                None,
            )
        return outcome, candidate


_default_executor = ActionExecutor()


def apply_actions(model: ContentModel, actions: Iterable[Action]) -> ApplyResult:
    return _default_executor.apply(model, actions)


__all__ = ["ActionExecutor", "ApplyResult", "DEFAULT_HANDLERS", "apply_actions"]
