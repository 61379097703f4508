from __future__ import annotations

import logging
from typing import Iterable, Mapping, Sequence

from pydantic import BaseModel, Field

from .command_log import CommandLog, command_status
from .content_repository import ContentRepository
from .errors import PersistenceError
from .executor import ActionExecutor, ApplyResult
from .logging_config import set_site_id
from .models.action import Action, ActionOutcome
from .models.command import CommandStatus
from .models.content import ContentModel
from .models.conversation import BusinessInfo, ChatMessage
from .round_trip import AssistantRoundTrip, compose_reply

logger = logging.getLogger(__name__)


class CommandResult(BaseModel):
    reply: str
    outcomes: list[ActionOutcome] = Field(default_factory=list)
    model: str | None = None
    persisted: bool = False
    content: ContentModel
    command_id: str | None = None


class SiteCommandService:
    """Turns a natural-language command into applied, persisted site changes.

    The snapshot is loaded once, the model sees it, its tool calls run through the
    executor and the result is saved only if something actually changed. A failed
    round trip raises before anything is applied or saved.
    """

    def __init__(
        self,
        *,
        repository: ContentRepository,
        round_trip: AssistantRoundTrip | None = None,
        executor: ActionExecutor | None = None,
        command_log: CommandLog | None = None,
    ) -> None:
        self._repository = repository
        self._round_trip = round_trip
        self._executor = executor or ActionExecutor()
        self._command_log = command_log

    async def handle_command(
        self,
        site_id: str,
        command: str,
        history: Iterable[ChatMessage | Mapping[str, str]] = (),
        business: BusinessInfo | None = None,
    ) -> CommandResult:
        if self._round_trip is None:
            raise RuntimeError("SiteCommandService was built without a round trip")
        set_site_id(site_id)

        snapshot = self._repository.load_content_model(site_id)
        response = await self._round_trip.run(snapshot, history, command, business=business)

        if response.tool_calls:
            result = self._executor.apply(snapshot, response.tool_calls)
        else:
            result = ApplyResult(model=snapshot)
        persisted = self._persist(site_id, result)
        reply = compose_reply(response, result.outcomes)

        command_id = self._record(
            site_id,
            prompt=command,
            model=response.model,
            reply=reply,
            actions=response.tool_calls,
            result=result,
        )
        return CommandResult(
            reply=reply,
            outcomes=result.outcomes,
            model=response.model,
            persisted=persisted,
            content=result.model if persisted else snapshot,
            command_id=command_id,
        )

    def apply_direct(self, site_id: str, actions: Sequence[Action]) -> CommandResult:
        """Apply caller-built actions without a model call. Same persistence rule."""
        set_site_id(site_id)
        snapshot = self._repository.load_content_model(site_id)
        result = self._executor.apply(snapshot, actions)
        persisted = self._persist(site_id, result)
        descriptions = [outcome.description for outcome in result.outcomes if outcome.success]
        reply = ". ".join(descriptions) + "." if descriptions else "No changes were applied."

        command_id = self._record(site_id, prompt=None, model=None, reply=reply, actions=actions, result=result)
        return CommandResult(
            reply=reply,
            outcomes=result.outcomes,
            persisted=persisted,
            content=result.model if persisted else snapshot,
            command_id=command_id,
        )

    def _persist(self, site_id: str, result: ApplyResult) -> bool:
        if not (result.changed and result.succeeded):
            return False
        self._repository.save_content_model(site_id, result.model)
        logger.info(
            "Persisted site changes",
            extra={
                "site_id": site_id,
                "succeeded_actions": len(result.succeeded),
                "failed_actions": len(result.failed),
            },
        )
        return True

    def _record(
        self,
        site_id: str,
        *,
        prompt: str | None,
        model: str | None,
        reply: str,
        actions: Sequence[Action],
        result: ApplyResult,
    ) -> str | None:
        if self._command_log is None:
            return None
        status = command_status(actions, result.outcomes, result.changed)
        try:
            record = self._command_log.record(
                site_id=site_id,
                prompt=prompt,
                status=status,
                model=model,
                reply=reply,
                actions=actions,
                outcomes=result.outcomes,
            )
        except PersistenceError:
            # the site is already saved; a lost log entry must not fail the command
            logger.error("Failed to record command", exc_info=True, extra={"site_id": site_id})
            return None
        if status is CommandStatus.no_op:
            logger.info("Command changed nothing", extra={"site_id": site_id, "command_id": record.id})
        return record.id


__all__ = ["CommandResult", "SiteCommandService"]
