from __future__ import annotations

import threading
import uuid
from datetime import datetime
from typing import Dict, Protocol, Sequence

from .models.action import Action, ActionOutcome
from .models.command import CommandRecord, CommandStatus


class CommandLog(Protocol):
    def record(
        self,
        *,
        site_id: str,
        prompt: str | None,
        status: CommandStatus,
        model: str | None = None,
        reply: str | None = None,
        actions: Sequence[Action] = (),
        outcomes: Sequence[ActionOutcome] = (),
    ) -> CommandRecord:
        ...

    def get(self, command_id: str) -> CommandRecord | None:
        ...

    def list_for_site(self, site_id: str, *, limit: int = 50) -> list[CommandRecord]:
        ...


def command_status(actions: Sequence[Action], outcomes: Sequence[ActionOutcome], changed: bool) -> CommandStatus:
    if not actions:
        return CommandStatus.conversational
    if changed and any(outcome.success for outcome in outcomes):
        return CommandStatus.applied
    return CommandStatus.no_op


class InMemoryCommandLog:
    def __init__(self) -> None:
        self._records: Dict[str, CommandRecord] = {}
        self._lock = threading.Lock()

    def record(
        self,
        *,
        site_id: str,
        prompt: str | None,
        status: CommandStatus,
        model: str | None = None,
        reply: str | None = None,
        actions: Sequence[Action] = (),
        outcomes: Sequence[ActionOutcome] = (),
    ) -> CommandRecord:
        with self._lock:
            command_id = self._generate_id(site_id)
            record = CommandRecord(
                id=command_id,
                site_id=site_id,
                prompt=prompt,
                model=model,
                status=status,
                reply=reply,
                actions=list(actions),
                outcomes=list(outcomes),
            )
            self._records[command_id] = record
            return record

    def get(self, command_id: str) -> CommandRecord | None:
        with self._lock:
            return self._records.get(command_id)

    def list_for_site(self, site_id: str, *, limit: int = 50) -> list[CommandRecord]:
        with self._lock:
            records = [record for record in self._records.values() if record.site_id == site_id]
        records.sort(key=lambda record: record.created_at, reverse=True)
        return records[:limit]

    def _generate_id(self, site_id: str) -> str:
        ts = datetime.utcnow().strftime("%Y%m%d%H%M%S")
        suffix = uuid.uuid4().hex[:6]
        safe = site_id.replace("/", "-")
        return f"cmd_{safe}_{ts}_{suffix}"


__all__ = ["CommandLog", "InMemoryCommandLog", "command_status"]
