from __future__ import annotations

import logging
from datetime import datetime
from typing import Sequence

from google.api_core import exceptions as google_exceptions
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from pydantic import ValidationError

from .errors import PersistenceError, SiteNotFoundError
from .models.action import Action, ActionOutcome
from .models.command import CommandRecord, CommandStatus
from .models.content import ContentModel

logger = logging.getLogger(__name__)


class FirestoreContentRepository:
    """Firestore-backed site content for production use. One document per site."""

    COLLECTION_NAME = "sites"

    def __init__(self, project_id: str | None = None, *, client: firestore.Client | None = None) -> None:
        self._db = client or firestore.Client(project=project_id)
        self._collection = self._db.collection(self.COLLECTION_NAME)

    def load_content_model(self, site_id: str) -> ContentModel:
        """Retrieve a site's content by ID from Firestore."""
        try:
            doc = self._collection.document(site_id).get()
        except google_exceptions.GoogleAPICallError as exc:
            raise PersistenceError(f"Could not read site content for {site_id}") from exc

        if not doc.exists:
            raise SiteNotFoundError(site_id)

        data = doc.to_dict() or {}
        try:
            return ContentModel.model_validate(data.get("content", {}))
        except ValidationError as exc:
            logger.error("Stored site content is invalid", exc_info=True, extra={"site_id": site_id})
            raise PersistenceError(f"Stored site content for {site_id} is invalid") from exc

    def save_content_model(self, site_id: str, model: ContentModel) -> None:
        """Replace the whole site document; concurrent writers are last-write-wins."""
        try:
            self._collection.document(site_id).set(
                {"content": model.to_document(), "updated_at": datetime.utcnow()}
            )
        except google_exceptions.GoogleAPICallError as exc:
            raise PersistenceError(f"Could not write site content for {site_id}") from exc

        logger.info(
            "Saved site content",
            extra={"site_id": site_id, "section_count": len(model.sections)},
        )


class FirestoreCommandLog:
    """Firestore-backed audit trail of assistant commands."""

    COLLECTION_NAME = "commands"

    def __init__(self, project_id: str | None = None, *, client: firestore.Client | None = None) -> None:
        self._db = client or firestore.Client(project=project_id)
        self._collection = self._db.collection(self.COLLECTION_NAME)

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
        """Create a new command record in Firestore."""
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

        try:
            self._collection.document(command_id).set(self._to_firestore_dict(record))
        except google_exceptions.GoogleAPICallError as exc:
            raise PersistenceError(f"Could not record command for {site_id}") from exc

        logger.info(
            "Recorded command",
            extra={"command_id": command_id, "site_id": site_id, "status": status.value},
        )
        return record

    def get(self, command_id: str) -> CommandRecord | None:
        """Retrieve a command record by ID from Firestore."""
        doc = self._collection.document(command_id).get()
        if not doc.exists:
            return None
        return self._from_firestore_dict(doc.id, doc.to_dict())

    def list_for_site(self, site_id: str, *, limit: int = 50) -> list[CommandRecord]:
        """List a site's commands, newest first."""
        query = (
            self._collection.where(filter=FieldFilter("site_id", "==", site_id))
            .order_by("created_at", direction=firestore.Query.DESCENDING)
            .limit(limit)
        )
        return [self._from_firestore_dict(doc.id, doc.to_dict()) for doc in query.stream()]

    def _generate_id(self, site_id: str) -> str:
        ts = datetime.utcnow().strftime("%Y%m%d%H%M%S")
        # Use Firestore auto-generated ID for uniqueness
        suffix = self._collection.document().id[:6]
        safe = site_id.replace("/", "-")
        return f"cmd_{safe}_{ts}_{suffix}"

    def _to_firestore_dict(self, record: CommandRecord) -> dict:
        data = record.model_dump(mode="json", exclude={"id", "created_at"})
        data["created_at"] = record.created_at
        return data

    def _from_firestore_dict(self, command_id: str, data: dict) -> CommandRecord:
        return CommandRecord.model_validate({**data, "id": command_id})


__all__ = ["FirestoreCommandLog", "FirestoreContentRepository"]
