from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Dict, Protocol

from pydantic import ValidationError

from .errors import PersistenceError, SiteNotFoundError
from .models.content import ContentModel

logger = logging.getLogger(__name__)


class ContentRepository(Protocol):
    """Whole-document storage of a site's content. The last save wins."""

    def load_content_model(self, site_id: str) -> ContentModel:
        ...

    def save_content_model(self, site_id: str, model: ContentModel) -> None:
        ...


class InMemoryContentRepository:
    def __init__(self, sites: Dict[str, ContentModel] | None = None) -> None:
        self._sites: Dict[str, ContentModel] = {
            site_id: model.model_copy(deep=True) for site_id, model in (sites or {}).items()
        }
        self._lock = threading.Lock()

    def load_content_model(self, site_id: str) -> ContentModel:
        with self._lock:
            model = self._sites.get(site_id)
            if model is None:
                raise SiteNotFoundError(site_id)
            return model.model_copy(deep=True)

    def save_content_model(self, site_id: str, model: ContentModel) -> None:
        with self._lock:
            self._sites[site_id] = model.model_copy(deep=True)


class LocalContentRepository:
    """One JSON document per site under ``base_path``, keyed by camelCase field names."""

    def __init__(self, *, base_path: Path) -> None:
        self._base_path = base_path

    def load_content_model(self, site_id: str) -> ContentModel:
        file_path = self._path_for(site_id)
        if not file_path.exists():
            raise SiteNotFoundError(site_id)
        try:
            with file_path.open("r", encoding="utf-8") as fp:
                data = json.load(fp)
            return ContentModel.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as exc:
            logger.error("Failed to load site content", exc_info=True, extra={"site_id": site_id})
            raise PersistenceError(f"Could not read site content for {site_id}") from exc

    def save_content_model(self, site_id: str, model: ContentModel) -> None:
        file_path = self._path_for(site_id)
        tmp_path = file_path.with_suffix(".json.tmp")
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as fp:
                json.dump(model.to_document(), fp, ensure_ascii=False, indent=2)
            tmp_path.replace(file_path)
        except OSError as exc:
            logger.error("Failed to save site content", exc_info=True, extra={"site_id": site_id})
            raise PersistenceError(f"Could not write site content for {site_id}") from exc
        logger.info("Saved site content", extra={"site_id": site_id, "section_count": len(model.sections)})

    def _path_for(self, site_id: str) -> Path:
        safe = site_id.replace("/", "-").replace("\\", "-")
        return self._base_path / f"{safe}.json"


__all__ = ["ContentRepository", "InMemoryContentRepository", "LocalContentRepository"]
