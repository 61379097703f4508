from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from .content import ById, ByType


class ActionName(str, Enum):
    add_section = "add_section"
    remove_section = "remove_section"
    edit_section = "edit_section"
    reorder_sections = "reorder_sections"
    update_colors = "update_colors"
    update_fonts = "update_fonts"
    update_seo = "update_seo"
    get_site_info = "get_site_info"


class ActionErrorCode(str, Enum):
    invalid_section_type = "InvalidSectionType"
    section_not_found = "SectionNotFound"
    invalid_order = "InvalidOrder"
    malformed_action = "MalformedAction"
    validation_failed = "ValidationFailed"


class Action(BaseModel):
    """A single mutation requested by the model. ``name`` stays a plain string so an
    unknown tool name surfaces as a MalformedAction outcome instead of a parse error."""

    id: str | None = None
    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class ActionOutcome(BaseModel):
    action: str
    success: bool
    description: str
    error: ActionErrorCode | None = None
    detail: str | None = None
    changes: dict[str, Any] = Field(default_factory=dict)


class SectionFields(BaseModel):
    model_config = ConfigDict(extra="allow")

    title: str | None = None
    subtitle: str | None = None
    content: str | None = None
    items: list[dict[str, Any]] | None = None


def _alias(*names: str) -> AliasChoices:
    return AliasChoices(*names)


class AddSectionArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")

    section_type: str = Field(validation_alias=_alias("section_type", "sectionType", "type"))
    position: Literal["start", "end", "after_hero", "before_contact"] | int = "end"
    content: SectionFields = Field(default_factory=SectionFields)

    @model_validator(mode="before")
    @classmethod
    def _fold_flat_fields(cls, data: Any) -> Any:
        # models often send {"type": "faq", "title": "..."} instead of a content object
        if not isinstance(data, dict):
            return data
        data = dict(data)
        content = data.get("content")
        if isinstance(content, str):
            content = {"content": content}
        elif not isinstance(content, dict):
            content = {} if content is None else content
        if isinstance(content, dict):
            content = dict(content)
            for key in ("title", "subtitle", "items"):
                if key in data and key not in content:
                    content[key] = data.pop(key)
        data["content"] = content
        return data


class _TargetsSection(BaseModel):
    section_id: str | None = Field(default=None, validation_alias=_alias("section_id", "sectionId", "id"))
    section_type: str | None = Field(default=None, validation_alias=_alias("section_type", "sectionType", "type"))

    @model_validator(mode="after")
    def _require_target(self):
        if not self.section_id and not self.section_type:
            raise ValueError("either section_id or section_type is required")
        return self

    @property
    def ref(self) -> ById | ByType:
        if self.section_id:
            return ById(id=self.section_id)
        return ByType(type=self.section_type)


class RemoveSectionArgs(_TargetsSection):
    model_config = ConfigDict(extra="ignore")


class EditSectionArgs(_TargetsSection):
    model_config = ConfigDict(extra="ignore")

    updates: SectionFields

    @model_validator(mode="before")
    @classmethod
    def _fold_flat_updates(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "updates" in data:
            return data
        data = dict(data)
        data["updates"] = {
            key: data.pop(key) for key in ("title", "subtitle", "content", "items") if key in data
        }
        return data


class MoveInstruction(BaseModel):
    section_id: str = Field(validation_alias=_alias("section_id", "sectionId", "id"))
    to_index: int = Field(validation_alias=_alias("to_index", "toIndex", "index", "position"))


class ReorderSectionsArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")

    section_order: list[str] | None = Field(
        default=None, validation_alias=_alias("section_order", "sectionOrder", "order")
    )
    swap: tuple[str, str] | None = None
    move: MoveInstruction | None = None

    @model_validator(mode="after")
    def _exactly_one_instruction(self):
        given = [value for value in (self.section_order, self.swap, self.move) if value is not None]
        if len(given) != 1:
            raise ValueError("provide exactly one of section_order, swap or move")
        return self


class UpdateColorsArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")

    primary_color: str | None = Field(default=None, validation_alias=_alias("primary_color", "primaryColor"))
    secondary_color: str | None = Field(
        default=None, validation_alias=_alias("secondary_color", "secondaryColor")
    )
    accent_color: str | None = Field(default=None, validation_alias=_alias("accent_color", "accentColor"))


class UpdateFontsArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")

    heading_font: str | None = Field(default=None, validation_alias=_alias("heading_font", "headingFont"))
    body_font: str | None = Field(default=None, validation_alias=_alias("body_font", "bodyFont"))


class UpdateSeoArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")

    page_title: str | None = Field(default=None, validation_alias=_alias("page_title", "pageTitle", "title"))
    meta_description: str | None = Field(
        default=None, validation_alias=_alias("meta_description", "metaDescription", "description")
    )
    keywords: list[str] | None = None


class GetSiteInfoArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")

    include: list[str] | None = None


__all__ = [
    "Action",
    "ActionErrorCode",
    "ActionName",
    "ActionOutcome",
    "AddSectionArgs",
    "EditSectionArgs",
    "GetSiteInfoArgs",
    "MoveInstruction",
    "RemoveSectionArgs",
    "ReorderSectionsArgs",
    "SectionFields",
    "UpdateColorsArgs",
    "UpdateFontsArgs",
    "UpdateSeoArgs",
]
