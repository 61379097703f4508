from __future__ import annotations

from typing import Annotated, Any, Literal, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Section(BaseModel):
    """One ordered content block of a site.

    ``items`` is passed through untouched; its shape depends on the section type
    (testimonials carry quote/author/role, features carry title/description/icon).
    Unknown keys such as ``cta`` or ``variant`` are kept as extra fields.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    type: str
    title: str
    subtitle: str | None = None
    content: str | None = None
    items: list[dict[str, Any]] | None = None


class SiteStyles(BaseModel):
    """Site-wide styling. Colors may be missing on stored documents; validate() reports that."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    primary_color: str | None = None
    secondary_color: str | None = None
    accent_color: str | None = None
    heading_font: str | None = None
    body_font: str | None = None


class SiteMeta(BaseModel):
    # title and description have no defaults: an empty string is fine, absence is not
    title: str
    description: str
    keywords: list[str] | None = None


class ById(BaseModel):
    by: Literal["id"] = "id"
    id: str


class ByType(BaseModel):
    by: Literal["type"] = "type"
    type: str


SectionRef = Annotated[Union[ById, ByType], Field(discriminator="by")]


def describe_ref(ref: ById | ByType) -> str:
    if isinstance(ref, ById):
        return f"id={ref.id}"
    return f"type={ref.type}"


class ContentModel(BaseModel):
    sections: list[Section] = Field(default_factory=list)
    styles: SiteStyles
    meta: SiteMeta

    def section_ids(self) -> list[str]:
        return [section.id for section in self.sections]

    def index_of(self, ref: ById | ByType) -> int | None:
        return resolve_section(self.sections, ref)

    def find_section(self, ref: ById | ByType) -> Section | None:
        index = self.index_of(ref)
        return None if index is None else self.sections[index]

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def resolve_section(sections: Sequence[Section], ref: ById | ByType) -> int | None:
    """Return the index a reference points at, or None.

    By id there is at most one match. By type the first section in the current
    order wins, so ``ByType("hero")`` is stable when several heroes exist.
    """
    for index, section in enumerate(sections):
        if isinstance(ref, ById) and section.id == ref.id:
            return index
        if isinstance(ref, ByType) and section.type == ref.type:
            return index
    return None


def resolve_styles(styles: SiteStyles, defaults: SiteStyles | None) -> SiteStyles:
    """Fill absent optional style fields from caller-supplied defaults."""
    if defaults is None:
        return styles
    merged = styles.model_dump()
    for key, value in defaults.model_dump().items():
        if merged.get(key) is None:
            merged[key] = value
    return SiteStyles.model_validate(merged)


__all__ = [
    "ById",
    "ByType",
    "ContentModel",
    "Section",
    "SectionRef",
    "SiteMeta",
    "SiteStyles",
    "describe_ref",
    "resolve_section",
    "resolve_styles",
]
