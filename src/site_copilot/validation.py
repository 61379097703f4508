from __future__ import annotations

from collections import Counter
from typing import Sequence

from pydantic import BaseModel

from .colors import is_hex_color
from .dictionaries import SECTION_TYPES
from .models.content import ContentModel


class Violation(BaseModel):
    code: str
    path: str
    message: str


def validate(model: ContentModel, *, section_types: Sequence[str] = SECTION_TYPES) -> list[Violation]:
    """Return every invariant the model breaks; an empty list means valid.

    Advisory only: nothing is raised and the model is not touched.
    """
    violations: list[Violation] = []

    counts = Counter(section.id for section in model.sections)
    for section_id, count in counts.items():
        if count > 1:
            violations.append(
                Violation(
                    code="duplicate_section_id",
                    path="sections",
                    message=f"Section id {section_id!r} appears {count} times",
                )
            )

    allowed = set(section_types)
    for index, section in enumerate(model.sections):
        if section.type not in allowed:
            violations.append(
                Violation(
                    code="unknown_section_type",
                    path=f"sections[{index}].type",
                    message=f"Unknown section type {section.type!r}",
                )
            )

    for name in ("primary_color", "secondary_color"):
        value = getattr(model.styles, name)
        if not is_hex_color(value):
            violations.append(
                Violation(
                    code="invalid_color",
                    path=f"styles.{name}",
                    message=f"styles.{name} is missing" if value is None else f"{value!r} is not a hex color",
                )
            )

    for name in ("title", "description"):
        if not isinstance(getattr(model.meta, name, None), str):
            violations.append(
                Violation(code="missing_meta", path=f"meta.{name}", message=f"meta.{name} must be a string")
            )

    return violations


def is_valid(model: ContentModel, *, section_types: Sequence[str] = SECTION_TYPES) -> bool:
    return not validate(model, section_types=section_types)


__all__ = ["Violation", "validate", "is_valid"]
