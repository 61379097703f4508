from __future__ import annotations

from typing import Sequence

from pydantic import ValidationError

from ..models.action import (
    ActionErrorCode,
    ActionName,
    AddSectionArgs,
    EditSectionArgs,
    RemoveSectionArgs,
    ReorderSectionsArgs,
)
from ..models.content import ContentModel, Section, describe_ref
from .base import ActionContext, ActionEffect, ActionError, BaseAction

# never changed through edit_section
PROTECTED_FIELDS = frozenset({"id", "type"})


def _insert_index(sections: Sequence[Section], position: str | int) -> int:
    if isinstance(position, int):
        return min(max(position, 0), len(sections))
    if position == "start":
        return 0
    if position == "after_hero":
        for index, section in enumerate(sections):
            if section.type == "hero":
                return index + 1
        return 0
    if position == "before_contact":
        for index, section in enumerate(sections):
            if section.type == "contact":
                return index
    return len(sections)


def _not_found(action: str, ref) -> ActionError:
    return ActionError(ActionErrorCode.section_not_found, f"No section matches {describe_ref(ref)} ({action})")


class AddSection(BaseAction[AddSectionArgs]):
    name = ActionName.add_section
    ArgsModel = AddSectionArgs

    def run(self, model: ContentModel, args: AddSectionArgs, *, ctx: ActionContext) -> ActionEffect:
        section_type = args.section_type
        if section_type not in ctx.section_types:
            raise ActionError(
                ActionErrorCode.invalid_section_type,
                f"Unknown section type {section_type!r}",
            )

        fields = args.content.model_dump(exclude_none=True)
        for key in PROTECTED_FIELDS:
            fields.pop(key, None)
        title = fields.pop("title", None) or ctx.default_titles.get(section_type, "New Section")

        section = Section(id=ctx.id_factory(model.section_ids()), type=section_type, title=title, **fields)
        index = _insert_index(model.sections, args.position)
        model.sections.insert(index, section)
        return ActionEffect(
            description=f"Added {section_type} section",
            changes={"section": section.model_dump(exclude_none=True), "index": index},
        )


class RemoveSection(BaseAction[RemoveSectionArgs]):
    name = ActionName.remove_section
    ArgsModel = RemoveSectionArgs

    def run(self, model: ContentModel, args: RemoveSectionArgs, *, ctx: ActionContext) -> ActionEffect:
        index = model.index_of(args.ref)
        if index is None:
            raise _not_found("remove_section", args.ref)
        removed = model.sections.pop(index)
        return ActionEffect(
            description=f"Removed {removed.type} section",
            changes={"removed": {"id": removed.id, "type": removed.type, "title": removed.title}},
        )


class EditSection(BaseAction[EditSectionArgs]):
    name = ActionName.edit_section
    ArgsModel = EditSectionArgs

    def run(self, model: ContentModel, args: EditSectionArgs, *, ctx: ActionContext) -> ActionEffect:
        index = model.index_of(args.ref)
        if index is None:
            raise _not_found("edit_section", args.ref)

        current = model.sections[index]
        updates = {
            key: value
            for key, value in args.updates.model_dump(exclude_unset=True).items()
            if key not in PROTECTED_FIELDS
        }
        if not updates:
            return ActionEffect(description=f"No changes for {current.type} section", mutated=False)

        merged = {**current.model_dump(), **updates}
        try:
            model.sections[index] = Section.model_validate(merged)
        except ValidationError as exc:
            raise ActionError(ActionErrorCode.malformed_action, f"Invalid section update: {exc}") from exc
        return ActionEffect(
            description=f"Updated {current.type} section",
            changes={"section_id": current.id, "updates": updates},
        )


class ReorderSections(BaseAction[ReorderSectionsArgs]):
    name = ActionName.reorder_sections
    ArgsModel = ReorderSectionsArgs

    def run(self, model: ContentModel, args: ReorderSectionsArgs, *, ctx: ActionContext) -> ActionEffect:
        current = model.section_ids()
        if args.section_order is not None:
            new_order = list(args.section_order)
            if len(new_order) != len(current) or set(new_order) != set(current):
                raise ActionError(
                    ActionErrorCode.invalid_order,
                    "section_order must list every existing section id exactly once",
                )
        elif args.swap is not None:
            first, second = args.swap
            missing = [section_id for section_id in (first, second) if section_id not in current]
            if missing:
                raise ActionError(ActionErrorCode.invalid_order, f"Unknown section ids: {', '.join(missing)}")
            new_order = list(current)
            i, j = new_order.index(first), new_order.index(second)
            new_order[i], new_order[j] = new_order[j], new_order[i]
        else:
            move = args.move
            if move.section_id not in current:
                raise ActionError(ActionErrorCode.invalid_order, f"Unknown section id: {move.section_id}")
            if not 0 <= move.to_index < len(current):
                raise ActionError(ActionErrorCode.invalid_order, f"Index {move.to_index} is out of range")
            new_order = [section_id for section_id in current if section_id != move.section_id]
            new_order.insert(move.to_index, move.section_id)

        if new_order == current:
            return ActionEffect(description="Sections already in that order", mutated=False)

        by_id = {section.id: section for section in model.sections}
        model.sections = [by_id[section_id] for section_id in new_order]
        return ActionEffect(description="Reordered sections", changes={"new_order": new_order})


__all__ = ["AddSection", "EditSection", "RemoveSection", "ReorderSections"]
