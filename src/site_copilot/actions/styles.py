from __future__ import annotations

from pydantic.alias_generators import to_camel

from ..models.action import ActionName, UpdateColorsArgs, UpdateFontsArgs, UpdateSeoArgs
from ..models.content import ContentModel
from .base import ActionContext, ActionEffect, BaseAction


def _merge_styles(model: ContentModel, updates: dict[str, str]) -> dict[str, str]:
    for key, value in updates.items():
        setattr(model.styles, key, value)
    return {to_camel(key): value for key, value in updates.items()}


class UpdateColors(BaseAction[UpdateColorsArgs]):
    name = ActionName.update_colors
    ArgsModel = UpdateColorsArgs

    def run(self, model: ContentModel, args: UpdateColorsArgs, *, ctx: ActionContext) -> ActionEffect:
        updates = args.model_dump(exclude_none=True)
        if not updates:
            return ActionEffect(description="No color changes requested", mutated=False)
        return ActionEffect(description="Updated color scheme", changes=_merge_styles(model, updates))


class UpdateFonts(BaseAction[UpdateFontsArgs]):
    name = ActionName.update_fonts
    ArgsModel = UpdateFontsArgs

    def run(self, model: ContentModel, args: UpdateFontsArgs, *, ctx: ActionContext) -> ActionEffect:
        updates = args.model_dump(exclude_none=True)
        if not updates:
            return ActionEffect(description="No font changes requested", mutated=False)
        return ActionEffect(description="Updated typography", changes=_merge_styles(model, updates))


class UpdateSeo(BaseAction[UpdateSeoArgs]):
    name = ActionName.update_seo
    ArgsModel = UpdateSeoArgs

    def run(self, model: ContentModel, args: UpdateSeoArgs, *, ctx: ActionContext) -> ActionEffect:
        changes: dict[str, object] = {}
        if args.page_title is not None:
            model.meta.title = args.page_title
            changes["title"] = args.page_title
        if args.meta_description is not None:
            model.meta.description = args.meta_description
            changes["description"] = args.meta_description
        if args.keywords is not None:
            model.meta.keywords = list(args.keywords)
            changes["keywords"] = list(args.keywords)
        if not changes:
            return ActionEffect(description="No SEO changes requested", mutated=False)
        return ActionEffect(description="Updated SEO settings", changes=changes)


__all__ = ["UpdateColors", "UpdateFonts", "UpdateSeo"]
