from __future__ import annotations

from typing import Any

from ..models.action import ActionName, GetSiteInfoArgs
from ..models.content import ContentModel, resolve_styles
from .base import ActionContext, ActionEffect, BaseAction


class GetSiteInfo(BaseAction[GetSiteInfoArgs]):
    """Read-only view of the site so the model can look before it edits."""

    name = ActionName.get_site_info
    ArgsModel = GetSiteInfoArgs

    def run(self, model: ContentModel, args: GetSiteInfoArgs, *, ctx: ActionContext) -> ActionEffect:
        styles = resolve_styles(model.styles, ctx.style_defaults)
        info: dict[str, Any] = {
            "sections": [
                {"id": section.id, "type": section.type, "title": section.title} for section in model.sections
            ],
            "styles": styles.model_dump(by_alias=True, exclude_none=True),
            "meta": model.meta.model_dump(exclude_none=True),
        }
        if args.include:
            info = {key: value for key, value in info.items() if key in args.include}
        info["sectionCount"] = len(model.sections)

        types = ", ".join(section.type for section in model.sections) or "none"
        return ActionEffect(
            description=f"Site has {len(model.sections)} sections ({types})",
            changes=info,
            mutated=False,
        )


__all__ = ["GetSiteInfo"]
