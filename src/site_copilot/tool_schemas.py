from __future__ import annotations

from typing import Any, Mapping, Sequence

from .dictionaries import SECTION_TYPES
from .models.action import ActionName
from .models.conversation import ToolDeclaration


def _string(description: str, enum: Sequence[str] | None = None) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "string", "description": description}
    if enum:
        schema["enum"] = list(enum)
    return schema


def _object(properties: Mapping[str, Any], required: Sequence[str] = ()) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "object", "properties": dict(properties)}
    if required:
        schema["required"] = list(required)
    return schema


_ITEMS = {
    "type": "array",
    "description": "Items for the section (testimonials carry quote/author/role, features carry title/description/icon)",
    "items": {"type": "object"},
}

_SECTION_FIELDS = {
    "title": _string("Section title"),
    "subtitle": _string("Section subtitle"),
    "content": _string("Main paragraph text"),
    "items": _ITEMS,
}


def build_tool_declarations(section_types: Sequence[str] = SECTION_TYPES) -> list[ToolDeclaration]:
    return [
        ToolDeclaration(
            name=ActionName.add_section.value,
            description=(
                "Add a new section to the website. Use this when the user wants to add content "
                "like testimonials, features, team members, etc."
            ),
            parameters=_object(
                {
                    "section_type": _string("The type of section to add", section_types),
                    "position": _string(
                        "Where to place the section", ("start", "end", "after_hero", "before_contact")
                    ),
                    "content": _object(_SECTION_FIELDS),
                },
                required=("section_type",),
            ),
        ),
        ToolDeclaration(
            name=ActionName.remove_section.value,
            description="Remove a section from the website",
            parameters=_object(
                {
                    "section_id": _string("The ID of the section to remove"),
                    "section_type": _string("The type of section to remove (if ID not known)", section_types),
                }
            ),
        ),
        ToolDeclaration(
            name=ActionName.edit_section.value,
            description="Edit an existing section's content. Only the fields you pass are changed.",
            parameters=_object(
                {
                    "section_id": _string("The ID of the section to edit"),
                    "section_type": _string("The type of section to edit (if ID not known)", section_types),
                    "updates": _object(_SECTION_FIELDS),
                },
                required=("updates",),
            ),
        ),
        ToolDeclaration(
            name=ActionName.reorder_sections.value,
            description=(
                "Change the order of sections on the page. Pass every section ID in the new order, "
                "or a swap of two IDs, or a move of one ID to an index."
            ),
            parameters=_object(
                {
                    "section_order": {
                        "type": "array",
                        "description": "All section IDs in the new order",
                        "items": {"type": "string"},
                    },
                    "swap": {
                        "type": "array",
                        "description": "Exactly two section IDs to swap",
                        "items": {"type": "string"},
                    },
                    "move": _object(
                        {
                            "section_id": _string("Section to move"),
                            "to_index": {"type": "integer", "description": "Zero-based target index"},
                        },
                        required=("section_id", "to_index"),
                    ),
                }
            ),
        ),
        ToolDeclaration(
            name=ActionName.update_colors.value,
            description="Change the website's color scheme",
            parameters=_object(
                {
                    "primary_color": _string("Primary brand color (hex code)"),
                    "secondary_color": _string("Secondary color (hex code)"),
                    "accent_color": _string("Accent color for highlights (hex code)"),
                }
            ),
        ),
        ToolDeclaration(
            name=ActionName.update_fonts.value,
            description="Change the website's typography",
            parameters=_object(
                {
                    "heading_font": _string("Font family for headings"),
                    "body_font": _string("Font family for body text"),
                }
            ),
        ),
        ToolDeclaration(
            name=ActionName.update_seo.value,
            description="Update SEO meta tags and settings",
            parameters=_object(
                {
                    "page_title": _string("Page title for browser tab and search results"),
                    "meta_description": _string("Meta description for search results"),
                    "keywords": {"type": "array", "description": "Target keywords", "items": {"type": "string"}},
                }
            ),
        ),
        ToolDeclaration(
            name=ActionName.get_site_info.value,
            description="Get information about the current website state without changing anything",
            parameters=_object(
                {
                    "include": {
                        "type": "array",
                        "description": "What to include: sections, styles, meta",
                        "items": {"type": "string"},
                    }
                }
            ),
        ),
    ]


TOOL_DECLARATIONS: Sequence[ToolDeclaration] = tuple(build_tool_declarations())


__all__ = ["TOOL_DECLARATIONS", "build_tool_declarations"]
