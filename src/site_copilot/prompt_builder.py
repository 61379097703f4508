from __future__ import annotations

from typing import Sequence

from .dictionaries import DEFAULT_STYLE_FALLBACKS
from .models.content import ContentModel, SiteStyles, resolve_styles
from .models.conversation import BusinessInfo, ToolDeclaration


def build_system_instructions(
    model: ContentModel,
    *,
    tools: Sequence[ToolDeclaration] = (),
    business: BusinessInfo | None = None,
    style_defaults: SiteStyles | None = DEFAULT_STYLE_FALLBACKS,
    additional_context: str | None = None,
) -> str:
    """Compose the system prompt from the current snapshot.

    Rebuilt for every request. Sections are listed by id, type and title only;
    full section content is left out to keep the prompt bounded.
    """
    parts = [
        _identity_section(),
        _site_state_section(model, style_defaults),
        _business_section(business),
        _tool_usage_section(tools),
        f"## Additional Context\n{additional_context}" if additional_context else "",
    ]
    return "\n\n".join(part for part in parts if part)


def _identity_section() -> str:
    return "\n".join(
        [
            "# AI Webmaster",
            "",
            "You are an AI webmaster assistant for a website builder. You help users create and "
            "customize their websites through natural conversation.",
            "",
            "- Understand what the user wants to achieve",
            "- Use the available tools to make changes to their website",
            "- Explain what you're doing in clear, friendly language",
            "- If a request is unclear, ask before changing anything",
        ]
    )


def _site_state_section(model: ContentModel, style_defaults: SiteStyles | None) -> str:
    styles = resolve_styles(model.styles, style_defaults)
    section_lines = [
        f'  - [{section.id}] {section.type}: "{section.title}"' for section in model.sections
    ] or ["  No sections yet"]

    lines = [
        "## Current Website State",
        "",
        f"### Sections ({len(model.sections)} total, top to bottom)",
        *section_lines,
        "",
        "### Styles",
        f"- Primary Color: {styles.primary_color}",
        f"- Secondary Color: {styles.secondary_color}",
    ]
    if styles.accent_color:
        lines.append(f"- Accent Color: {styles.accent_color}")
    if styles.heading_font:
        lines.append(f"- Heading Font: {styles.heading_font}")
    if styles.body_font:
        lines.append(f"- Body Font: {styles.body_font}")
    lines += [
        "",
        "### Page Meta",
        f"- Title: {model.meta.title}",
        f"- Description: {model.meta.description}",
        "",
        "Refer to sections by the id in brackets. This state is current; earlier messages may be stale.",
    ]
    return "\n".join(lines)


def _business_section(business: BusinessInfo | None) -> str:
    if business is None:
        return ""
    lines = [
        "## Business Information",
        "",
        f"- **Name:** {business.name}",
        f"- **Type:** {business.type}",
    ]
    if business.description:
        lines.append(f"- **Description:** {business.description}")
    return "\n".join(lines)


def _tool_usage_section(tools: Sequence[ToolDeclaration]) -> str:
    if not tools:
        return ""
    lines = ["## Tools", ""]
    lines += [f"- **{tool.name}**: {tool.description}" for tool in tools]
    lines += [
        "",
        "Tool calls in one reply run in order, so a later call can refer to a section an "
        "earlier call added. Briefly say what you changed after using tools.",
    ]
    return "\n".join(lines)


def build_field_suggestion_prompt(field: str, current_value: str, business: BusinessInfo) -> str:
    current = f'Current value: "{current_value}"' if current_value else "This field is currently empty."
    description = f"Business description: {business.description}\n" if business.description else ""
    return (
        f'You are helping a user set up their website for "{business.name}", a {business.type} business.\n\n'
        f"{description}"
        f'The user needs help with the "{field}" field.\n{current}\n\n'
        "Provide 3 suggestions that are professional, appropriate for the business type, and distinct.\n"
        'Return a JSON array of strings, for example ["one", "two", "three"].'
    )


__all__ = ["build_field_suggestion_prompt", "build_system_instructions"]
