from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Protocol, Sequence

from .business_defaults import BusinessDefaults, BusinessDefaultsProvider
from .dictionaries import SECTION_TYPES
from .errors import OnboardingIncompleteError
from .executor import ActionExecutor
from .models.action import Action, ActionName, ActionOutcome
from .models.content import ContentModel, SiteMeta, SiteStyles
from .models.conversation import BusinessInfo
from .models.onboarding import OnboardingState
from .onboarding import has_value, missing_for_generation

logger = logging.getLogger(__name__)


class Copywriter(Protocol):
    def enhance_section_copy(
        self,
        *,
        section_type: str,
        business: BusinessInfo,
        current: Mapping[str, Any],
    ) -> dict[str, Any]:
        ...


@dataclass
class GenerationBundle:
    content: ContentModel
    outcomes: list[ActionOutcome]
    summary_markdown: str

    def model_dump(self) -> dict[str, object]:
        return {
            "content": self.content.to_document(),
            "outcomes": [outcome.model_dump(mode="json") for outcome in self.outcomes],
            "summary": self.summary_markdown,
        }


class SiteGenerator:
    """Builds the first version of a site from finished onboarding answers.

    Every section goes through the action executor, so a generated site obeys the
    same rules as one edited by the assistant.
    """

    def __init__(
        self,
        *,
        executor: ActionExecutor | None = None,
        defaults_provider: BusinessDefaultsProvider | None = None,
        copywriter: Copywriter | None = None,
        section_types: Sequence[str] = SECTION_TYPES,
    ) -> None:
        self._executor = executor or ActionExecutor()
        self._defaults_provider = defaults_provider or BusinessDefaultsProvider()
        self._copywriter = copywriter
        self._section_types = tuple(section_types)

    def generate(self, state: OnboardingState) -> GenerationBundle:
        answers = state.answers
        blocking = missing_for_generation(answers, defaults_provider=self._defaults_provider)
        if blocking:
            raise OnboardingIncompleteError(blocking)

        defaults = self._defaults_provider.lookup(answers.get("businessType"))
        business = BusinessInfo(
            name=str(answers["businessName"]),
            type=str(answers.get("businessType") or defaults.business_type),
            description=answers.get("businessDescription"),
        )
        seed = ContentModel(
            sections=[],
            styles=self._build_styles(answers, defaults),
            meta=self._build_meta(answers, business),
        )

        actions = [
            Action(
                id=f"generate_{index}",
                name=ActionName.add_section.value,
                arguments={
                    "section_type": section_type,
                    "position": "end",
                    "content": self._section_copy(section_type, answers, business),
                },
            )
            for index, section_type in enumerate(self._section_plan(answers, defaults))
        ]
        result = self._executor.apply(seed, actions)

        logger.info(
            "Generated site",
            extra={
                "business_type": business.type,
                "section_count": len(result.model.sections),
                "failed_actions": len(result.failed),
            },
        )
        summary = self._build_summary(business, result.model, result.outcomes)
        return GenerationBundle(content=result.model, outcomes=result.outcomes, summary_markdown=summary)

    def _section_plan(self, answers: Mapping[str, Any], defaults: BusinessDefaults) -> list[str]:
        selected = answers.get("selectedSections")
        plan = list(selected) if has_value(answers, "selectedSections") else list(defaults.default_sections)
        if "hero" in plan:
            plan.remove("hero")
            plan.insert(0, "hero")
        # unknown types stay in the plan; the executor reports them as skipped
        return list(dict.fromkeys(plan))

    def _build_styles(self, answers: Mapping[str, Any], defaults: BusinessDefaults) -> SiteStyles:
        return SiteStyles(
            primary_color=answers.get("primaryColor") or defaults.colors.primary,
            secondary_color=answers.get("secondaryColor") or defaults.colors.secondary,
            accent_color=answers.get("accentColor") or defaults.colors.accent,
            heading_font=answers.get("headingFont") or defaults.fonts.heading,
            body_font=answers.get("bodyFont") or defaults.fonts.body,
        )

    def _build_meta(self, answers: Mapping[str, Any], business: BusinessInfo) -> SiteMeta:
        tagline = answers.get("businessTagline")
        title = f"{business.name} | {tagline}" if tagline else business.name
        description = business.description or f"{business.name}, a {business.type} business."
        keywords = [business.name, business.type]
        return SiteMeta(title=title, description=description, keywords=keywords)

    def _section_copy(
        self,
        section_type: str,
        answers: Mapping[str, Any],
        business: BusinessInfo,
    ) -> dict[str, Any]:
        copy = self._seed_copy(section_type, answers, business)
        if self._copywriter is None or section_type not in self._section_types:
            return copy
        return self._copywriter.enhance_section_copy(
            section_type=section_type, business=business, current=copy
        )

    def _seed_copy(
        self,
        section_type: str,
        answers: Mapping[str, Any],
        business: BusinessInfo,
    ) -> dict[str, Any]:
        tagline = answers.get("businessTagline")
        audience = answers.get("targetAudience")
        if section_type == "hero":
            subtitle = tagline or business.description
            return {"title": business.name, **({"subtitle": subtitle} if subtitle else {})}
        if section_type == "about":
            copy: dict[str, Any] = {"title": f"About {business.name}"}
            if business.description:
                copy["content"] = business.description
            return copy
        if section_type == "contact":
            copy = {"subtitle": "We'd love to hear from you"}
            if answers.get("existingEmail"):
                copy["content"] = f"Email us at {answers['existingEmail']}"
            return copy
        if section_type == "cta":
            return {"subtitle": f"Get in touch with {business.name} today"}
        if section_type == "testimonials" and isinstance(audience, list) and audience:
            return {"subtitle": f"Trusted by {', '.join(str(item) for item in audience[:2]).lower()}"}
        if section_type in ("features", "services"):
            goals = answers.get("siteGoals")
            if isinstance(goals, list) and goals:
                return {"items": [{"title": str(goal)} for goal in goals[:3]]}
        return {}

    def _build_summary(
        self,
        business: BusinessInfo,
        content: ContentModel,
        outcomes: Sequence[ActionOutcome],
    ) -> str:
        sections = "\n".join(
            f"{index}. {section.type}: {section.title}" for index, section in enumerate(content.sections, 1)
        ) or "- none"
        failures = "\n".join(
            f"- {outcome.description} ({outcome.error.value})" for outcome in outcomes if not outcome.success
        ) or "- none"
        styles = content.styles

        summary_lines = [
            "## Site Summary",
            f"- Business: {business.name}",
            f"- Type: {business.type}",
            f"- Title: {content.meta.title}",
            f"- Sections: {len(content.sections)}",
            "",
            "## Sections",
            sections,
            "",
            "## Styles",
            f"- Colors: {styles.primary_color} / {styles.secondary_color} / {styles.accent_color}",
            f"- Fonts: {styles.heading_font} / {styles.body_font}",
            "",
            "## Skipped",
            failures,
        ]
        return "\n".join(summary_lines)


__all__ = ["Copywriter", "GenerationBundle", "SiteGenerator"]
