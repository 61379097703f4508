import pytest

from site_copilot.errors import OnboardingIncompleteError
from site_copilot.models.onboarding import OnboardingState, OnboardingStep
from site_copilot.site_generator import SiteGenerator
from site_copilot.validation import validate

ANSWERS = {
    "businessType": "restaurant",
    "businessName": "Casa Verde",
    "businessDescription": "Family-run trattoria with seasonal Italian cooking.",
    "primaryColor": "#dc2626",
    "secondaryColor": "#aa0000",
    "businessTagline": "Seasonal plates from the valley",
}


class UppercaseCopywriter:
    def __init__(self):
        self.calls = []

    def enhance_section_copy(self, *, section_type, business, current):
        self.calls.append(section_type)
        return {key: value.upper() if isinstance(value, str) else value for key, value in current.items()}


def state(**overrides) -> OnboardingState:
    return OnboardingState(answers={**ANSWERS, **overrides}, step=OnboardingStep.confirmation)


def test_generate_produces_valid_site_for_business_type():
    bundle = SiteGenerator().generate(state())
    content = bundle.content

    assert [section.type for section in content.sections] == [
        "hero",
        "about",
        "menu",
        "gallery",
        "testimonials",
        "contact",
    ]
    assert validate(content) == []
    assert all(outcome.success for outcome in bundle.outcomes)

    hero = content.sections[0]
    assert hero.title == "Casa Verde"
    assert hero.subtitle == "Seasonal plates from the valley"
    assert content.sections[1].content == ANSWERS["businessDescription"]
    assert content.styles.primary_color == "#dc2626"
    assert content.styles.heading_font == "Playfair Display"
    assert content.meta.title == "Casa Verde | Seasonal plates from the valley"


def test_selected_sections_win_and_hero_goes_first():
    bundle = SiteGenerator().generate(state(selectedSections=["about", "hero", "faq", "about"]))

    assert [section.type for section in bundle.content.sections] == ["hero", "about", "faq"]


def test_generate_refuses_incomplete_answers():
    answers = {key: value for key, value in ANSWERS.items() if key != "businessName"}

    with pytest.raises(OnboardingIncompleteError) as excinfo:
        SiteGenerator().generate(OnboardingState(answers=answers))
    assert "identity-confirmation" in excinfo.value.missing


def test_copywriter_rewrites_section_copy():
    copywriter = UppercaseCopywriter()
    bundle = SiteGenerator(copywriter=copywriter).generate(state())

    assert copywriter.calls[0] == "hero"
    assert bundle.content.sections[0].title == "CASA VERDE"


def test_summary_lists_sections():
    bundle = SiteGenerator().generate(state())

    assert bundle.summary_markdown.startswith("## Site Summary")
    assert "1. hero: Casa Verde" in bundle.summary_markdown
    assert "- Sections: 6" in bundle.summary_markdown
    assert bundle.model_dump()["content"]["styles"]["primaryColor"] == "#dc2626"
