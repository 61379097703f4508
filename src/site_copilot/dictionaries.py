from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Literal, Mapping, Sequence

from pydantic import EmailStr, TypeAdapter, ValidationError

from .colors import is_hex_color
from .models.content import SiteStyles
from .models.onboarding import OnboardingStep, QuestionOption


SECTION_TYPES: Sequence[str] = (
    "hero",
    "about",
    "features",
    "services",
    "menu",
    "portfolio",
    "gallery",
    "testimonials",
    "team",
    "pricing",
    "contact",
    "cta",
    "newsletter",
    "faq",
    "blog",
    "stats",
)


DEFAULT_SECTION_TITLES: Mapping[str, str] = {
    "hero": "Welcome",
    "about": "About Us",
    "features": "Features",
    "services": "Our Services",
    "menu": "Menu",
    "portfolio": "Our Work",
    "gallery": "Gallery",
    "testimonials": "What Our Customers Say",
    "team": "Meet the Team",
    "pricing": "Pricing",
    "contact": "Get in Touch",
    "cta": "Ready to Get Started?",
    "newsletter": "Stay Updated",
    "faq": "Frequently Asked Questions",
    "blog": "Latest Posts",
    "stats": "By the Numbers",
}


DEFAULT_STYLE_FALLBACKS = SiteStyles(
    primary_color="#2563eb",
    secondary_color="#1e293b",
    accent_color="#f59e0b",
    heading_font="Inter",
    body_font="Inter",
)


@dataclass(frozen=True)
class BusinessProfile:
    key: str
    label: str
    description: str
    primary_color: str
    heading_font: str
    body_font: str
    default_sections: Sequence[str]
    site_goals: Sequence[str] = ()
    target_audience: Sequence[str] = ()


BUSINESS_PROFILES: Mapping[str, BusinessProfile] = {
    "restaurant": BusinessProfile(
        key="restaurant",
        label="Restaurant & Food",
        description="Restaurants, cafes, food trucks",
        primary_color="#dc2626",
        heading_font="Playfair Display",
        body_font="Lato",
        default_sections=("hero", "about", "menu", "gallery", "testimonials", "contact"),
        site_goals=("Showcase menu", "Enable reservations", "Show location & hours"),
        target_audience=("Food lovers", "Local diners", "Families"),
    ),
    "portfolio": BusinessProfile(
        key="portfolio",
        label="Portfolio & Creative",
        description="Artists, designers, photographers",
        primary_color="#0f172a",
        heading_font="Space Grotesk",
        body_font="Inter",
        default_sections=("hero", "about", "portfolio", "services", "testimonials", "contact"),
        site_goals=("Showcase work", "Attract clients", "Share expertise"),
        target_audience=("Potential clients", "Recruiters", "Collaborators"),
    ),
    "business": BusinessProfile(
        key="business",
        label="Business & Services",
        description="Consulting, agencies, services",
        primary_color="#2563eb",
        heading_font="Inter",
        body_font="Inter",
        default_sections=("hero", "features", "about", "team", "testimonials", "cta", "contact"),
        site_goals=("Generate leads", "Build trust", "Explain services"),
        target_audience=("Business owners", "Decision makers", "Companies"),
    ),
    "ecommerce": BusinessProfile(
        key="ecommerce",
        label="E-commerce & Shop",
        description="Online stores, products",
        primary_color="#16a34a",
        heading_font="Poppins",
        body_font="Open Sans",
        default_sections=("hero", "features", "testimonials", "faq", "newsletter", "contact"),
        site_goals=("Drive sales", "Showcase products", "Build trust"),
        target_audience=("Online shoppers", "Value seekers", "Product enthusiasts"),
    ),
    "blog": BusinessProfile(
        key="blog",
        label="Blog & Content",
        description="Blogs, news, content creators",
        primary_color="#7c3aed",
        heading_font="Merriweather",
        body_font="Source Sans Pro",
        default_sections=("hero", "about", "blog", "newsletter", "contact"),
        site_goals=("Share content", "Build audience", "Establish authority"),
        target_audience=("Readers", "Enthusiasts", "Knowledge seekers"),
    ),
    "fitness": BusinessProfile(
        key="fitness",
        label="Fitness & Health",
        description="Gyms, trainers, wellness",
        primary_color="#ea580c",
        heading_font="Montserrat",
        body_font="Roboto",
        default_sections=("hero", "services", "team", "pricing", "testimonials", "contact"),
        site_goals=("Attract members", "Show programs", "Enable booking"),
        target_audience=("Health-conscious individuals", "Athletes", "Beginners"),
    ),
}


GENERIC_PROFILE = BusinessProfile(
    key="other",
    label="Something else",
    description="Any other kind of website",
    primary_color=DEFAULT_STYLE_FALLBACKS.primary_color,
    heading_font="Inter",
    body_font="Inter",
    default_sections=("hero", "about", "features", "testimonials", "contact"),
)


FallbackStrategy = Literal["ask_user", "generate_default", "infer_from_context", "skip"]

_email_adapter: TypeAdapter[str] = TypeAdapter(EmailStr)


def _non_empty(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _longer_than(length: int) -> Callable[[Any], bool]:
    def check(value: Any) -> bool:
        return isinstance(value, str) and len(value.strip()) > length

    return check


def _is_email(value: Any) -> bool:
    try:
        _email_adapter.validate_python(value)
    except ValidationError:
        return False
    return True


def _is_section_list(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and all(item in SECTION_TYPES for item in value)


@dataclass(frozen=True)
class FieldRequirement:
    field: str
    label: str
    fallback: FallbackStrategy = "skip"
    check: Callable[[Any], bool] | None = None
    depends_on: Sequence[str] = ()


FIELD_REQUIREMENTS: Mapping[str, FieldRequirement] = {
    req.field: req
    for req in (
        FieldRequirement("existingWebsite", "Existing website URL"),
        FieldRequirement("existingSocials", "Social media accounts"),
        FieldRequirement("existingDomain", "Domain name"),
        FieldRequirement("existingEmail", "Contact email", check=_is_email),
        FieldRequirement("businessType", "Business type", fallback="ask_user", check=_non_empty),
        FieldRequirement("businessName", "Business name", fallback="ask_user", check=_non_empty),
        FieldRequirement(
            "businessDescription", "Business description", fallback="ask_user", check=_longer_than(10)
        ),
        FieldRequirement(
            "targetAudience",
            "Target audience",
            fallback="infer_from_context",
            depends_on=("businessType", "businessDescription"),
        ),
        FieldRequirement("primaryColor", "Primary brand color", fallback="generate_default", check=is_hex_color),
        FieldRequirement(
            "secondaryColor",
            "Secondary color",
            fallback="infer_from_context",
            check=is_hex_color,
            depends_on=("primaryColor",),
        ),
        FieldRequirement(
            "accentColor",
            "Accent color",
            fallback="infer_from_context",
            check=is_hex_color,
            depends_on=("primaryColor",),
        ),
        FieldRequirement("headingFont", "Heading font", fallback="generate_default"),
        FieldRequirement("bodyFont", "Body font", fallback="generate_default"),
        FieldRequirement("logoUrl", "Logo"),
        FieldRequirement(
            "selectedSections", "Site sections", fallback="generate_default", check=_is_section_list
        ),
        FieldRequirement("siteGoals", "Website goals", fallback="generate_default"),
        FieldRequirement("businessTagline", "Business tagline", fallback="generate_default", check=_non_empty),
    )
}


@dataclass(frozen=True)
class StepDefinition:
    step: OnboardingStep
    name: str
    description: str
    required: Sequence[str] = ()
    optional: Sequence[str] = ()


STEP_DEFINITIONS: Mapping[OnboardingStep, StepDefinition] = {
    definition.step: definition
    for definition in (
        StepDefinition(
            OnboardingStep.discovery,
            "Discovery",
            "Gather existing business assets",
            optional=("existingWebsite", "existingSocials", "existingDomain", "existingEmail"),
        ),
        StepDefinition(
            OnboardingStep.type_selection,
            "Business type",
            "Pick the kind of website",
            required=("businessType",),
        ),
        StepDefinition(
            OnboardingStep.identity_confirmation,
            "Identity",
            "Confirm the business name",
            required=("businessName",),
        ),
        StepDefinition(
            OnboardingStep.description,
            "Description",
            "What the business does and who it serves",
            required=("businessDescription",),
            optional=("targetAudience",),
        ),
        StepDefinition(
            OnboardingStep.branding,
            "Branding",
            "Colors and typography",
            required=("businessType", "primaryColor", "secondaryColor"),
            optional=("accentColor", "headingFont", "bodyFont", "logoUrl", "selectedSections", "siteGoals"),
        ),
        StepDefinition(
            OnboardingStep.tagline,
            "Tagline",
            "A short line under the business name",
            required=("businessTagline",),
        ),
        StepDefinition(
            OnboardingStep.confirmation,
            "Confirmation",
            "Review before generating",
        ),
        StepDefinition(OnboardingStep.generate, "Generate", "Create the site"),
    )
}


@dataclass(frozen=True)
class ColorPreset:
    key: str
    label: str
    primary: str
    secondary: str


COLOR_PRESETS: Sequence[ColorPreset] = (
    ColorPreset("blue-pro", "Professional Blue", "#2563eb", "#1e293b"),
    ColorPreset("purple-creative", "Creative Purple", "#7c3aed", "#1f2937"),
    ColorPreset("green-nature", "Nature Green", "#059669", "#064e3b"),
    ColorPreset("red-bold", "Bold Red", "#dc2626", "#1f2937"),
    ColorPreset("orange-warm", "Warm Orange", "#ea580c", "#292524"),
    ColorPreset("pink-playful", "Playful Pink", "#db2777", "#1f2937"),
)


@dataclass(frozen=True)
class QuestionPrompt:
    question: str
    # option values are what the answer must hold; labels are for display
    options: Sequence[QuestionOption] | None = None
    context: str | None = None


QUESTION_PROMPTS: Mapping[str, QuestionPrompt] = {
    "businessType": QuestionPrompt(
        question="What type of business is this website for?",
        options=tuple(
            QuestionOption(value=profile.key, label=profile.label)
            for profile in (*BUSINESS_PROFILES.values(), GENERIC_PROFILE)
        ),
        context="This helps us choose the right template and features",
    ),
    "businessName": QuestionPrompt(
        question="What's the name of your business?",
        context="This will be used throughout your website",
    ),
    "businessDescription": QuestionPrompt(
        question="Tell me about your business in a few sentences.",
        context="Describe what you do, who you serve, and what makes you unique",
    ),
    "primaryColor": QuestionPrompt(
        question="Which brand colors fit your business best?",
        options=tuple(QuestionOption(value=preset.primary, label=preset.label) for preset in COLOR_PRESETS),
    ),
    "businessTagline": QuestionPrompt(
        question="Pick a tagline for your website, or write your own.",
        context="A short line shown under your business name",
    ),
    "existingWebsite": QuestionPrompt(
        question="Do you have an existing website you'd like me to analyze and improve?",
    ),
    "existingSocials": QuestionPrompt(question="Do you have social media accounts for your business?"),
    "existingDomain": QuestionPrompt(question="Do you already own a domain name?"),
    "existingEmail": QuestionPrompt(question="Do you have a business email address?"),
}


FALLBACK_TAGLINES: Sequence[str] = (
    "Quality {business_type} you can trust",
    "Your success is our mission",
    "Excellence in every detail",
)


__all__ = [
    "BUSINESS_PROFILES",
    "BusinessProfile",
    "COLOR_PRESETS",
    "ColorPreset",
    "DEFAULT_SECTION_TITLES",
    "DEFAULT_STYLE_FALLBACKS",
    "FALLBACK_TAGLINES",
    "FIELD_REQUIREMENTS",
    "FieldRequirement",
    "GENERIC_PROFILE",
    "QUESTION_PROMPTS",
    "QuestionPrompt",
    "SECTION_TYPES",
    "STEP_DEFINITIONS",
    "StepDefinition",
]
