from __future__ import annotations

from typing import Mapping

from pydantic import BaseModel, Field

from .colors import complement, darken
from .dictionaries import BUSINESS_PROFILES, FALLBACK_TAGLINES, GENERIC_PROFILE, BusinessProfile
from .models.conversation import BusinessInfo


class ColorScheme(BaseModel):
    primary: str
    secondary: str
    accent: str


class FontPairing(BaseModel):
    heading: str
    body: str


class BusinessDefaults(BaseModel):
    business_type: str
    colors: ColorScheme
    fonts: FontPairing
    default_sections: list[str] = Field(default_factory=list)
    site_goals: list[str] = Field(default_factory=list)
    target_audience: list[str] = Field(default_factory=list)


def derive_color_scheme(primary: str) -> ColorScheme:
    """Secondary is the primary darkened by 50 per channel, accent its RGB complement."""
    return ColorScheme(primary=primary, secondary=darken(primary), accent=complement(primary))


class BusinessDefaultsProvider:
    """Deterministic defaults keyed by business type. No model calls."""

    def __init__(
        self,
        *,
        profiles: Mapping[str, BusinessProfile] = BUSINESS_PROFILES,
        fallback: BusinessProfile = GENERIC_PROFILE,
    ) -> None:
        self._profiles = profiles
        self._fallback = fallback

    def profile(self, business_type: str | None) -> BusinessProfile:
        if not isinstance(business_type, str):
            return self._fallback
        return self._profiles.get(business_type.strip().lower(), self._fallback)

    def lookup(self, business_type: str | None) -> BusinessDefaults:
        profile = self.profile(business_type)
        return BusinessDefaults(
            business_type=profile.key,
            colors=derive_color_scheme(profile.primary_color),
            fonts=FontPairing(heading=profile.heading_font, body=profile.body_font),
            default_sections=list(profile.default_sections),
            site_goals=list(profile.site_goals),
            target_audience=list(profile.target_audience),
        )


def fallback_taglines(business_type: str) -> list[str]:
    return [template.format(business_type=business_type) for template in FALLBACK_TAGLINES]


def fallback_suggestions(field: str, business: BusinessInfo) -> list[str]:
    """Deterministic suggestions for when no model is available or the call fails."""
    if field == "businessTagline":
        return fallback_taglines(business.type)
    return []


__all__ = [
    "BusinessDefaults",
    "BusinessDefaultsProvider",
    "ColorScheme",
    "FontPairing",
    "derive_color_scheme",
    "fallback_suggestions",
    "fallback_taglines",
]
