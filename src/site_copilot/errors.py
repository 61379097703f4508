from __future__ import annotations


class SiteCopilotError(Exception):
    """Base class for errors that propagate out of site_copilot."""


class AITransportError(SiteCopilotError):
    """The model round trip failed or timed out; nothing was applied."""

    def __init__(self, message: str, *, provider: str = "vertex-ai", retryable: bool = False) -> None:
        super().__init__(message)
        self.provider = provider
        self.retryable = retryable


class PersistenceError(SiteCopilotError):
    pass


class SiteNotFoundError(SiteCopilotError, LookupError):
    def __init__(self, site_id: str) -> None:
        super().__init__(f"Site content not found: {site_id}")
        self.site_id = site_id


class OnboardingIncompleteError(SiteCopilotError):
    def __init__(self, missing: dict[str, list[str]]) -> None:
        steps = ", ".join(f"{step}: {', '.join(fields)}" for step, fields in missing.items())
        super().__init__(f"Onboarding is not ready for generation ({steps})")
        self.missing = missing


class InvalidTransitionError(SiteCopilotError):
    pass


__all__ = [
    "SiteCopilotError",
    "AITransportError",
    "PersistenceError",
    "SiteNotFoundError",
    "OnboardingIncompleteError",
    "InvalidTransitionError",
]
