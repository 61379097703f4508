from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Mapping, Sequence, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl


class OnboardingStep(str, Enum):
    discovery = "discovery"
    type_selection = "type-selection"
    identity_confirmation = "identity-confirmation"
    description = "description"
    branding = "branding"
    tagline = "tagline"
    confirmation = "confirmation"
    generate = "generate"


# generate is terminal and not part of the walkable progression
STEP_ORDER: Sequence[OnboardingStep] = (
    OnboardingStep.discovery,
    OnboardingStep.type_selection,
    OnboardingStep.identity_confirmation,
    OnboardingStep.description,
    OnboardingStep.branding,
    OnboardingStep.tagline,
    OnboardingStep.confirmation,
)

# steps that must all be valid before confirmation can move to generate
GATED_STEPS: Sequence[OnboardingStep] = STEP_ORDER[:-1]


class OnboardingState(BaseModel):
    answers: dict[str, Any] = Field(default_factory=dict)
    step: OnboardingStep = OnboardingStep.discovery
    completed_steps: list[OnboardingStep] = Field(default_factory=list)


class ValidationResult(BaseModel):
    step: OnboardingStep
    is_valid: bool
    missing_required: list[str] = Field(default_factory=list)
    invalid: dict[str, str] = Field(default_factory=dict)
    suggestions: dict[str, Any] = Field(default_factory=dict)


class QuestionOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: str
    label: str


class RequiredQuestion(BaseModel):
    field: str
    question: str
    options: Sequence[QuestionOption] | None = None
    context: str | None = None


class StepTransition(BaseModel):
    success: bool
    step: OnboardingStep
    next_step: OnboardingStep | None = None
    errors: list[str] = Field(default_factory=list)


class ExistingWebsite(BaseModel):
    url: HttpUrl
    title: str | None = None
    description: str | None = None
    colors: Sequence[str] = Field(default_factory=list)
    logo_url: str | None = None


class ContactInfo(BaseModel):
    email: EmailStr | None = None
    phone: str | None = None


class DiscoveredInfo(BaseModel):
    existing_website: ExistingWebsite | None = None
    social_links: Mapping[str, str] | None = None
    contact_info: ContactInfo | None = None
    domain: str | None = None


class AnswersProvided(BaseModel):
    kind: Literal["answers"] = "answers"
    answers: dict[str, Any]


class StartStep(BaseModel):
    kind: Literal["start"] = "start"
    step: OnboardingStep


class CompleteStep(BaseModel):
    kind: Literal["complete"] = "complete"


class Generate(BaseModel):
    kind: Literal["generate"] = "generate"


class EditRestart(BaseModel):
    kind: Literal["edit-restart"] = "edit-restart"


OnboardingEvent = Union[AnswersProvided, StartStep, CompleteStep, Generate, EditRestart]


__all__ = [
    "AnswersProvided",
    "CompleteStep",
    "ContactInfo",
    "DiscoveredInfo",
    "EditRestart",
    "ExistingWebsite",
    "GATED_STEPS",
    "Generate",
    "OnboardingEvent",
    "OnboardingState",
    "OnboardingStep",
    "QuestionOption",
    "RequiredQuestion",
    "STEP_ORDER",
    "StartStep",
    "StepTransition",
    "ValidationResult",
]
