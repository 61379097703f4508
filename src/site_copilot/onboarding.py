from __future__ import annotations

import logging
from typing import Any, Mapping

from .business_defaults import BusinessDefaults, BusinessDefaultsProvider, derive_color_scheme, fallback_taglines
from .colors import is_hex_color
from .dictionaries import FIELD_REQUIREMENTS, QUESTION_PROMPTS, STEP_DEFINITIONS
from .errors import InvalidTransitionError, OnboardingIncompleteError
from .models.onboarding import (
    GATED_STEPS,
    STEP_ORDER,
    AnswersProvided,
    CompleteStep,
    DiscoveredInfo,
    EditRestart,
    Generate,
    OnboardingEvent,
    OnboardingState,
    OnboardingStep,
    RequiredQuestion,
    StartStep,
    StepTransition,
    ValidationResult,
)

logger = logging.getLogger(__name__)

_default_provider = BusinessDefaultsProvider()


def required_fields(step: OnboardingStep | str) -> frozenset[str]:
    return frozenset(STEP_DEFINITIONS[OnboardingStep(step)].required)


def has_value(answers: Mapping[str, Any], field: str) -> bool:
    value = answers.get(field)
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    if isinstance(value, (list, tuple, dict)) and not value:
        return False
    return True


def _label(field: str) -> str:
    requirement = FIELD_REQUIREMENTS.get(field)
    return requirement.label if requirement else field


def _suggest(field: str, answers: Mapping[str, Any], defaults: BusinessDefaults) -> Any:
    requirement = FIELD_REQUIREMENTS.get(field)
    if requirement is None or requirement.fallback in ("ask_user", "skip"):
        return None
    # colors fall back to the business type's primary, so only other dependencies gate inference
    if requirement.fallback == "infer_from_context" and not all(
        has_value(answers, dep) for dep in requirement.depends_on if dep != "primaryColor"
    ):
        return None

    primary = answers.get("primaryColor")
    scheme = derive_color_scheme(primary) if is_hex_color(primary) else defaults.colors

    if field == "primaryColor":
        return defaults.colors.primary
    if field == "secondaryColor":
        return scheme.secondary
    if field == "accentColor":
        return scheme.accent
    if field == "headingFont":
        return defaults.fonts.heading
    if field == "bodyFont":
        return defaults.fonts.body
    if field == "selectedSections":
        return list(defaults.default_sections)
    if field == "siteGoals":
        return list(defaults.site_goals) or None
    if field == "targetAudience":
        return list(defaults.target_audience) or None
    if field == "businessTagline":
        business_type = answers.get("businessType")
        if not isinstance(business_type, str) or not business_type.strip():
            business_type = defaults.business_type
        return fallback_taglines(business_type.strip())[0]
    return None


def validate_step(
    answers: Mapping[str, Any],
    step: OnboardingStep | str,
    *,
    defaults_provider: BusinessDefaultsProvider = _default_provider,
) -> ValidationResult:
    """Which required fields of ``step`` are absent or malformed, plus proposed defaults.

    Suggestions are proposals for the caller to offer; they are never written into answers.
    """
    step = OnboardingStep(step)
    definition = STEP_DEFINITIONS[step]
    defaults = defaults_provider.lookup(answers.get("businessType"))

    missing: list[str] = []
    invalid: dict[str, str] = {}
    suggestions: dict[str, Any] = {}

    for field in (*definition.required, *definition.optional):
        requirement = FIELD_REQUIREMENTS.get(field)
        if has_value(answers, field):
            if requirement and requirement.check and not requirement.check(answers[field]):
                invalid[field] = f"Invalid {_label(field).lower()}"
            continue
        if field in definition.required:
            missing.append(field)
        suggestion = _suggest(field, answers, defaults)
        if suggestion is not None:
            suggestions[field] = suggestion

    return ValidationResult(
        step=step,
        is_valid=not missing and not invalid,
        missing_required=missing,
        invalid=invalid,
        suggestions=suggestions,
    )


def missing_for_generation(
    answers: Mapping[str, Any],
    *,
    defaults_provider: BusinessDefaultsProvider = _default_provider,
) -> dict[str, list[str]]:
    blocking: dict[str, list[str]] = {}
    for step in GATED_STEPS:
        result = validate_step(answers, step, defaults_provider=defaults_provider)
        if not result.is_valid:
            blocking[step.value] = [*result.missing_required, *result.invalid]
    return blocking


def transition(
    state: OnboardingState,
    event: OnboardingEvent,
    *,
    defaults_provider: BusinessDefaultsProvider = _default_provider,
) -> OnboardingState:
    """Pure transition function. Returns a new state; the input is never modified.

    Raises:
        InvalidTransitionError: the event is not allowed from the current step
        OnboardingIncompleteError: generation requested before every step is valid
    """
    if state.step is OnboardingStep.generate:
        raise InvalidTransitionError("Onboarding already finished")

    if isinstance(event, AnswersProvided):
        return state.model_copy(update={"answers": {**state.answers, **event.answers}}, deep=True)

    if isinstance(event, StartStep):
        if event.step is OnboardingStep.generate:
            raise InvalidTransitionError("Generation is reached through the confirmation step")
        return state.model_copy(update={"step": event.step}, deep=True)

    if isinstance(event, CompleteStep):
        if state.step is OnboardingStep.confirmation:
            raise InvalidTransitionError("Confirmation ends with generate or edit-restart")
        result = validate_step(state.answers, state.step, defaults_provider=defaults_provider)
        if not result.is_valid:
            raise InvalidTransitionError(
                f"Step {state.step.value} is incomplete: "
                + ", ".join([*result.missing_required, *result.invalid])
            )
        next_step = STEP_ORDER[STEP_ORDER.index(state.step) + 1]
        return state.model_copy(
            update={"step": next_step, "completed_steps": _with_step(state, state.step)}, deep=True
        )

    if isinstance(event, Generate):
        if state.step is not OnboardingStep.confirmation:
            raise InvalidTransitionError("Generation is only reachable from confirmation")
        blocking = missing_for_generation(state.answers, defaults_provider=defaults_provider)
        if blocking:
            raise OnboardingIncompleteError(blocking)
        return state.model_copy(
            update={"step": OnboardingStep.generate, "completed_steps": _with_step(state, state.step)},
            deep=True,
        )

    if isinstance(event, EditRestart):
        if state.step is not OnboardingStep.confirmation:
            raise InvalidTransitionError("Edit-restart is only offered at confirmation")
        kept = [step for step in state.completed_steps if step is OnboardingStep.discovery]
        return state.model_copy(
            update={"step": OnboardingStep.type_selection, "completed_steps": kept}, deep=True
        )

    raise InvalidTransitionError(f"Unsupported event: {event!r}")


def _with_step(state: OnboardingState, step: OnboardingStep) -> list[OnboardingStep]:
    completed = list(state.completed_steps)
    if step not in completed:
        completed.append(step)
    return completed


class OnboardingOrchestrator:
    """Owns one onboarding session's state.

    Safe to discard and rebuild from the same answers at any time; it holds nothing
    else. It never advances on its own: every transition comes from the caller.
    """

    def __init__(
        self,
        state: OnboardingState | None = None,
        *,
        defaults_provider: BusinessDefaultsProvider | None = None,
    ) -> None:
        self._state = state or OnboardingState()
        self._defaults_provider = defaults_provider or _default_provider

    @classmethod
    def from_answers(
        cls,
        answers: Mapping[str, Any],
        *,
        step: OnboardingStep | str = OnboardingStep.discovery,
        defaults_provider: BusinessDefaultsProvider | None = None,
    ) -> "OnboardingOrchestrator":
        state = OnboardingState(answers=dict(answers), step=OnboardingStep(step))
        return cls(state, defaults_provider=defaults_provider)

    @property
    def state(self) -> OnboardingState:
        return self._state.model_copy(deep=True)

    @property
    def step(self) -> OnboardingStep:
        return self._state.step

    @property
    def answers(self) -> dict[str, Any]:
        return dict(self._state.answers)

    def dispatch(self, event: OnboardingEvent) -> OnboardingState:
        previous = self._state.step
        self._state = transition(self._state, event, defaults_provider=self._defaults_provider)
        if self._state.step is not previous:
            logger.info(
                "Onboarding step changed",
                extra={"from_step": previous.value, "to_step": self._state.step.value},
            )
        return self.state

    def set_answer(self, field: str, value: Any) -> None:
        self.dispatch(AnswersProvided(answers={field: value}))

    def set_answers(self, answers: Mapping[str, Any]) -> None:
        self.dispatch(AnswersProvided(answers=dict(answers)))

    def apply_discovered_info(self, info: DiscoveredInfo) -> dict[str, Any]:
        """Fold details found on an existing site or profile into the answers.

        Business name, description and primary color are only filled when still
        empty. Returns the answers that were written.
        """
        answers = self._state.answers
        updates: dict[str, Any] = {}

        website = info.existing_website
        if website is not None:
            updates["existingWebsite"] = str(website.url)
            if website.title and not has_value(answers, "businessName"):
                updates["businessName"] = website.title
            if website.description and not has_value(answers, "businessDescription"):
                updates["businessDescription"] = website.description
            colors = [color for color in website.colors if is_hex_color(color)]
            if colors and not has_value(answers, "primaryColor"):
                updates["primaryColor"] = colors[0]
            if website.logo_url:
                updates["logoUrl"] = website.logo_url

        if info.contact_info is not None and info.contact_info.email:
            updates["existingEmail"] = str(info.contact_info.email)
        if info.social_links:
            updates["existingSocials"] = dict(info.social_links)
        if info.domain:
            updates["existingDomain"] = info.domain

        if updates:
            self.set_answers(updates)
        return updates

    def start_step(self, step: OnboardingStep | str) -> ValidationResult:
        self.dispatch(StartStep(step=OnboardingStep(step)))
        result = self.validate_step()
        if result.missing_required:
            logger.info(
                "Onboarding step needs input",
                extra={"step": result.step.value, "missing_fields": result.missing_required},
            )
        return result

    def validate_step(self, step: OnboardingStep | str | None = None) -> ValidationResult:
        return validate_step(
            self._state.answers,
            self._state.step if step is None else step,
            defaults_provider=self._defaults_provider,
        )

    def complete_step(self) -> StepTransition:
        current = self._state.step
        if current in (OnboardingStep.confirmation, OnboardingStep.generate):
            return StepTransition(
                success=False, step=current, errors=["Choose generate or edit-restart to leave confirmation"]
            )
        result = self.validate_step()
        if not result.is_valid:
            errors = [f"Missing: {_label(field)}" for field in result.missing_required]
            errors += [message for message in result.invalid.values()]
            return StepTransition(success=False, step=current, errors=errors)
        self.dispatch(CompleteStep())
        return StepTransition(success=True, step=current, next_step=self._state.step)

    def get_required_questions(self) -> list[RequiredQuestion]:
        result = self.validate_step()
        fields = [*result.missing_required, *(f for f in result.invalid if f not in result.missing_required)]
        questions = []
        for field in fields:
            prompt = QUESTION_PROMPTS.get(field)
            if prompt is None:
                questions.append(RequiredQuestion(field=field, question=f"What is your {_label(field).lower()}?"))
            else:
                questions.append(
                    RequiredQuestion(
                        field=field,
                        question=prompt.question,
                        options=list(prompt.options) if prompt.options else None,
                        context=prompt.context,
                    )
                )
        return questions

    def missing_for_generation(self) -> dict[str, list[str]]:
        return missing_for_generation(self._state.answers, defaults_provider=self._defaults_provider)

    def can_generate(self) -> bool:
        return not self.missing_for_generation()

    def generate(self) -> OnboardingState:
        return self.dispatch(Generate())

    def edit_restart(self) -> OnboardingState:
        return self.dispatch(EditRestart())

    def defaults(self) -> BusinessDefaults:
        return self._defaults_provider.lookup(self._state.answers.get("businessType"))

    def progress(self) -> float:
        done = sum(1 for step in STEP_ORDER if step in self._state.completed_steps)
        return round(done / len(STEP_ORDER), 2)


__all__ = [
    "OnboardingOrchestrator",
    "has_value",
    "missing_for_generation",
    "required_fields",
    "transition",
    "validate_step",
]
