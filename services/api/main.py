from __future__ import annotations

import asyncio
import logging
import os
import uuid
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from site_copilot.business_defaults import BusinessDefaults, BusinessDefaultsProvider, fallback_suggestions
from site_copilot.command_log import InMemoryCommandLog
from site_copilot.command_service import CommandResult, SiteCommandService
from site_copilot.content_repository import LocalContentRepository
from site_copilot.errors import (
    AITransportError,
    OnboardingIncompleteError,
    PersistenceError,
    SiteNotFoundError,
)
from site_copilot.executor import ActionExecutor
from site_copilot.firestore_store import FirestoreCommandLog, FirestoreContentRepository
from site_copilot.logging_config import set_trace_id, setup_logging
from site_copilot.models.action import Action
from site_copilot.models.command import CommandRecord
from site_copilot.models.conversation import BusinessInfo, ChatMessage
from site_copilot.models.onboarding import OnboardingState, OnboardingStep, ValidationResult
from site_copilot.onboarding import validate_step
from site_copilot.round_trip import AssistantRoundTrip
from site_copilot.site_generator import SiteGenerator
from site_copilot.vertex_ai_adapter import VertexAIAdapter


class CommandRequest(BaseModel):
    command: str = Field(min_length=1)
    history: list[ChatMessage] = Field(default_factory=list)
    business: BusinessInfo | None = None


class DirectActionsRequest(BaseModel):
    actions: list[Action] = Field(min_length=1)


class ValidateStepRequest(BaseModel):
    answers: dict[str, Any] = Field(default_factory=dict)
    step: OnboardingStep


class DefaultsRequest(BaseModel):
    business_type: str | None = None


class SuggestFieldRequest(BaseModel):
    field: str = Field(min_length=1)
    business: BusinessInfo
    current_value: str = ""


class SuggestFieldResponse(BaseModel):
    field: str
    suggestions: list[str]


class GenerateSiteRequest(BaseModel):
    answers: dict[str, Any]
    site_id: str | None = Field(default=None, description="Save the generated content under this site id")


class GenerateSiteResponse(BaseModel):
    site_id: str | None
    content: dict[str, Any]
    summary: str
    failed_sections: list[str]


# Environment configuration
ENVIRONMENT = os.getenv("ENVIRONMENT", "dev")
PROJECT_ID = os.getenv("PROJECT_ID")
VERTEX_LOCATION = os.getenv("VERTEX_LOCATION", "asia-northeast1")
VERTEX_MODEL = os.getenv("VERTEX_MODEL", "gemini-1.5-pro")
SITE_DATA_DIR = os.getenv("SITE_DATA_DIR", "data/sites")
AI_MAX_TOKENS = int(os.getenv("AI_MAX_TOKENS", "1024"))
AI_TEMPERATURE = float(os.environ["AI_TEMPERATURE"]) if os.getenv("AI_TEMPERATURE") else None

# Setup logging
setup_logging(environment=ENVIRONMENT, project_id=PROJECT_ID)
logger = logging.getLogger(__name__)

app = FastAPI(title="Site Copilot API", version="0.1.0")

# Use Firestore in production, local files and in-memory log for dev
if ENVIRONMENT == "dev":
    repository = LocalContentRepository(base_path=Path(SITE_DATA_DIR).resolve())
    command_log = InMemoryCommandLog()
else:
    repository = FirestoreContentRepository(project_id=PROJECT_ID)
    command_log = FirestoreCommandLog(project_id=PROJECT_ID)

# Vertex AI needs a project; without one only direct actions and onboarding work
ai_adapter = (
    VertexAIAdapter(project_id=PROJECT_ID, location=VERTEX_LOCATION, model_name=VERTEX_MODEL)
    if PROJECT_ID
    else None
)
round_trip = (
    AssistantRoundTrip(ai_adapter, max_tokens=AI_MAX_TOKENS, temperature=AI_TEMPERATURE)
    if ai_adapter
    else None
)

executor = ActionExecutor()
defaults_provider = BusinessDefaultsProvider()
command_service = SiteCommandService(
    repository=repository,
    round_trip=round_trip,
    executor=executor,
    command_log=command_log,
)
site_generator = SiteGenerator(
    executor=executor,
    defaults_provider=defaults_provider,
    copywriter=ai_adapter,
)


@app.middleware("http")
async def bind_trace_id(request: Request, call_next):
    header = request.headers.get("x-cloud-trace-context", "")
    trace = header.split("/")[0] if header else uuid.uuid4().hex
    set_trace_id(f"projects/{PROJECT_ID}/traces/{trace}" if PROJECT_ID else trace)
    return await call_next(request)


@app.exception_handler(SiteNotFoundError)
async def site_not_found(request: Request, exc: SiteNotFoundError) -> JSONResponse:
    return JSONResponse({"detail": f"Site not found: {exc.site_id}"}, status_code=404)


@app.exception_handler(AITransportError)
async def ai_unavailable(request: Request, exc: AITransportError) -> JSONResponse:
    logger.warning("AI round trip failed", extra={"provider": exc.provider, "retryable": exc.retryable})
    return JSONResponse({"detail": "The assistant is unavailable, please try again"}, status_code=502)


@app.exception_handler(PersistenceError)
async def storage_unavailable(request: Request, exc: PersistenceError) -> JSONResponse:
    logger.error("Storage failure", exc_info=exc)
    return JSONResponse({"detail": "Could not save your site, please try again"}, status_code=502)


@app.post("/v1/sites/{site_id}/commands", response_model=CommandResult)
async def run_command(site_id: str, request: CommandRequest) -> CommandResult:
    if round_trip is None:
        raise HTTPException(status_code=503, detail="Assistant is not configured")
    return await command_service.handle_command(
        site_id, request.command, history=request.history, business=request.business
    )


@app.post("/v1/sites/{site_id}/actions", response_model=CommandResult)
async def apply_actions(site_id: str, request: DirectActionsRequest) -> CommandResult:
    return await asyncio.to_thread(command_service.apply_direct, site_id, request.actions)


@app.get("/v1/sites/{site_id}")
async def get_site(site_id: str) -> JSONResponse:
    model = await asyncio.to_thread(repository.load_content_model, site_id)
    return JSONResponse(model.to_document())


@app.get("/v1/sites/{site_id}/commands", response_model=list[CommandRecord])
async def list_commands(site_id: str, limit: int = 50) -> list[CommandRecord]:
    return await asyncio.to_thread(command_log.list_for_site, site_id, limit=limit)


@app.post("/v1/onboarding:validate", response_model=ValidationResult)
async def validate_onboarding_step(request: ValidateStepRequest) -> ValidationResult:
    return validate_step(request.answers, request.step, defaults_provider=defaults_provider)


@app.post("/v1/onboarding:defaults", response_model=BusinessDefaults)
async def business_defaults(request: DefaultsRequest) -> BusinessDefaults:
    return defaults_provider.lookup(request.business_type)


@app.post("/v1/onboarding:suggest", response_model=SuggestFieldResponse)
async def suggest_field(request: SuggestFieldRequest) -> SuggestFieldResponse:
    if ai_adapter is None:
        suggestions = fallback_suggestions(request.field, request.business)
    else:
        suggestions = await asyncio.to_thread(
            ai_adapter.suggest_field_values,
            field=request.field,
            business=request.business,
            current_value=request.current_value,
        )
    return SuggestFieldResponse(field=request.field, suggestions=suggestions)


@app.post("/v1/onboarding:generate", response_model=GenerateSiteResponse)
async def generate_site(request: GenerateSiteRequest) -> GenerateSiteResponse:
    state = OnboardingState(answers=request.answers, step=OnboardingStep.confirmation)
    try:
        bundle = await asyncio.to_thread(site_generator.generate, state)
    except OnboardingIncompleteError as exc:
        raise HTTPException(status_code=422, detail={"missing": exc.missing}) from exc

    if request.site_id:
        await asyncio.to_thread(repository.save_content_model, request.site_id, bundle.content)

    return GenerateSiteResponse(
        site_id=request.site_id,
        content=bundle.content.to_document(),
        summary=bundle.summary_markdown,
        failed_sections=[outcome.description for outcome in bundle.outcomes if not outcome.success],
    )


@app.get("/health")
async def healthcheck() -> JSONResponse:
    return JSONResponse({"status": "ok"})
