import asyncio
import json
from pathlib import Path

import pytest

from site_copilot.command_log import InMemoryCommandLog
from site_copilot.command_service import SiteCommandService
from site_copilot.content_repository import InMemoryContentRepository
from site_copilot.errors import AITransportError, PersistenceError, SiteNotFoundError
from site_copilot.models.action import Action
from site_copilot.models.command import CommandStatus
from site_copilot.models.content import ContentModel
from site_copilot.models.conversation import RoundTripRequest, RoundTripResponse
from site_copilot.round_trip import AssistantRoundTrip

DATA_DIR = Path(__file__).resolve().parent.parent / "data" / "sites"


class ScriptedTransport:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests: list[RoundTripRequest] = []

    async def complete(self, request: RoundTripRequest) -> RoundTripResponse:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.response


class BrokenLog(InMemoryCommandLog):
    def record(self, **kwargs):
        raise PersistenceError("Failed to record command")


class CountingRepository(InMemoryContentRepository):
    def __init__(self, sites):
        super().__init__(sites)
        self.saves = 0

    def save_content_model(self, site_id, model):
        self.saves += 1
        super().save_content_model(site_id, model)


def demo_site() -> ContentModel:
    with (DATA_DIR / "demo-site.json").open("r", encoding="utf-8") as fp:
        return ContentModel.model_validate(json.load(fp))


def build_service(response=None, error=None):
    repository = CountingRepository({"demo": demo_site()})
    transport = ScriptedTransport(response=response, error=error)
    log = InMemoryCommandLog()
    service = SiteCommandService(
        repository=repository,
        round_trip=AssistantRoundTrip(transport),
        command_log=log,
    )
    return service, repository, transport, log


def tool_response(*actions, content=""):
    return RoundTripResponse(content=content, tool_calls=list(actions), model="fake-model", finish_reason="tool_use")


def test_command_applies_actions_and_persists():
    response = tool_response(
        Action(name="add_section", arguments={"section_type": "faq", "position": "before_contact"}),
        Action(name="update_colors", arguments={"primary_color": "#0f766e"}),
    )
    service, repository, transport, log = build_service(response)

    result = asyncio.run(service.handle_command("demo", "add an FAQ and make it teal"))

    assert result.persisted
    assert repository.saves == 1
    saved = repository.load_content_model("demo")
    assert [section.type for section in saved.sections][-2:] == ["faq", "contact"]
    assert saved.styles.primary_color == "#0f766e"
    assert result.reply == "Added faq section. Updated color scheme."
    assert "[hero-1]" in transport.requests[0].system_instructions

    record = log.get(result.command_id)
    assert record.status is CommandStatus.applied
    assert record.prompt == "add an FAQ and make it teal"


def test_conversational_turn_changes_nothing():
    response = RoundTripResponse(content="Your site has six sections.", model="fake-model")
    service, repository, _, log = build_service(response)

    result = asyncio.run(service.handle_command("demo", "what's on my site?"))

    assert result.reply == "Your site has six sections."
    assert not result.persisted
    assert repository.saves == 0
    assert log.get(result.command_id).status is CommandStatus.conversational


def test_all_actions_failing_is_a_no_op():
    response = tool_response(Action(name="remove_section", arguments={"section_id": "ghost"}))
    service, repository, _, log = build_service(response)

    result = asyncio.run(service.handle_command("demo", "remove the ghost section"))

    assert not result.persisted
    assert repository.saves == 0
    assert result.content == demo_site()
    assert result.reply == "I couldn't process that request."
    assert result.outcomes[0].error.value == "SectionNotFound"
    assert log.get(result.command_id).status is CommandStatus.no_op


def test_read_only_action_does_not_persist():
    response = tool_response(Action(name="get_site_info", arguments={}), content="You have 5 sections.")
    service, repository, _, _ = build_service(response)

    result = asyncio.run(service.handle_command("demo", "how many sections?"))

    assert result.outcomes[0].success
    assert not result.persisted
    assert repository.saves == 0


def test_transport_failure_leaves_site_untouched():
    service, repository, _, log = build_service(error=AITransportError("unavailable", retryable=True))

    with pytest.raises(AITransportError):
        asyncio.run(service.handle_command("demo", "add an FAQ"))

    assert repository.saves == 0
    assert repository.load_content_model("demo") == demo_site()
    assert log.list_for_site("demo") == []


def test_unknown_site():
    service, _, transport, _ = build_service(RoundTripResponse(content="hi", model="m"))

    with pytest.raises(SiteNotFoundError):
        asyncio.run(service.handle_command("missing", "hello"))
    assert transport.requests == []


def test_apply_direct_without_model_call():
    service, repository, transport, log = build_service()

    result = service.apply_direct(
        "demo",
        [
            Action(name="edit_section", arguments={"section_type": "hero", "updates": {"subtitle": "Now open"}}),
            Action(name="reorder_sections", arguments={"swap": ["hero-1", "ghost"]}),
        ],
    )

    assert result.persisted
    assert [outcome.success for outcome in result.outcomes] == [True, False]
    assert repository.load_content_model("demo").sections[0].subtitle == "Now open"
    assert transport.requests == []
    assert log.list_for_site("demo")[0].prompt is None


def test_command_log_failure_after_save_still_reports_success():
    response = tool_response(Action(name="add_section", arguments={"section_type": "faq"}))
    repository = CountingRepository({"demo": demo_site()})
    service = SiteCommandService(
        repository=repository,
        round_trip=AssistantRoundTrip(ScriptedTransport(response=response)),
        command_log=BrokenLog(),
    )

    result = asyncio.run(service.handle_command("demo", "add an FAQ"))

    assert result.persisted
    assert result.command_id is None
    assert repository.saves == 1
    saved = repository.load_content_model("demo")
    assert [section.type for section in saved.sections].count("faq") == 1
    assert result.content == saved
