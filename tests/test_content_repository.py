import json
import shutil
from pathlib import Path

import pytest

from site_copilot.command_log import InMemoryCommandLog, command_status
from site_copilot.content_repository import InMemoryContentRepository, LocalContentRepository
from site_copilot.errors import PersistenceError, SiteNotFoundError
from site_copilot.models.action import Action, ActionOutcome
from site_copilot.models.command import CommandStatus

DATA_DIR = Path(__file__).resolve().parent.parent / "data" / "sites"


@pytest.fixture
def site_dir(tmp_path: Path) -> Path:
    shutil.copy(DATA_DIR / "demo-site.json", tmp_path / "demo-site.json")
    return tmp_path


def test_local_repository_round_trips_document_verbatim(site_dir: Path):
    repository = LocalContentRepository(base_path=site_dir)
    original = json.loads((site_dir / "demo-site.json").read_text(encoding="utf-8"))

    model = repository.load_content_model("demo-site")
    repository.save_content_model("copy", model)
    saved = json.loads((site_dir / "copy.json").read_text(encoding="utf-8"))

    assert saved == original
    assert repository.load_content_model("copy") == model


def test_local_repository_missing_site(site_dir: Path):
    repository = LocalContentRepository(base_path=site_dir)

    with pytest.raises(SiteNotFoundError) as excinfo:
        repository.load_content_model("nope")
    assert excinfo.value.site_id == "nope"
    assert isinstance(excinfo.value, LookupError)


def test_local_repository_corrupt_document(site_dir: Path):
    (site_dir / "broken.json").write_text("{not json", encoding="utf-8")
    repository = LocalContentRepository(base_path=site_dir)

    with pytest.raises(PersistenceError):
        repository.load_content_model("broken")


def test_in_memory_repository_last_write_wins(site_dir: Path):
    model = LocalContentRepository(base_path=site_dir).load_content_model("demo-site")
    repository = InMemoryContentRepository({"demo": model})

    first = repository.load_content_model("demo")
    second = repository.load_content_model("demo")
    first.meta.title = "First"
    second.meta.title = "Second"
    repository.save_content_model("demo", first)
    repository.save_content_model("demo", second)

    assert repository.load_content_model("demo").meta.title == "Second"
    assert model.meta.title == "Casa Verde | Trattoria"


def test_command_log_records_and_lists_newest_first():
    log = InMemoryCommandLog()
    first = log.record(site_id="demo", prompt="hi", status=CommandStatus.conversational, model="m")
    second = log.record(
        site_id="demo",
        prompt="add faq",
        status=CommandStatus.applied,
        actions=[Action(name="add_section", arguments={"section_type": "faq"})],
        outcomes=[ActionOutcome(action="add_section", success=True, description="Added faq section")],
    )
    log.record(site_id="other", prompt="x", status=CommandStatus.no_op)

    assert log.get(first.id) == first
    assert log.get("missing") is None
    listed = log.list_for_site("demo")
    assert {record.id for record in listed} == {first.id, second.id}
    assert listed[0].created_at >= listed[1].created_at
    assert first.id.startswith("cmd_demo_")


def test_command_status():
    action = Action(name="update_colors", arguments={})
    ok = ActionOutcome(action="update_colors", success=True, description="Updated color scheme")
    failed = ActionOutcome(action="update_colors", success=False, description="bad")

    assert command_status([], [], False) is CommandStatus.conversational
    assert command_status([action], [ok], True) is CommandStatus.applied
    assert command_status([action], [failed], False) is CommandStatus.no_op
    assert command_status([action], [ok], False) is CommandStatus.no_op
