import itertools
import json
from pathlib import Path

from site_copilot.executor import ActionExecutor, apply_actions
from site_copilot.models.action import Action, ActionErrorCode
from site_copilot.models.content import ContentModel
from site_copilot.validation import validate

DATA_DIR = Path(__file__).resolve().parent.parent / "data" / "sites"


def load_site(name: str = "demo-site") -> ContentModel:
    with (DATA_DIR / f"{name}.json").open("r", encoding="utf-8") as fp:
        return ContentModel.model_validate(json.load(fp))


def make_model(*sections, **styles) -> ContentModel:
    return ContentModel.model_validate(
        {
            "sections": [
                {"id": section_id, "type": section_type, "title": section_type.title()}
                for section_id, section_type in sections
            ],
            "styles": styles or {"primaryColor": "#111111", "secondaryColor": "#222222"},
            "meta": {"title": "Site", "description": ""},
        }
    )


def counting_executor() -> ActionExecutor:
    counter = itertools.count(1)
    return ActionExecutor(id_factory=lambda existing: f"new_{next(counter)}")


def act(name: str, **arguments) -> Action:
    return Action(name=name, arguments=arguments)


def test_add_section_appends_with_fresh_id():
    model = make_model(("s1", "hero"))
    result = apply_actions(model, [act("add_section", type="testimonials", title="What clients say")])

    assert [section.type for section in result.model.sections] == ["hero", "testimonials"]
    added = result.model.sections[1]
    assert added.id and added.id != "s1"
    assert added.title == "What clients say"
    assert result.outcomes[0].success
    assert result.changed


def test_add_section_grows_loaded_site_by_one():
    model = load_site()
    result = apply_actions(model, [act("add_section", section_type="faq")])

    assert len(result.model.sections) == len(model.sections) + 1
    ids = result.model.section_ids()
    assert len(set(ids)) == len(ids)
    assert result.model.sections[-1].title == "Frequently Asked Questions"


def test_add_section_twice_creates_two_sections():
    model = make_model(("s1", "hero"))
    action = act("add_section", section_type="faq")
    result = counting_executor().apply(model, [action, action])

    assert result.model.section_ids() == ["s1", "new_1", "new_2"]


def test_add_section_positions():
    model = make_model(("h", "hero"), ("a", "about"), ("c", "contact"))
    executor = counting_executor()

    result = executor.apply(
        model,
        [
            act("add_section", section_type="stats", position="start"),
            act("add_section", section_type="features", position="after_hero"),
            act("add_section", section_type="cta", position="before_contact"),
            act("add_section", section_type="faq", position=99),
        ],
    )
    assert result.model.section_ids() == ["new_1", "h", "new_2", "a", "new_3", "c", "new_4"]


def test_add_section_rejects_unknown_type():
    model = make_model(("s1", "hero"))
    result = apply_actions(model, [act("add_section", section_type="carousel")])

    outcome = result.outcomes[0]
    assert not outcome.success
    assert outcome.error is ActionErrorCode.invalid_section_type
    assert result.model == model
    assert not result.changed


def test_add_section_ignores_id_and_type_in_content():
    model = make_model(("s1", "hero"))
    result = counting_executor().apply(
        model,
        [act("add_section", section_type="about", content={"id": "s1", "type": "hero", "content": "Hi"})],
    )

    added = result.model.sections[1]
    assert (added.id, added.type, added.content) == ("new_1", "about", "Hi")
    assert validate(result.model) == []


def test_remove_missing_section_leaves_model_unchanged():
    model = make_model(("s1", "hero"), ("s2", "about"))
    first = apply_actions(model, [act("remove_section", section_id="nope")])
    second = apply_actions(first.model, [act("remove_section", section_id="nope")])

    assert first.model == model
    assert second.model == model
    assert [outcome.error for outcome in first.outcomes] == [ActionErrorCode.section_not_found]


def test_remove_by_type_takes_first_match():
    model = make_model(("h1", "hero"), ("a", "about"), ("h2", "hero"))
    result = apply_actions(model, [act("remove_section", section_type="hero")])

    assert result.model.section_ids() == ["a", "h2"]


def test_edit_section_merges_partial_fields():
    model = load_site()
    hero = model.sections[0]
    result = apply_actions(model, [act("edit_section", section_type="hero", updates={"subtitle": "New sub"})])

    edited = result.model.sections[0]
    assert edited.subtitle == "New sub"
    assert edited.title == hero.title
    assert edited.content == hero.content
    assert edited.id == hero.id


def test_edit_section_accepts_flat_fields_and_keeps_identity():
    model = make_model(("s1", "hero"))
    result = apply_actions(
        model, [act("edit_section", section_id="s1", title="Hello", updates=None)]
    )
    assert not result.outcomes[0].success
    assert result.outcomes[0].error is ActionErrorCode.malformed_action

    result = apply_actions(model, [act("edit_section", section_id="s1", title="Hello")])
    assert result.outcomes[0].success
    assert result.model.sections[0].title == "Hello"
    assert result.model.sections[0].type == "hero"


def test_reorder_to_permutation():
    model = make_model(("a", "hero"), ("b", "about"), ("c", "contact"))
    permutation = ["c", "a", "b"]
    result = apply_actions(model, [act("reorder_sections", section_order=permutation)])

    assert result.model.section_ids() == permutation


def test_reorder_inverse_permutation_restores_order():
    model = make_model(("a", "hero"), ("b", "about"), ("c", "contact"), ("d", "faq"))
    forward = ["d", "b", "a", "c"]
    inverse = ["a", "b", "c", "d"]
    result = apply_actions(
        model,
        [act("reorder_sections", section_order=forward), act("reorder_sections", section_order=inverse)],
    )

    assert result.model.section_ids() == model.section_ids()
    assert all(outcome.success for outcome in result.outcomes)


def test_reorder_rejects_dropped_or_duplicated_ids():
    model = make_model(("a", "hero"), ("b", "about"))
    result = apply_actions(
        model,
        [
            act("reorder_sections", section_order=["a"]),
            act("reorder_sections", section_order=["a", "a"]),
            act("reorder_sections", section_order=["a", "b", "x"]),
        ],
    )

    assert [outcome.error for outcome in result.outcomes] == [ActionErrorCode.invalid_order] * 3
    assert result.model == model


def test_reorder_swap_and_move():
    model = make_model(("a", "hero"), ("b", "about"), ("c", "contact"))
    result = apply_actions(
        model,
        [
            act("reorder_sections", swap=["a", "c"]),
            act("reorder_sections", move={"section_id": "a", "to_index": 0}),
        ],
    )

    assert result.model.section_ids() == ["a", "c", "b"]


def test_reorder_rejects_bad_move_and_swap():
    model = make_model(("a", "hero"), ("b", "about"), ("c", "contact"))
    result = apply_actions(
        model,
        [
            act("reorder_sections", move={"section_id": "a", "to_index": 3}),
            act("reorder_sections", move={"section_id": "a", "to_index": -1}),
            act("reorder_sections", move={"section_id": "ghost", "to_index": 0}),
            act("reorder_sections", swap=["a", "ghost"]),
        ],
    )

    assert [outcome.error for outcome in result.outcomes] == [ActionErrorCode.invalid_order] * 4
    assert result.model == model
    assert not result.changed


def test_sequential_batch_sees_earlier_additions():
    model = make_model(("a", "hero"), ("b", "about"))
    result = counting_executor().apply(
        model,
        [
            act("add_section", section_type="testimonials"),
            act("reorder_sections", section_order=["new_1", "a", "b"]),
        ],
    )

    assert result.model.section_ids() == ["new_1", "a", "b"]
    assert all(outcome.success for outcome in result.outcomes)


def test_failed_action_does_not_abort_batch():
    model = make_model(("s1", "hero"))
    result = apply_actions(
        model,
        [
            act("edit_section", section_id="missing-id", updates={"title": "x"}),
            act("update_colors", primary_color="#abcdef"),
        ],
    )

    assert result.model.styles.primary_color == "#abcdef"
    assert [outcome.success for outcome in result.outcomes] == [False, True]
    assert len(result.failed) == 1
    assert len(result.succeeded) == 1


def test_update_colors_merges_instead_of_replacing():
    model = ContentModel.model_validate(
        {"sections": [], "styles": {"primaryColor": "#111111"}, "meta": {"title": "", "description": ""}}
    )
    result = apply_actions(model, [act("update_colors", secondaryColor="#ffffff")])

    assert result.outcomes[0].success
    assert result.model.to_document()["styles"] == {"primaryColor": "#111111", "secondaryColor": "#ffffff"}


def test_update_colors_rejects_invalid_hex():
    model = make_model(("s1", "hero"))
    result = apply_actions(model, [act("update_colors", primary_color="blue")])

    outcome = result.outcomes[0]
    assert outcome.error is ActionErrorCode.validation_failed
    assert result.model.styles.primary_color == "#111111"


def test_update_fonts_and_seo_ignore_unknown_keys():
    model = make_model(("s1", "hero"))
    result = apply_actions(
        model,
        [
            act("update_fonts", heading_font="Lora", shadow="large"),
            act("update_seo", title="New title", keywords=["bakery"], robots="noindex"),
        ],
    )

    assert all(outcome.success for outcome in result.outcomes)
    assert result.model.styles.heading_font == "Lora"
    assert result.model.meta.title == "New title"
    assert result.model.meta.description == ""
    assert result.model.meta.keywords == ["bakery"]


def test_get_site_info_does_not_mutate():
    model = load_site()
    result = apply_actions(model, [act("get_site_info", include=["sections"])])

    outcome = result.outcomes[0]
    assert outcome.success
    assert result.model == model
    assert not result.changed
    assert outcome.changes["sectionCount"] == len(model.sections)
    assert "styles" not in outcome.changes


def test_unknown_action_and_bad_arguments_are_malformed():
    model = make_model(("s1", "hero"))
    result = apply_actions(
        model,
        [
            act("delete_everything"),
            act("remove_section"),
            act("reorder_sections", section_order=["s1"], swap=["s1", "s1"]),
        ],
    )

    assert [outcome.error for outcome in result.outcomes] == [ActionErrorCode.malformed_action] * 3
    assert all(outcome.detail for outcome in result.outcomes)


def test_apply_never_modifies_input():
    model = load_site()
    before = model.model_copy(deep=True)
    apply_actions(
        model,
        [
            act("add_section", section_type="faq"),
            act("edit_section", section_type="hero", updates={"title": "Changed"}),
            act("update_colors", primary_color="#000000"),
        ],
    )

    assert model == before


def test_preexisting_problems_do_not_block_other_edits():
    model = make_model(("s1", "hero"), ("s2", "slideshow"))
    result = apply_actions(model, [act("edit_section", section_id="s1", updates={"title": "Hi"})])

    assert result.outcomes[0].success
    assert result.model.sections[0].title == "Hi"
