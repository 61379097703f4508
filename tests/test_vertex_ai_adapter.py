from types import SimpleNamespace

import pytest

from site_copilot.business_defaults import fallback_suggestions
from site_copilot.models.conversation import BusinessInfo
from site_copilot.vertex_ai_adapter import VertexAIAdapter, parse_json_reply


class FakePart:
    def __init__(self, data):
        self._data = data

    def to_dict(self):
        return self._data


def fake_response(*parts, finish_reason="STOP"):
    candidate = SimpleNamespace(
        content=SimpleNamespace(parts=[FakePart(part) for part in parts]),
        finish_reason=SimpleNamespace(name=finish_reason),
    )
    usage = SimpleNamespace(prompt_token_count=120, candidates_token_count=30)
    return SimpleNamespace(candidates=[candidate], usage_metadata=usage)


def adapter() -> VertexAIAdapter:
    # skip __init__ so no Vertex AI client is created
    instance = VertexAIAdapter.__new__(VertexAIAdapter)
    instance.model_name = "gemini-test"
    return instance


def test_function_calls_become_actions():
    response = fake_response(
        {"text": "Adding it now."},
        {"function_call": {"name": "add_section", "args": {"section_type": "faq"}}},
    )

    result = adapter()._to_response(response)

    assert result.content == "Adding it now."
    assert result.finish_reason == "tool_use"
    assert result.tool_calls[0].name == "add_section"
    assert result.tool_calls[0].arguments == {"section_type": "faq"}
    assert result.tool_calls[0].id.startswith("call_")
    assert result.usage.input_tokens == 120
    assert result.model == "gemini-test"


def test_text_only_reply_and_max_tokens():
    result = adapter()._to_response(fake_response({"text": "Partial"}, finish_reason="MAX_TOKENS"))

    assert result.tool_calls == []
    assert result.finish_reason == "max_tokens"


def test_parse_json_reply_strips_fences():
    assert parse_json_reply('```json\n["a", "b"]\n```') == ["a", "b"]
    with pytest.raises(ValueError):
        parse_json_reply("not json")


def test_fallback_taglines_mention_business_type():
    suggestions = fallback_suggestions("businessTagline", BusinessInfo(name="Casa", type="restaurant"))

    assert len(suggestions) == 3
    assert suggestions[0] == "Quality restaurant you can trust"
    assert fallback_suggestions("businessName", BusinessInfo(name="Casa", type="restaurant")) == []
