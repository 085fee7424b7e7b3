"""
Unit tests for response parsing.
"""

from elpris_chat.llm.models import (
    ContentPart,
    ConversationTurn,
    FunctionCall,
    ModelResponse,
    ToolCallRequest,
)
from elpris_chat.llm.parser import (
    NO_RESPONSE_TEXT,
    extract_text,
    extract_tool_calls,
    parse_response,
)


def _candidate(*parts: ContentPart) -> ConversationTurn:
    return ConversationTurn(role="model", parts=parts)


def _call(name: str, arguments=None, id=None) -> ContentPart:
    return ContentPart.from_function_call(FunctionCall(name=name, arguments=arguments or {}, id=id))


def _text(text: str) -> ContentPart:
    return ContentPart.from_text(text)


class TestExtractToolCalls:
    def test_no_candidates(self):
        assert extract_tool_calls(ModelResponse()) == []

    def test_text_only_response(self):
        response = ModelResponse(candidates=(_candidate(_text("Hej")),))
        assert extract_tool_calls(response) == []

    def test_single_call(self):
        response = ModelResponse(candidates=(_candidate(_call("get_el_price", {"area": "SE3"}, id="call_1")),))
        assert extract_tool_calls(response) == [
            ToolCallRequest(name="get_el_price", arguments={"area": "SE3"}, id="call_1")
        ]

    def test_missing_arguments_default_to_empty_mapping(self):
        response = ModelResponse(candidates=(_candidate(_call("get_el_price")),))
        calls = extract_tool_calls(response)
        assert calls[0].arguments == {}

    def test_missing_identifier_tolerated(self):
        response = ModelResponse(candidates=(_candidate(_call("get_el_price", {"area": "SE1"})),))
        assert extract_tool_calls(response)[0].id is None

    def test_calls_collected_across_candidates_in_order(self):
        response = ModelResponse(
            candidates=(
                _candidate(_call("get_el_price", {"area": "SE1"}), _text("mellan")),
                _candidate(_call("get_weather"), _call("get_el_price", {"area": "SE4"})),
            )
        )
        calls = extract_tool_calls(response)
        assert [c.name for c in calls] == ["get_el_price", "get_weather", "get_el_price"]
        assert calls[2].arguments == {"area": "SE4"}


class TestExtractText:
    def test_no_candidates_yields_placeholder(self):
        assert extract_text(ModelResponse()) == NO_RESPONSE_TEXT

    def test_only_tool_calls_yields_placeholder(self):
        response = ModelResponse(candidates=(_candidate(_call("get_el_price")),))
        assert extract_text(response) == NO_RESPONSE_TEXT

    def test_parts_joined_by_newline(self):
        response = ModelResponse(candidates=(_candidate(_text("Rad ett"), _text("Rad två")),))
        assert extract_text(response) == "Rad ett\nRad två"

    def test_empty_text_parts_ignored(self):
        response = ModelResponse(candidates=(_candidate(_text(""), _text("Svar")),))
        assert extract_text(response) == "Svar"

    def test_first_candidate_with_text_wins(self):
        response = ModelResponse(
            candidates=(
                _candidate(_call("get_el_price")),
                _candidate(_text("Andra")),
                _candidate(_text("Tredje")),
            )
        )
        assert extract_text(response) == "Andra"


class TestParseResponse:
    def test_outcome_keeps_first_candidate_verbatim(self):
        first = _candidate(_text("Jag kollar."), _call("get_el_price", {"area": "SE3"}, id="abc"))
        second = _candidate(_text("Annat"))
        response = ModelResponse(candidates=(first, second), model="gemini/gemini-1.5-flash")

        outcome = parse_response(response)

        assert outcome.raw_model_turn == first
        assert outcome.text == "Jag kollar."
        assert outcome.text_parts == ("Jag kollar.",)
        assert outcome.tool_calls == (
            ToolCallRequest(name="get_el_price", arguments={"area": "SE3"}, id="abc"),
        )
        assert outcome.model == "gemini/gemini-1.5-flash"

    def test_outcome_without_candidates(self):
        outcome = parse_response(ModelResponse())
        assert outcome.raw_model_turn is None
        assert outcome.text == NO_RESPONSE_TEXT
        assert outcome.text_parts == ()
        assert outcome.tool_calls == ()
