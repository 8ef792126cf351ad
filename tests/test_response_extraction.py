from types import SimpleNamespace

from tools.llm.response import (
    DirectText,
    EmptyResponse,
    StructuredItems,
    TextItem,
    classify_response,
    extract_response_text,
)


def _text(raw):
    return extract_response_text(classify_response(raw))


def test_direct_text_wins():
    raw = {"output_text": "notes", "output": [{"type": "output_text", "text": "x"}]}
    assert classify_response(raw) == DirectText("notes")
    assert _text(raw) == "notes"


def test_structured_items_join_text_parts_in_order():
    raw = {
        "output": [
            {"type": "reasoning"},
            {
                "type": "message",
                "content": [
                    {"type": "output_text", "text": "first"},
                    {"type": "refusal", "text": "ignored"},
                    {"type": "output_text", "text": "second"},
                ],
            },
        ]
    }
    shape = classify_response(raw)
    assert isinstance(shape, StructuredItems)
    assert _text(raw) == "first\nsecond"


def test_anthropic_content_blocks():
    raw = SimpleNamespace(
        output_text=None,
        content=[
            SimpleNamespace(type="text", text="Hello"),
            SimpleNamespace(type="tool_use", text=None),
        ],
    )
    assert _text(raw) == "Hello"


def test_items_without_text_yield_empty_string():
    shape = StructuredItems((TextItem(type="reasoning"),))
    assert extract_response_text(shape) == ""


def test_nothing_usable_is_empty():
    assert classify_response({"output_text": "", "output": []}) == EmptyResponse()
    assert classify_response(None) == EmptyResponse()
    assert _text({}) == ""
