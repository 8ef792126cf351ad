"""
Response-shape extraction.

Providers answer in one of two shapes: a flat text field (``output_text``) or
a list of typed output items (OpenAI Responses ``output``, Anthropic
``content``). The raw response is first classified into a ``ResponseShape``
and then reduced to text with a single match; anything without text is
``EmptyResponse``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

# Item types that carry text directly.
TEXT_ITEM_TYPES = frozenset({"output_text", "text"})


@dataclass(frozen=True)
class TextItem:
    """One typed output item."""

    type: str
    text: str | None = None


@dataclass(frozen=True)
class DirectText:
    text: str


@dataclass(frozen=True)
class StructuredItems:
    items: tuple[TextItem, ...]


@dataclass(frozen=True)
class EmptyResponse:
    pass


ResponseShape = DirectText | StructuredItems | EmptyResponse


def _field(obj: Any, name: str) -> Any:
    """Read ``name`` from a mapping or an SDK object."""
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def _flatten_items(raw_items: Any) -> list[TextItem]:
    """Flatten output items; ``message`` items contribute their content parts."""
    items: list[TextItem] = []
    for raw in raw_items or []:
        item_type = _field(raw, "type")
        if not isinstance(item_type, str):
            continue
        if item_type == "message":
            items.extend(_flatten_items(_field(raw, "content")))
            continue
        text = _field(raw, "text")
        if not isinstance(text, str):
            text = None
        items.append(TextItem(type=item_type, text=text))
    return items


def classify_response(raw: Any) -> ResponseShape:
    """Classify a raw provider response (dict or SDK object)."""
    if raw is None:
        return EmptyResponse()

    output_text = _field(raw, "output_text")
    if isinstance(output_text, str) and output_text:
        return DirectText(output_text)

    for field_name in ("output", "content"):
        raw_items = _field(raw, field_name)
        if isinstance(raw_items, (list, tuple)):
            items = tuple(_flatten_items(raw_items))
            if items:
                return StructuredItems(items)

    return EmptyResponse()


def extract_response_text(shape: ResponseShape) -> str:
    """Reduce a classified response to its text; ``""`` when there is none."""
    match shape:
        case DirectText(text=text):
            return text
        case StructuredItems(items=items):
            texts = [
                item.text
                for item in items
                if item.type in TEXT_ITEM_TYPES and item.text is not None
            ]
            return "\n".join(texts)
        case EmptyResponse():
            return ""
    raise TypeError(f"Unknown response shape: {shape!r}")
