"""Plain-text extraction from Responses API results.

Public API (the "studs"):
    extract_text: Best-effort plain text from a result object
    truncate_title: Cut a title to the maximum length
"""

import json
from collections.abc import Mapping
from typing import Any

TEXT_PART_TYPES = frozenset({"output_text", "text"})
PART_SEPARATOR = "\n\n"
MAX_TITLE_LENGTH = 300


def _text_parts(output: Any) -> list[str]:
    parts: list[str] = []
    if not isinstance(output, list):
        return parts
    for item in output:
        if not isinstance(item, Mapping):
            continue
        content = item.get("content")
        if not isinstance(content, list):
            continue
        for part in content:
            if (
                isinstance(part, Mapping)
                and part.get("type") in TEXT_PART_TYPES
                and isinstance(part.get("text"), str)
            ):
                parts.append(part["text"])
    return parts


def render_result(result: Any) -> str:
    """Render any value as a string without raising."""
    try:
        return json.dumps(result, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        # Circular references
        return repr(result)


def extract_text(result: Any) -> str:
    """Extract plain text from a result object.

    Prefers the top-level ``output_text`` convenience field. Otherwise the
    text of every ``output_text``/``text`` content part across all output
    items is joined with blank lines, in encounter order. If neither yields
    text the whole result is rendered as a string. Never raises.

    Args:
        result: Decoded API response (any shape)

    Returns:
        Extracted text
    """
    if not isinstance(result, Mapping):
        return render_result(result)

    output_text = result.get("output_text")
    if isinstance(output_text, str) and output_text.strip():
        return output_text

    parts = _text_parts(result.get("output"))
    if parts:
        return PART_SEPARATOR.join(parts)

    return render_result(result)


def truncate_title(title: str, limit: int = MAX_TITLE_LENGTH) -> str:
    return title[:limit]


def response_id(result: Any) -> str | None:
    if not isinstance(result, Mapping):
        return None
    value = result.get("id")
    if isinstance(value, str) and value.strip():
        return value
    return None


def response_status(result: Any) -> str | None:
    if not isinstance(result, Mapping):
        return None
    value = result.get("status")
    return value if isinstance(value, str) else None


__all__ = [
    "MAX_TITLE_LENGTH",
    "extract_text",
    "render_result",
    "truncate_title",
    "response_id",
    "response_status",
]
