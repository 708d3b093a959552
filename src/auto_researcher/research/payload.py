"""Request construction for the Responses API.

Turns substituted prompt text and admin-entered generation settings into a
request object. Settings are parsed leniently: a value that is blank or
does not parse is treated as not set and left out of the request, never
sent as null or zero. An admin-supplied override object is deep-merged
over the assembled request as the last step.

Public API (the "studs"):
    GenerationParams: Optional generation settings, parsed leniently
    build_request: Assemble the main generation request
    build_title_request: Assemble the follow-up title request
    deep_merge: Recursive dict merge (arrays and scalars replaced)
    ensure_dispatchable: Post-merge check for required request fields
"""

import copy
import json
import logging
import math
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, field_validator

from auto_researcher.llm.exceptions import LLMInvalidRequestError
from auto_researcher.llm.types import GenerationRequest, LLMMessage

_logger = logging.getLogger(__name__)

WEB_SEARCH_TOOL = "web_search_preview"
WEB_SEARCH_DEPTHS = ("low", "medium", "high")

CITATION_INSTRUCTION = (
    "\n\nWhen you use web search, include concise inline citations to your sources."
)
TITLE_INSTRUCTION = "Return a concise, clear forum topic title (max 12 words). No quotes."

# Emitted in this order when set
_SCALAR_PARAMS = ("temperature", "top_p", "presence_penalty", "frequency_penalty", "seed")

_TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})


# =============================================================================
# Lenient parsers
# =============================================================================


def parse_number(raw: Any) -> float | None:
    """Parse a number from its text or numeric form.

    Returns None for blank, non-numeric, boolean or non-finite input.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str):
        text = raw.strip()
        if not text:
            return None
        try:
            value = float(text)
        except ValueError:
            return None
    else:
        return None
    return value if math.isfinite(value) else None


def parse_integer(raw: Any) -> int | None:
    """Parse an integer; non-integral numbers count as unparsable."""
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        try:
            return int(raw.strip())
        except ValueError:
            pass
    value = parse_number(raw)
    if value is None or not value.is_integer():
        return None
    return int(value)


def parse_flag(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        return raw != 0
    if isinstance(raw, str):
        return raw.strip().lower() in _TRUE_STRINGS
    return False


def parse_stop_list(raw: Any) -> list[str]:
    """Parse stop sequences from a JSON array literal or line-delimited text.

    Text whose trimmed form starts with ``[`` is decoded as a JSON array
    first; if that fails it is split on line breaks like any other text.
    Elements are stringified and trimmed, and blank ones are dropped. An
    already-decoded list goes through the same cleanup.
    """
    if raw is None:
        return []

    items: list[Any] | None = None
    if isinstance(raw, (list, tuple)):
        items = list(raw)
    elif isinstance(raw, str):
        text = raw.strip()
        if not text:
            return []
        if text.startswith("["):
            try:
                decoded = json.loads(text)
            except ValueError:
                decoded = None
            if isinstance(decoded, list):
                items = decoded
        if items is None:
            items = text.splitlines()
    else:
        return []

    stops = []
    for item in items:
        text = "" if item is None else str(item).strip()
        if text:
            stops.append(text)
    return stops


def parse_overrides(raw: Any) -> dict[str, Any]:
    """Decode the override object; malformed or non-object JSON yields {}."""
    if raw is None:
        return {}
    if isinstance(raw, Mapping):
        return dict(raw)
    if not isinstance(raw, str) or not raw.strip():
        return {}
    try:
        decoded = json.loads(raw)
    except ValueError:
        _logger.warning("Ignoring request overrides: not valid JSON")
        return {}
    if not isinstance(decoded, dict):
        _logger.warning("Ignoring request overrides: expected a JSON object")
        return {}
    return decoded


# =============================================================================
# Generation settings
# =============================================================================


class GenerationParams(BaseModel):
    """Optional generation settings.

    Every field accepts the raw value as entered by an admin; values that
    cannot be parsed become None (or the default) instead of failing.

    Attributes:
        temperature: Sampling temperature
        top_p: Nucleus sampling mass
        presence_penalty: Presence penalty
        frequency_penalty: Frequency penalty
        seed: Sampling seed (integral values only)
        stop: Stop sequences
        reasoning_effort: Reasoning effort hint (e.g. low/medium/high)
        enable_web_search: Attach the web search tool
        web_search_depth: Search context size (low/medium/high)
        include_sources: Ask for inline citations in the output
    """

    temperature: float | None = Field(None, description="Sampling temperature")
    top_p: float | None = Field(None, description="Nucleus sampling mass")
    presence_penalty: float | None = Field(None, description="Presence penalty")
    frequency_penalty: float | None = Field(None, description="Frequency penalty")
    seed: int | None = Field(None, description="Sampling seed")
    stop: list[str] = Field(default_factory=list, description="Stop sequences")
    reasoning_effort: str | None = Field(None, description="Reasoning effort hint")
    enable_web_search: bool = Field(False, description="Attach the web search tool")
    web_search_depth: str | None = Field(None, description="Search context size")
    include_sources: bool = Field(False, description="Ask for inline citations")

    @field_validator(
        "temperature", "top_p", "presence_penalty", "frequency_penalty", mode="before"
    )
    @classmethod
    def lenient_number(cls, v: Any) -> float | None:
        return parse_number(v)

    @field_validator("seed", mode="before")
    @classmethod
    def lenient_integer(cls, v: Any) -> int | None:
        return parse_integer(v)

    @field_validator("stop", mode="before")
    @classmethod
    def lenient_stop(cls, v: Any) -> list[str]:
        return parse_stop_list(v)

    @field_validator("reasoning_effort", mode="before")
    @classmethod
    def blank_effort(cls, v: Any) -> str | None:
        if not isinstance(v, str) or not v.strip():
            return None
        return v.strip()

    @field_validator("web_search_depth", mode="before")
    @classmethod
    def known_depth(cls, v: Any) -> str | None:
        if not isinstance(v, str):
            return None
        depth = v.strip().lower()
        return depth if depth in WEB_SEARCH_DEPTHS else None

    @field_validator("enable_web_search", "include_sources", mode="before")
    @classmethod
    def lenient_flag(cls, v: Any) -> bool:
        return parse_flag(v)


def build_tools(enable_web_search: bool, depth: str | None = None) -> list[dict[str, Any]]:
    """Return the tools list: the web search tool when enabled, else empty."""
    if not enable_web_search:
        return []
    tool: dict[str, Any] = {"type": WEB_SEARCH_TOOL}
    if depth in WEB_SEARCH_DEPTHS:
        tool["search_context_size"] = depth
    return [tool]


def build_reasoning(effort: str | None) -> dict[str, str] | None:
    if not effort or not effort.strip():
        return None
    return {"effort": effort}


# =============================================================================
# Request assembly
# =============================================================================


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into a copy of ``base``.

    Nested mappings merge key by key; arrays and scalars from ``override``
    replace the value in ``base`` wholesale. Neither input is modified.
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def apply_overrides(request: GenerationRequest, overrides: Any) -> GenerationRequest:
    decoded = parse_overrides(overrides)
    if not decoded:
        return request
    _logger.debug("Applying request overrides for keys: %s", sorted(decoded))
    return deep_merge(request, decoded)


def build_request(
    model: str,
    prompt: str,
    system_prompt: str = "",
    params: GenerationParams | None = None,
    overrides: Any = None,
) -> GenerationRequest:
    """Assemble the main generation request.

    Args:
        model: Model name
        prompt: Substituted user prompt
        system_prompt: Substituted system prompt; omitted when blank
        params: Optional generation settings
        overrides: Override object (mapping or JSON text) merged last

    Returns:
        JSON-compatible request object
    """
    params = params or GenerationParams()

    user_text = prompt
    if params.include_sources:
        user_text += CITATION_INSTRUCTION

    messages = []
    if system_prompt and system_prompt.strip():
        messages.append(LLMMessage(role="system", content=system_prompt))
    messages.append(LLMMessage(role="user", content=user_text))

    request: GenerationRequest = {
        "model": model,
        "input": [msg.model_dump() for msg in messages],
    }
    if params.stop:
        request["stop"] = list(params.stop)
    for name in _SCALAR_PARAMS:
        value = getattr(params, name)
        if value is not None:
            request[name] = value

    reasoning = build_reasoning(params.reasoning_effort)
    if reasoning:
        request["reasoning"] = reasoning

    tools = build_tools(params.enable_web_search, params.web_search_depth)
    if tools:
        request["tools"] = tools

    return apply_overrides(request, overrides)


def build_title_request(
    model: str,
    body: str,
    params: GenerationParams | None = None,
    overrides: Any = None,
) -> GenerationRequest:
    """Assemble the request that asks for a topic title for ``body``.

    Carries the web search tool of the main request, if any, and the same
    overrides.
    """
    params = params or GenerationParams()
    messages = [
        LLMMessage(role="system", content=TITLE_INSTRUCTION),
        LLMMessage(role="user", content=body),
    ]
    request: GenerationRequest = {
        "model": model,
        "input": [msg.model_dump() for msg in messages],
    }
    tools = build_tools(params.enable_web_search, params.web_search_depth)
    if tools:
        request["tools"] = tools

    return apply_overrides(request, overrides)


def ensure_dispatchable(request: GenerationRequest) -> GenerationRequest:
    """Check that overrides did not remove what the API needs.

    Raises:
        LLMInvalidRequestError: If ``model`` is not a non-blank string or
            ``input`` is empty
    """
    model = request.get("model")
    if not isinstance(model, str) or not model.strip():
        raise LLMInvalidRequestError("Request has no model after applying overrides")

    input_ = request.get("input")
    if isinstance(input_, str):
        has_input = bool(input_.strip())
    else:
        has_input = isinstance(input_, list) and len(input_) > 0
    if not has_input:
        raise LLMInvalidRequestError("Request has no input after applying overrides")

    return request


__all__ = [
    "CITATION_INSTRUCTION",
    "TITLE_INSTRUCTION",
    "WEB_SEARCH_DEPTHS",
    "GenerationParams",
    "parse_number",
    "parse_integer",
    "parse_flag",
    "parse_stop_list",
    "parse_overrides",
    "build_tools",
    "build_reasoning",
    "deep_merge",
    "apply_overrides",
    "build_request",
    "build_title_request",
    "ensure_dispatchable",
]
