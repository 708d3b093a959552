"""Automation data models.

Field schema for the auto researcher script and the records exchanged
with the forum.
"""

from collections.abc import Mapping
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from auto_researcher.research.payload import GenerationParams


# Fields whose host component is rich text: {"value": {"raw": ...}}
_MESSAGE_FIELDS = frozenset({"prompt", "system_prompt", "responses_api_overrides"})


def _is_envelope(value: Any, keys: frozenset[str]) -> bool:
    return isinstance(value, Mapping) and len(value) == 1 and next(iter(value)) in keys


def _unwrap(name: str, value: Any) -> Any:
    """Unwrap a host field envelope.

    The host stores each field as ``{"value": ...}``; rich-text components
    nest one level further as ``{"raw": ...}`` or ``{"value": ...}``. Only
    single-key mappings count as envelopes, so a variables mapping that
    happens to define ``value`` or ``raw`` passes through intact.
    """
    if _is_envelope(value, frozenset({"value"})):
        value = value["value"]
    if name in _MESSAGE_FIELDS and _is_envelope(value, frozenset({"raw", "value"})):
        value = next(iter(value.values()))
    return value


def _as_text(v: Any) -> Any:
    """Render numbers and booleans parsed from YAML or ``--field`` as text."""
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, (int, float)):
        return str(int(v)) if float(v).is_integer() else str(v)
    return v


class ScriptFields(BaseModel):
    """Admin-configured fields of the auto researcher script.

    One schema for every revision of the field set: fields added over time
    are optional with explicit defaults, so older configurations load
    unchanged.
    """

    creator: str = Field(..., description="Username posting the topic")
    prompt: str = Field(..., description="User prompt template")
    system_prompt: str = Field(default="", description="System prompt template")
    variables: Any = Field(default=None, description="Key/value pairs, mapping or JSON text")
    model: str = Field(..., description="Model name")
    poll_timing: Any = Field(default=None, description="Seconds between status polls (1-30)")
    send_pm_with_full_response: str | None = Field(
        default=None, description="Username receiving the raw JSON response"
    )
    category: str = Field(..., description="Target category id, slug or name")
    stop: Any = Field(default=None, description="Stop sequences (JSON array or lines)")
    temperature: Any = None
    top_p: Any = None
    presence_penalty: Any = None
    frequency_penalty: Any = None
    seed: Any = None
    reasoning_effort: str | None = None
    enable_web_search: Any = False
    web_search_depth: str | None = None
    include_sources: Any = False
    responses_api_overrides: Any = Field(
        default=None, description="JSON object deep-merged into both requests"
    )
    timezone: str = Field(default="UTC", description="Time zone for the date variables")

    @field_validator("creator", "model", "category", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        v = _as_text(v)
        return v.strip() if isinstance(v, str) else v

    @field_validator("creator", "model", "category")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator(
        "send_pm_with_full_response", "reasoning_effort", "web_search_depth", "timezone",
        mode="before",
    )
    @classmethod
    def number_to_text(cls, v: Any) -> Any:
        return _as_text(v)

    @field_validator("send_pm_with_full_response", "reasoning_effort", "web_search_depth")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v

    @field_validator("prompt", "system_prompt", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else _as_text(v)

    @classmethod
    def from_host_fields(cls, fields: Mapping[str, Any]) -> "ScriptFields":
        """Build from host field data, flat or wrapped in value envelopes."""
        return cls(**{key: _unwrap(key, value) for key, value in fields.items()})

    def generation_params(self) -> GenerationParams:
        return GenerationParams(
            temperature=self.temperature,
            top_p=self.top_p,
            presence_penalty=self.presence_penalty,
            frequency_penalty=self.frequency_penalty,
            seed=self.seed,
            stop=self.stop,
            reasoning_effort=self.reasoning_effort,
            enable_web_search=self.enable_web_search,
            web_search_depth=self.web_search_depth,
            include_sources=self.include_sources,
        )


class ForumUser(BaseModel):
    """A forum account."""

    username: str
    user_id: int | None = None


class ForumCategory(BaseModel):
    """A forum category."""

    category_id: int
    slug: str = ""
    name: str = ""


class PostArchetype(str, Enum):
    """Kind of post created."""

    REGULAR = "regular"
    PRIVATE_MESSAGE = "private_message"


class PostRecord(BaseModel):
    """A post created through the forum collaborator."""

    post_id: str = Field(..., description="Unique post identifier")
    archetype: PostArchetype = Field(default=PostArchetype.REGULAR)
    title: str
    raw: str
    creator: str
    category_id: int | None = None
    target_usernames: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        use_enum_values = True


class RunResult(BaseModel):
    """Outcome of one script run."""

    topic: PostRecord
    response_id: str | None = None
    response_status: str | None = None
    raw_response_pm: PostRecord | None = None
    unresolved_variables: list[str] = Field(default_factory=list)
