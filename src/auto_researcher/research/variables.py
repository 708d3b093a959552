"""Variable resolution for prompt templates.

Builds the lookup table used by ``substitute``: time-derived built-ins
merged with admin-supplied variables. The variables field arrives in
several shapes depending on how the host stored it, so it is first
decoded into one of a few tagged variants, each converting itself to a
plain ``dict[str, str]``.

Public API (the "studs"):
    builtin_variables: Time-derived variables for the current instant
    decode_variables: Tagged-variant decoder for the raw variables field
    resolve_variables: Merge built-ins with user variables (user wins)
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from datetime import datetime, time, timedelta, timezone
from typing import Any, Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel

_logger = logging.getLogger(__name__)

VariableTable = dict[str, str]

BUILTIN_VARIABLE_NAMES = ("now_iso", "today", "week_start_iso", "week_end_iso")


def _utc_iso(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(value)


def builtin_variables(now: datetime | None = None, tz: str = "UTC") -> VariableTable:
    """Compute the built-in time variables.

    The week runs Monday 00:00:00 to Sunday 23:59:59 in ``tz``; both bounds
    are reported as UTC timestamps.

    Args:
        now: Instant to use (defaults to the current time). Naive values are
            taken to be in ``tz``.
        tz: IANA time zone name used for the calendar date and week bounds

    Returns:
        Table with ``now_iso``, ``today``, ``week_start_iso`` and ``week_end_iso``

    Raises:
        ValueError: If ``tz`` is not a known time zone
    """
    try:
        zone = ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown time zone: {tz!r}") from None

    if now is None:
        local = datetime.now(zone)
    elif now.tzinfo is None:
        local = now.replace(tzinfo=zone)
    else:
        local = now.astimezone(zone)

    monday = local.date() - timedelta(days=local.weekday())
    sunday = monday + timedelta(days=6)
    week_start = datetime.combine(monday, time.min, tzinfo=zone)
    week_end = datetime.combine(sunday, time(23, 59, 59), tzinfo=zone)

    return {
        "now_iso": _utc_iso(local),
        "today": local.strftime("%Y-%m-%d"),
        "week_start_iso": _utc_iso(week_start),
        "week_end_iso": _utc_iso(week_end),
    }


# =============================================================================
# Tagged variants for the raw variables field
# =============================================================================


def _pairs_to_table(items: Any) -> VariableTable:
    """Convert a sequence of key/value pairs into a table.

    Accepts ``{"key": k, "value": v}`` objects and two-element ``[k, v]``
    lists. Anything else in the sequence is skipped.
    """
    table: VariableTable = {}
    if not isinstance(items, list):
        return table
    for item in items:
        if isinstance(item, Mapping) and "key" in item:
            key, value = item.get("key"), item.get("value")
        elif isinstance(item, (list, tuple)) and len(item) == 2:
            key, value = item
        else:
            _logger.debug("Skipping malformed variable entry: %r", item)
            continue
        key = _stringify(key).strip()
        if key:
            table[key] = _stringify(value)
    return table


def _mapping_to_table(mapping: Mapping[Any, Any]) -> VariableTable:
    return {_stringify(k): _stringify(v) for k, v in mapping.items()}


def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError:
        _logger.warning("Ignoring variables: not valid JSON")
        return None


class EmptyVariables(BaseModel):
    kind: Literal["empty"] = "empty"

    def to_table(self) -> VariableTable:
        return {}


class KeyValueList(BaseModel):
    """An ordered list of key/value pairs, as stored by a key-value field."""

    kind: Literal["key_value_list"] = "key_value_list"
    items: list[Any]

    def to_table(self) -> VariableTable:
        return _pairs_to_table(self.items)


class MappingVariables(BaseModel):
    """An already-decoded mapping."""

    kind: Literal["mapping"] = "mapping"
    entries: dict[Any, Any]

    def to_table(self) -> VariableTable:
        return _mapping_to_table(self.entries)


class JsonObjectText(BaseModel):
    """A JSON object encoded as text."""

    kind: Literal["json_object_text"] = "json_object_text"
    text: str

    def to_table(self) -> VariableTable:
        data = _loads(self.text)
        if not isinstance(data, Mapping):
            return {}
        return _mapping_to_table(data)


class JsonArrayText(BaseModel):
    """A JSON array of key/value pairs encoded as text."""

    kind: Literal["json_array_text"] = "json_array_text"
    text: str

    def to_table(self) -> VariableTable:
        return _pairs_to_table(_loads(self.text))


VariableSource = EmptyVariables | KeyValueList | MappingVariables | JsonObjectText | JsonArrayText


def decode_variables(raw: Any) -> VariableSource:
    """Classify the raw variables field into a tagged variant.

    Args:
        raw: Field value as provided by the host (list, mapping, JSON text or None)

    Returns:
        A variant whose ``to_table()`` yields the canonical table
    """
    if raw is None:
        return EmptyVariables()
    if isinstance(raw, Mapping):
        return MappingVariables(entries=dict(raw))
    if isinstance(raw, (list, tuple)):
        return KeyValueList(items=list(raw))
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return EmptyVariables()
        if text.startswith("["):
            return JsonArrayText(text=text)
        return JsonObjectText(text=text)

    _logger.warning("Ignoring variables of unsupported type %s", type(raw).__name__)
    return EmptyVariables()


def resolve_variables(builtins: Mapping[str, str], user_supplied: Any) -> VariableTable:
    """Merge built-in variables with user-supplied ones.

    Args:
        builtins: Built-in table, usually from ``builtin_variables``
        user_supplied: Raw variables field in any supported shape

    Returns:
        Combined table; user values replace built-ins on key collision
    """
    table: VariableTable = dict(builtins)
    table.update(decode_variables(user_supplied).to_table())
    return table


__all__ = [
    "BUILTIN_VARIABLE_NAMES",
    "VariableTable",
    "VariableSource",
    "EmptyVariables",
    "KeyValueList",
    "MappingVariables",
    "JsonObjectText",
    "JsonArrayText",
    "builtin_variables",
    "decode_variables",
    "resolve_variables",
]
