"""Placeholder substitution for prompt templates.

Public API (the "studs"):
    substitute: Replace {{name}} placeholders from a variable table
    find_placeholders: List placeholder names in a template
    unresolved_placeholders: Placeholder names the table cannot resolve
"""

import re
from collections.abc import Mapping

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([a-zA-Z0-9_]+)\s*\}\}")


def substitute(template: str | None, table: Mapping[str, str]) -> str:
    """Replace ``{{name}}`` placeholders with values from ``table``.

    Placeholders whose name is not in the table are left exactly as
    written, braces included, so a misspelled variable shows up in the
    generated output instead of silently disappearing.

    Args:
        template: Template text; blank or None yields ""
        table: Variable lookup table

    Returns:
        Substituted text
    """
    if not template or not template.strip():
        return ""

    def _replace(match: re.Match[str]) -> str:
        return table.get(match.group(1), match.group(0))

    return PLACEHOLDER_PATTERN.sub(_replace, template)


def find_placeholders(template: str | None) -> list[str]:
    """Return placeholder names in order of first appearance."""
    if not template:
        return []
    return list(dict.fromkeys(PLACEHOLDER_PATTERN.findall(template)))


def unresolved_placeholders(template: str | None, table: Mapping[str, str]) -> list[str]:
    """Return placeholder names in ``template`` that ``table`` does not define."""
    return [name for name in find_placeholders(template) if name not in table]


__all__ = ["PLACEHOLDER_PATTERN", "substitute", "find_placeholders", "unresolved_placeholders"]
