"""Request building and response extraction for the Responses API.

Pipeline stages, in order:
    variables:   built-in and user variables -> lookup table
    templating:  {{name}} substitution into prompt text
    payload:     request object from prompts, settings and overrides
    polling:     wait for background jobs to finish
    extraction:  plain text out of the result
"""

from auto_researcher.research.extraction import extract_text, truncate_title
from auto_researcher.research.payload import (
    GenerationParams,
    build_request,
    build_title_request,
    deep_merge,
    ensure_dispatchable,
    parse_stop_list,
)
from auto_researcher.research.polling import poll_interval, poll_until_complete
from auto_researcher.research.templating import substitute, unresolved_placeholders
from auto_researcher.research.variables import (
    builtin_variables,
    decode_variables,
    resolve_variables,
)

__all__ = [
    "builtin_variables",
    "decode_variables",
    "resolve_variables",
    "substitute",
    "unresolved_placeholders",
    "GenerationParams",
    "build_request",
    "build_title_request",
    "deep_merge",
    "ensure_dispatchable",
    "parse_stop_list",
    "poll_interval",
    "poll_until_complete",
    "extract_text",
    "truncate_title",
]
