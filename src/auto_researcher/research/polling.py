"""Polling for background Responses API jobs.

A response created with ``background`` processing (or one the API has not
finished yet) comes back with status ``queued`` or ``in_progress``. The
loop below waits and re-fetches it by id until the status is terminal.
There is no cancellation and no retry: an HTTP or transport failure while
polling propagates to the caller.

Public API (the "studs"):
    poll_interval: Parse and clamp the configured interval
    poll_until_complete: Wait-then-fetch loop
"""

import logging
import time
from collections.abc import Callable
from typing import Any

from auto_researcher.llm.providers.base import BaseResponsesProvider
from auto_researcher.llm.types import PENDING_STATUSES, GenerationResult
from auto_researcher.research.extraction import response_id, response_status
from auto_researcher.research.payload import parse_number

_logger = logging.getLogger(__name__)

DEFAULT_POLL_SECONDS = 2
MIN_POLL_SECONDS = 1
MAX_POLL_SECONDS = 30


def poll_interval(raw: Any, default: int = DEFAULT_POLL_SECONDS) -> int:
    """Parse the poll interval in seconds, clamped to 1-30."""
    value = parse_number(raw)
    seconds = int(value) if value is not None else default
    return max(MIN_POLL_SECONDS, min(MAX_POLL_SECONDS, seconds))


def is_pending(result: GenerationResult) -> bool:
    return response_status(result) in PENDING_STATUSES and response_id(result) is not None


def poll_until_complete(
    client: BaseResponsesProvider,
    result: GenerationResult,
    interval_seconds: int = DEFAULT_POLL_SECONDS,
    sleep: Callable[[float], Any] = time.sleep,
) -> GenerationResult:
    """Re-fetch ``result`` until its status is terminal.

    Args:
        client: Provider used for ``retrieve_response``
        result: Result of the initial create call
        interval_seconds: Wait before each fetch
        sleep: Wait function (injectable for tests)

    Returns:
        The first result whose status is not pending

    Raises:
        LLMError: If a fetch fails
    """
    polls = 0
    while is_pending(result):
        job_id = response_id(result)
        _logger.debug(
            "Response %s is %s, polling again in %ss",
            job_id,
            response_status(result),
            interval_seconds,
        )
        sleep(interval_seconds)
        result = client.retrieve_response(job_id)
        polls += 1

    if polls:
        _logger.info(
            "Response %s finished with status %s after %d polls",
            response_id(result),
            response_status(result),
            polls,
        )
    return result


__all__ = [
    "DEFAULT_POLL_SECONDS",
    "poll_interval",
    "is_pending",
    "poll_until_complete",
]
