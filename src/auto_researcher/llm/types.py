"""Type definitions for the Responses API layer.

Public API (the "studs"):
    LLMMessage: A single role/content entry of a request's input
    ResponseStatus: Known job status values
    GenerationRequest: JSON object sent to POST /responses
    GenerationResult: JSON object returned by the API
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

GenerationRequest = dict[str, Any]
GenerationResult = dict[str, Any]


class LLMMessage(BaseModel):
    """Represents a single message in a request's input.

    Attributes:
        role: Message role ("user", "assistant", "system" or "developer")
        content: Message content text
    """

    role: str = Field(..., description="Message role: user, assistant, or system")
    content: str = Field(..., description="Message content")


class ResponseStatus(str, Enum):
    """Status values reported for a response job."""

    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    INCOMPLETE = "incomplete"
    FAILED = "failed"
    CANCELLED = "cancelled"


PENDING_STATUSES = frozenset({ResponseStatus.QUEUED.value, ResponseStatus.IN_PROGRESS.value})
FAILED_STATUSES = frozenset({ResponseStatus.FAILED.value, ResponseStatus.CANCELLED.value})


__all__ = [
    "LLMMessage",
    "ResponseStatus",
    "GenerationRequest",
    "GenerationResult",
    "PENDING_STATUSES",
    "FAILED_STATUSES",
]
