"""Exceptions for the Responses API layer.

Public API (the "studs"):
    LLMError: Base exception for all LLM errors
    LLMAuthenticationError: Invalid credentials
    LLMRateLimitError: Rate limit or quota exceeded
    LLMInvalidRequestError: Invalid request parameters
    LLMProviderError: Any other API or transport failure
"""

from typing import Any


class LLMError(Exception):
    """Base exception for all LLM errors.

    Carries the HTTP status code and decoded response body when the
    failure came from an API response, so operators can tell key, quota
    and payload problems apart from the message alone.
    """

    def __init__(self, message: str, status_code: int | None = None, body: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class LLMAuthenticationError(LLMError):
    """Invalid credentials for LLM provider."""

    pass


class LLMRateLimitError(LLMError):
    """Rate limit or quota exceeded."""

    pass


class LLMInvalidRequestError(LLMError):
    """Invalid request parameters."""

    pass


class LLMProviderError(LLMError):
    """Provider-specific error that doesn't fit other categories."""

    pass


__all__ = [
    "LLMError",
    "LLMAuthenticationError",
    "LLMRateLimitError",
    "LLMInvalidRequestError",
    "LLMProviderError",
]
