"""Responses API client layer.

This module provides a small, provider-neutral way to send raw Responses
API requests:
- OpenAI (api.openai.com or any compatible base URL)
- Azure OpenAI (API key or managed identity)

Public API (the "studs"):
    create_llm_client: Factory function to create provider instances
    LLMConfig: Configuration model for providers
    LLMMessage: Message type for request input
    BaseResponsesProvider: Abstract base class for providers

Example:
    >>> from auto_researcher.llm import create_llm_client, LLMConfig
    >>>
    >>> config = LLMConfig(provider="openai", api_key="sk-...")
    >>> client = create_llm_client(config)
    >>> result = client.create_response({"model": "gpt-4.1", "input": "Hello!"})
    >>> result["status"]
    'completed'
"""

from auto_researcher.llm.config import LLMConfig
from auto_researcher.llm.exceptions import (
    LLMAuthenticationError,
    LLMError,
    LLMInvalidRequestError,
    LLMProviderError,
    LLMRateLimitError,
)
from auto_researcher.llm.factory import create_llm_client
from auto_researcher.llm.providers.base import BaseResponsesProvider
from auto_researcher.llm.types import LLMMessage, ResponseStatus

__all__ = [
    # Factory
    "create_llm_client",
    # Config
    "LLMConfig",
    # Types
    "LLMMessage",
    "ResponseStatus",
    # Base class (for custom providers)
    "BaseResponsesProvider",
    # Exceptions
    "LLMError",
    "LLMAuthenticationError",
    "LLMRateLimitError",
    "LLMInvalidRequestError",
    "LLMProviderError",
]
