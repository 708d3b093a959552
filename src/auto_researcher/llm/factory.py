"""Factory function for creating Responses API clients.

Public API (the "studs"):
    create_llm_client: Factory function to create provider instances
"""

from auto_researcher.llm.config import LLMConfig
from auto_researcher.llm.providers.base import BaseResponsesProvider


def create_llm_client(config: LLMConfig) -> BaseResponsesProvider:
    """Create a Responses API client based on configuration.

    Args:
        config: LLMConfig specifying provider and settings

    Returns:
        BaseResponsesProvider: Configured provider instance

    Raises:
        ValueError: If provider is unknown

    Example:
        >>> config = LLMConfig(provider="openai", api_key="sk-...")
        >>> client = create_llm_client(config)
        >>> result = client.create_response({"model": "gpt-4.1", "input": "Hello"})
    """
    if config.provider == "openai":
        from auto_researcher.llm.providers.openai_responses import OpenAIResponsesProvider

        return OpenAIResponsesProvider(config)
    elif config.provider == "azure_openai":
        from auto_researcher.llm.providers.azure_openai import AzureOpenAIResponsesProvider

        return AzureOpenAIResponsesProvider(config)
    else:
        raise ValueError(f"Unknown provider: {config.provider}")


__all__ = ["create_llm_client"]
