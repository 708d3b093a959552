"""Azure OpenAI Responses API provider implementation.

Public API (the "studs"):
    AzureOpenAIResponsesProvider: Responses API through an Azure OpenAI resource
"""

from typing import Any

from azure.identity import DefaultAzureCredential, get_bearer_token_provider
from openai import AzureOpenAI

from auto_researcher.llm.config import LLMConfig
from auto_researcher.llm.providers.openai_responses import OpenAIResponsesProvider


class AzureOpenAIResponsesProvider(OpenAIResponsesProvider):
    """Azure OpenAI provider implementation.

    Requests go to ``{endpoint}/openai/responses?api-version=...``.
    Uses DefaultAzureCredential for managed identity when no API key provided.
    """

    label = "Azure OpenAI"

    def _build_client(self, config: LLMConfig) -> Any:
        if not config.endpoint:
            raise ValueError("endpoint is required for Azure OpenAI provider")

        api_key = config.api_key.get_secret_value() if config.api_key else None

        if api_key:
            return AzureOpenAI(
                api_key=api_key,
                api_version=config.api_version,
                azure_endpoint=config.endpoint,
                timeout=config.timeout_seconds,
                max_retries=config.max_retries,
            )

        credential = DefaultAzureCredential()
        token_provider = get_bearer_token_provider(
            credential, "https://cognitiveservices.azure.com/.default"
        )
        return AzureOpenAI(
            azure_ad_token_provider=token_provider,
            api_version=config.api_version,
            azure_endpoint=config.endpoint,
            timeout=config.timeout_seconds,
            max_retries=config.max_retries,
        )


__all__ = ["AzureOpenAIResponsesProvider"]
