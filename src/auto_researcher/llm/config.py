"""Configuration model for Responses API providers.

Public API (the "studs"):
    LLMConfig: Connection settings injected into a Responses API provider
"""

import os
import re
from typing import Any, Literal

from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator

# Data-driven mapping: provider -> {config_field: env_var}
_PROVIDER_ENV_MAP: dict[str, dict[str, str]] = {
    "openai": {
        "api_key": "OPENAI_API_KEY",
        "organization": "OPENAI_ORGANIZATION",
        "project": "OPENAI_PROJECT",
        "base_url": "OPENAI_BASE_URL",
    },
    "azure_openai": {
        "endpoint": "AZURE_OPENAI_ENDPOINT",
        "api_version": "AZURE_OPENAI_API_VERSION",
        "api_key": "AZURE_OPENAI_API_KEY",
    },
}

# Fields that are required per provider (must be set in env)
_PROVIDER_REQUIRED_FIELDS: dict[str, set[str]] = {
    "openai": {"api_key"},
    "azure_openai": {"endpoint"},
}

# Provider-independent settings
_SHARED_ENV_MAP: dict[str, str] = {
    "timeout_seconds": "LLM_TIMEOUT_SECONDS",
    "max_retries": "LLM_MAX_RETRIES",
}

DEFAULT_BASE_URL = "https://api.openai.com/v1"


class LLMConfig(BaseModel):
    """Connection settings for the Responses API.

    Passed explicitly to the provider instead of being read from a
    process-wide settings object.

    Attributes:
        provider: Provider name
        api_key: API key (optional for Azure when using managed identity)
        organization: Value for the OpenAI-Organization header
        project: Value for the OpenAI-Project header
        base_url: OpenAI API base URL
        endpoint: Azure OpenAI endpoint URL
        api_version: Azure OpenAI API version
        timeout_seconds: Request timeout
        max_retries: Transport retry attempts (0: transport failures are fatal)
    """

    provider: Literal["openai", "azure_openai"] = Field("openai", description="Provider name")
    api_key: SecretStr | None = Field(None, description="API key")
    organization: str | None = Field(None, description="OpenAI organization id")
    project: str | None = Field(None, description="OpenAI project id")
    base_url: str = Field(DEFAULT_BASE_URL, description="OpenAI API base URL")
    endpoint: str | None = Field(None, description="Azure endpoint URL")
    api_version: str = Field("2025-03-01-preview", description="Azure OpenAI API version")
    timeout_seconds: int = Field(120, ge=1, le=600, description="Request timeout in seconds")
    max_retries: int = Field(0, ge=0, le=10, description="Maximum retry attempts")

    @field_validator("organization", "project")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        """Treat blank header values as unset."""
        if v is not None and not v.strip():
            return None
        return v

    @field_validator("api_version")
    @classmethod
    def validate_api_version(cls, v: str) -> str:
        """Validate api_version matches YYYY-MM-DD or YYYY-MM-DD-preview format."""
        if not re.match(r"^\d{4}-\d{2}-\d{2}(-preview)?$", v):
            raise ValueError(
                f"Invalid api_version format: {v!r}. Expected YYYY-MM-DD or YYYY-MM-DD-preview"
            )
        return v

    @field_validator("endpoint", "base_url")
    @classmethod
    def validate_https(cls, v: str | None) -> str | None:
        """Validate URLs start with https://."""
        if v is not None and not v.startswith("https://"):
            raise ValueError(f"URL must start with 'https://': {v!r}")
        return v.rstrip("/") if v is not None else v

    @model_validator(mode="after")
    def validate_provider_config(self) -> "LLMConfig":
        """Validate provider-specific requirements."""
        if self.provider == "openai":
            if not self.api_key:
                raise ValueError("api_key is required for openai provider")

        elif self.provider == "azure_openai":
            if not self.endpoint:
                raise ValueError("endpoint is required for azure_openai provider")

        return self

    @classmethod
    def from_env(cls) -> "LLMConfig":
        """Build the configuration from the process environment.

        ``LLM_PROVIDER`` selects the provider (default ``openai``). The
        provider's own variables are read from ``_PROVIDER_ENV_MAP``:
        ``OPENAI_API_KEY`` (required), ``OPENAI_ORGANIZATION``,
        ``OPENAI_PROJECT`` and ``OPENAI_BASE_URL`` for OpenAI;
        ``AZURE_OPENAI_ENDPOINT`` (required), ``AZURE_OPENAI_API_VERSION``
        and ``AZURE_OPENAI_API_KEY`` for Azure OpenAI. ``LLM_TIMEOUT_SECONDS``
        and ``LLM_MAX_RETRIES`` apply to both.

        Raises:
            ValueError: If the provider is unknown, a required variable is
                unset, or a value fails validation
        """
        provider = os.environ.get("LLM_PROVIDER", "openai")
        if provider not in _PROVIDER_ENV_MAP:
            raise ValueError(f"Unknown provider: {provider}")

        kwargs: dict[str, Any] = {"provider": provider}
        env_map = {**_PROVIDER_ENV_MAP[provider], **_SHARED_ENV_MAP}
        for field, env_var in env_map.items():
            if env_var in os.environ:
                kwargs[field] = os.environ[env_var]

        missing = [
            env_map[field]
            for field in sorted(_PROVIDER_REQUIRED_FIELDS.get(provider, set()))
            if field not in kwargs
        ]
        if missing:
            raise ValueError(
                f"{', '.join(missing)} environment variable is required "
                f"when LLM_PROVIDER={provider}"
            )

        return cls(**kwargs)


__all__ = ["LLMConfig", "DEFAULT_BASE_URL"]
