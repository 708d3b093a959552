"""OpenAI Responses API provider implementation.

Public API (the "studs"):
    OpenAIResponsesProvider: Sends raw Responses API requests through the OpenAI SDK
"""

import logging
from typing import Any

import httpx
from openai import (
    APIStatusError,
    AuthenticationError,
    BadRequestError,
    NotFoundError,
    OpenAI,
    PermissionDeniedError,
    RateLimitError,
    UnprocessableEntityError,
)

from auto_researcher.llm.config import LLMConfig
from auto_researcher.llm.exceptions import (
    LLMAuthenticationError,
    LLMInvalidRequestError,
    LLMProviderError,
    LLMRateLimitError,
)
from auto_researcher.llm.providers.base import BaseResponsesProvider
from auto_researcher.llm.types import GenerationRequest, GenerationResult

_logger = logging.getLogger(__name__)

RESPONSES_PATH = "/responses"


def _decode_body(response: httpx.Response) -> GenerationResult:
    """Decode a JSON response body, keeping non-JSON bodies under ``raw``."""
    try:
        data = response.json()
    except ValueError:
        return {"raw": response.text}
    if not isinstance(data, dict):
        return {"raw": data}
    return data


def _status_message(label: str, error: APIStatusError) -> str:
    return f"{label} error {error.status_code}: {error.body}"


class OpenAIResponsesProvider(BaseResponsesProvider):
    """OpenAI Responses API provider.

    Uses the SDK's low-level ``post``/``get`` so the request object is sent
    exactly as built, including keys introduced by admin overrides that the
    typed ``responses.create`` signature does not know about.
    """

    label = "OpenAI"

    def __init__(self, config: LLMConfig) -> None:
        self._config = config
        self._client = self._build_client(config)

    def _build_client(self, config: LLMConfig) -> Any:
        api_key = config.api_key.get_secret_value() if config.api_key else None
        if not api_key:
            raise ValueError("api_key is required for OpenAI provider")

        return OpenAI(
            api_key=api_key,
            organization=config.organization,
            project=config.project,
            base_url=config.base_url,
            timeout=config.timeout_seconds,
            max_retries=config.max_retries,
        )

    def create_response(self, request: GenerationRequest) -> GenerationResult:
        _logger.debug("POST %s model=%s", RESPONSES_PATH, request.get("model"))
        return self._send(
            lambda: self._client.post(RESPONSES_PATH, body=request, cast_to=httpx.Response)
        )

    def retrieve_response(self, response_id: str) -> GenerationResult:
        path = f"{RESPONSES_PATH}/{response_id}"
        _logger.debug("GET %s", path)
        return self._send(lambda: self._client.get(path, cast_to=httpx.Response))

    def _send(self, call: Any) -> GenerationResult:
        label = self.label
        try:
            response = call()
            return _decode_body(response)

        except (AuthenticationError, PermissionDeniedError) as e:
            raise LLMAuthenticationError(
                _status_message(label, e), status_code=e.status_code, body=e.body
            ) from e
        except RateLimitError as e:
            raise LLMRateLimitError(
                _status_message(label, e), status_code=e.status_code, body=e.body
            ) from e
        except (BadRequestError, NotFoundError, UnprocessableEntityError) as e:
            raise LLMInvalidRequestError(
                _status_message(label, e), status_code=e.status_code, body=e.body
            ) from e
        except APIStatusError as e:
            raise LLMProviderError(
                _status_message(label, e), status_code=e.status_code, body=e.body
            ) from e
        except Exception as e:
            raise LLMProviderError(f"{label} request failed: {e}") from e


__all__ = ["OpenAIResponsesProvider"]
