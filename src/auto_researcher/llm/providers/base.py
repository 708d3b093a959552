"""Abstract base class for Responses API providers.

Public API (the "studs"):
    BaseResponsesProvider: Abstract base class for Responses API providers
"""

from abc import ABC, abstractmethod

from auto_researcher.llm.types import GenerationRequest, GenerationResult


class BaseResponsesProvider(ABC):
    """Abstract base class for Responses API providers.

    Providers send already-built request objects as JSON and hand the
    decoded response back untouched; shaping the request and reading text
    out of the result happen in ``auto_researcher.research``.
    """

    @abstractmethod
    def create_response(self, request: GenerationRequest) -> GenerationResult:
        """Submit a generation request (``POST /responses``).

        Args:
            request: JSON-compatible request object

        Returns:
            Decoded JSON response body

        Raises:
            LLMError: If the API answers with status >= 400 or the transport fails
        """
        ...

    @abstractmethod
    def retrieve_response(self, response_id: str) -> GenerationResult:
        """Fetch a previously created response by id (``GET /responses/{id}``).

        Args:
            response_id: Id returned by create_response

        Returns:
            Decoded JSON response body

        Raises:
            LLMError: If the API answers with status >= 400 or the transport fails
        """
        ...


__all__ = ["BaseResponsesProvider"]
