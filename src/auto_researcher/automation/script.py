"""AutoResearcherScript - generate a forum topic with the Responses API.

One run, start to finish:

    fields -> variables -> prompts -> request -> POST /responses
           -> poll until terminal -> [PM raw JSON] -> body text
           -> title request -> POST /responses -> title -> new topic

Everything runs synchronously in the calling thread. A run keeps no state
between invocations, so independent runs may execute concurrently.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from datetime import datetime
from typing import Any

from auto_researcher.llm.providers.base import BaseResponsesProvider
from auto_researcher.llm.types import FAILED_STATUSES, GenerationRequest, GenerationResult
from auto_researcher.research.extraction import (
    extract_text,
    render_result,
    response_id,
    response_status,
    truncate_title,
)
from auto_researcher.research.payload import (
    build_request,
    build_title_request,
    ensure_dispatchable,
)
from auto_researcher.research.polling import poll_interval, poll_until_complete
from auto_researcher.research.templating import substitute, unresolved_placeholders
from auto_researcher.research.variables import builtin_variables, resolve_variables

from .forum import Forum
from .models import ForumCategory, ForumUser, PostRecord, RunResult, ScriptFields

_logger = logging.getLogger(__name__)

RAW_RESPONSE_PM_TITLE = "[Auto Researcher] Raw API response"


class ScriptError(Exception):
    """Raised when a run cannot complete."""

    pass


class UserNotFoundError(ScriptError):
    """Raised when the creator username doesn't resolve."""

    pass


class CategoryNotFoundError(ScriptError):
    """Raised when the target category doesn't resolve."""

    pass


class EmptyOutputError(ScriptError):
    """Raised when the model produced no text for the topic body."""

    pass


def prepare_request(
    fields: ScriptFields, now: datetime | None = None
) -> tuple[GenerationRequest, list[str]]:
    """Build the main request and list unresolved placeholders.

    Needs no network access, so it also serves previews.

    Args:
        fields: Script fields
        now: Instant for the time variables (defaults to the current time)

    Returns:
        Tuple of (request, unresolved placeholder names)

    Raises:
        LLMInvalidRequestError: If overrides removed the model or input
        ValueError: If the configured time zone is unknown
    """
    table = resolve_variables(builtin_variables(now, fields.timezone), fields.variables)
    prompt = substitute(fields.prompt, table)
    system_prompt = substitute(fields.system_prompt, table)

    unresolved = list(
        dict.fromkeys(
            unresolved_placeholders(fields.prompt, table)
            + unresolved_placeholders(fields.system_prompt, table)
        )
    )
    if unresolved:
        _logger.warning("Unresolved template variables: %s", ", ".join(unresolved))

    request = build_request(
        model=fields.model,
        prompt=prompt,
        system_prompt=system_prompt,
        params=fields.generation_params(),
        overrides=fields.responses_api_overrides,
    )
    return ensure_dispatchable(request), unresolved


class AutoResearcherScript:
    """The auto researcher automation script.

    Collaborators are injected: the forum for identity resolution and post
    creation, the Responses API client for generation. ``sleep`` and
    ``clock`` exist so tests can run the poll loop and time variables
    deterministically.

    Example:
        forum = FileForum()
        client = create_llm_client(LLMConfig.from_env())
        script = AutoResearcherScript(forum, client)
        result = script.run(ScriptFields(
            creator="system",
            prompt="Summarize AI news for the week of {{week_start_iso}}",
            model="gpt-4.1",
            category="research",
        ))
    """

    name = "auto_researcher"

    def __init__(
        self,
        forum: Forum,
        client: BaseResponsesProvider,
        sleep: Callable[[float], Any] = time.sleep,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._forum = forum
        self._client = client
        self._sleep = sleep
        self._clock = clock
        self._logger = logging.getLogger(f"auto_researcher.script.{self.name}")

    # =========================================================================
    # Request preparation (no network)
    # =========================================================================

    def prepare_request(self, fields: ScriptFields) -> tuple[GenerationRequest, list[str]]:
        """Build the main request for this run, see ``prepare_request``."""
        return prepare_request(fields, now=self._clock() if self._clock else None)

    # =========================================================================
    # Run
    # =========================================================================

    def run(self, fields: ScriptFields) -> RunResult:
        """Execute the script once.

        Args:
            fields: Script fields

        Returns:
            RunResult describing the created topic

        Raises:
            UserNotFoundError: If the creator doesn't exist
            CategoryNotFoundError: If the category doesn't exist
            LLMError: If either API call fails
            ScriptError: If the response job failed or was cancelled
            EmptyOutputError: If the model produced no body text
        """
        creator = self._resolve_creator(fields.creator)
        category = self._resolve_category(fields.category)

        request, unresolved = self.prepare_request(fields)
        self._logger.info("Requesting %s for category %s", request["model"], category.category_id)
        self._logger.debug("Request: %s", json.dumps(request, ensure_ascii=False))

        result = self._generate(request, fields)

        pm = None
        if fields.send_pm_with_full_response:
            pm = self._send_raw_response(creator, fields.send_pm_with_full_response, result)

        body = extract_text(result).strip()
        if not body:
            raise EmptyOutputError("Empty model output")

        title = self._generate_title(body, fields)

        topic = self._forum.create_topic(creator, title, body, category)
        self._logger.info("Created topic %s: %s", topic.post_id, topic.title)

        return RunResult(
            topic=topic,
            response_id=response_id(result),
            response_status=response_status(result),
            raw_response_pm=pm,
            unresolved_variables=unresolved,
        )

    def _resolve_creator(self, username: str) -> ForumUser:
        creator = self._forum.find_user(username)
        if creator is None:
            raise UserNotFoundError(f"Creator user not found: {username!r}")
        return creator

    def _resolve_category(self, identifier: str) -> ForumCategory:
        category = self._forum.find_category(identifier)
        if category is None:
            raise CategoryNotFoundError(f"Category not found: {identifier!r}")
        return category

    def _generate(self, request: GenerationRequest, fields: ScriptFields) -> GenerationResult:
        result = self._client.create_response(request)
        result = poll_until_complete(
            self._client, result, poll_interval(fields.poll_timing), sleep=self._sleep
        )

        status = response_status(result)
        if status in FAILED_STATUSES:
            raise ScriptError(
                f"Response {response_id(result)} ended with status {status}: "
                f"{result.get('error')}"
            )
        return result

    def _generate_title(self, body: str, fields: ScriptFields) -> str:
        request = ensure_dispatchable(
            build_title_request(
                model=fields.model,
                body=body,
                params=fields.generation_params(),
                overrides=fields.responses_api_overrides,
            )
        )
        result = self._generate(request, fields)
        title = extract_text(result).strip()
        if not title:
            self._logger.warning("Title response %s had no text", response_id(result))
            title = render_result(result)
        return truncate_title(title)

    def _send_raw_response(
        self, creator: ForumUser, recipient_name: str, result: GenerationResult
    ) -> PostRecord | None:
        recipient = self._forum.find_user(recipient_name)
        if recipient is None:
            self._logger.warning("PM recipient %r not found, skipping raw response", recipient_name)
            return None

        raw = "```json\n" + json.dumps(result, indent=2, ensure_ascii=False, default=str) + "\n```"
        return self._forum.create_private_message(creator, recipient, RAW_RESPONSE_PM_TITLE, raw)


__all__ = [
    "AutoResearcherScript",
    "prepare_request",
    "ScriptError",
    "UserNotFoundError",
    "CategoryNotFoundError",
    "EmptyOutputError",
]
