"""Tests for AutoResearcherScript."""

import json
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from auto_researcher.automation.models import ScriptFields
from auto_researcher.automation.script import (
    RAW_RESPONSE_PM_TITLE,
    AutoResearcherScript,
    CategoryNotFoundError,
    EmptyOutputError,
    ScriptError,
    UserNotFoundError,
    prepare_request,
)
from auto_researcher.llm.exceptions import LLMInvalidRequestError, LLMRateLimitError
from auto_researcher.llm.providers.base import BaseResponsesProvider
from auto_researcher.research.payload import TITLE_INSTRUCTION

NOW = datetime(2024, 5, 15, 10, 30, tzinfo=timezone.utc)


def _completed(text, response_id="resp_1"):
    return {
        "id": response_id,
        "status": "completed",
        "output": [
            {
                "type": "message",
                "role": "assistant",
                "content": [{"type": "output_text", "text": text}],
            }
        ],
    }


def _fields(**overrides):
    data = {
        "creator": "system",
        "prompt": "Summarize news from {{week_start_iso}} to {{week_end_iso}} on {{topic}}",
        "model": "gpt-4.1",
        "category": "research",
        "variables": [{"key": "topic", "value": "AI"}],
    }
    data.update(overrides)
    return ScriptFields(**data)


@pytest.fixture
def client():
    return MagicMock(spec=BaseResponsesProvider)


@pytest.fixture
def sleep():
    return MagicMock()


@pytest.fixture
def script(forum, client, sleep):
    return AutoResearcherScript(forum, client, sleep=sleep, clock=lambda: NOW)


class TestPrepareRequest:
    """Tests for request preparation without network access."""

    def test_substitutes_variables(self):
        request, unresolved = prepare_request(_fields(), now=NOW)

        assert request["model"] == "gpt-4.1"
        assert request["input"] == [
            {
                "role": "user",
                "content": (
                    "Summarize news from 2024-05-13T00:00:00Z to 2024-05-19T23:59:59Z on AI"
                ),
            }
        ]
        assert unresolved == []

    def test_reports_unresolved_from_both_prompts(self):
        fields = _fields(prompt="{{missing}} {{today}}", system_prompt="{{other}} {{missing}}")
        request, unresolved = prepare_request(fields, now=NOW)

        assert unresolved == ["missing", "other"]
        assert request["input"][0] == {"role": "system", "content": "{{other}} {{missing}}"}
        assert request["input"][1]["content"] == "{{missing}} 2024-05-15"

    def test_overrides_removing_model_rejected(self):
        with pytest.raises(LLMInvalidRequestError, match="no model"):
            prepare_request(_fields(responses_api_overrides='{"model": ""}'), now=NOW)

    def test_unknown_timezone(self):
        with pytest.raises(ValueError, match="Unknown time zone"):
            prepare_request(_fields(timezone="Nowhere/Else"), now=NOW)


class TestRun:
    """Tests for a full script run."""

    def test_creates_topic(self, script, client, forum):
        client.create_response.side_effect = [
            _completed("  The weekly report.  "),
            _completed("AI Weekly", response_id="resp_2"),
        ]

        result = script.run(_fields())

        assert result.topic.title == "AI Weekly"
        assert result.topic.raw == "The weekly report."
        assert result.topic.category_id == 4
        assert result.topic.creator == "system"
        assert result.response_id == "resp_1"
        assert result.response_status == "completed"
        assert result.raw_response_pm is None
        assert [p.post_id for p in forum.list_posts()] == [result.topic.post_id]

    def test_title_request_uses_body(self, script, client):
        client.create_response.side_effect = [_completed("Body"), _completed("Title")]

        script.run(_fields())

        title_request = client.create_response.call_args_list[1].args[0]
        assert title_request["model"] == "gpt-4.1"
        assert title_request["input"] == [
            {"role": "system", "content": TITLE_INSTRUCTION},
            {"role": "user", "content": "Body"},
        ]

    def test_polls_background_job(self, script, client, sleep):
        client.create_response.side_effect = [
            {"id": "resp_1", "status": "queued"},
            _completed("Title"),
        ]
        client.retrieve_response.side_effect = [
            {"id": "resp_1", "status": "in_progress"},
            _completed("Body"),
        ]

        result = script.run(_fields(poll_timing="5"))

        assert result.topic.raw == "Body"
        assert sleep.call_count == 2
        sleep.assert_called_with(5)
        client.retrieve_response.assert_called_with("resp_1")

    def test_failed_job_raises(self, script, client, forum):
        client.create_response.return_value = {
            "id": "resp_1",
            "status": "failed",
            "error": {"code": "server_error"},
        }

        with pytest.raises(ScriptError, match="failed"):
            script.run(_fields())
        assert forum.list_posts() == []

    def test_sends_raw_response_pm(self, script, client):
        main = _completed("Body")
        client.create_response.side_effect = [main, _completed("Title")]

        result = script.run(_fields(send_pm_with_full_response="alice"))

        pm = result.raw_response_pm
        assert pm is not None
        assert pm.archetype == "private_message"
        assert pm.title == RAW_RESPONSE_PM_TITLE
        assert pm.target_usernames == ["Alice"]
        assert pm.raw.startswith("```json\n")
        assert json.loads(pm.raw[len("```json\n") : -len("\n```")]) == main

    def test_missing_pm_recipient_skipped(self, script, client):
        client.create_response.side_effect = [_completed("Body"), _completed("Title")]

        result = script.run(_fields(send_pm_with_full_response="nobody"))

        assert result.raw_response_pm is None
        assert result.topic.title == "Title"

    def test_unknown_creator(self, script, client):
        with pytest.raises(UserNotFoundError):
            script.run(_fields(creator="ghost"))
        client.create_response.assert_not_called()

    def test_unknown_category(self, script, client):
        with pytest.raises(CategoryNotFoundError):
            script.run(_fields(category="missing"))
        client.create_response.assert_not_called()

    def test_empty_output(self, script, client, forum):
        client.create_response.return_value = _completed("   ")

        with pytest.raises(EmptyOutputError, match="Empty model output"):
            script.run(_fields())
        assert client.create_response.call_count == 1
        assert forum.list_posts() == []

    def test_api_error_propagates(self, script, client, forum):
        client.create_response.side_effect = LLMRateLimitError("quota", status_code=429)

        with pytest.raises(LLMRateLimitError):
            script.run(_fields())
        assert forum.list_posts() == []

    def test_long_title_truncated(self, script, client):
        client.create_response.side_effect = [_completed("Body"), _completed("T" * 500)]

        result = script.run(_fields())

        assert len(result.topic.title) == 300

    def test_title_falls_back_to_rendered_response(self, script, client):
        title_result = {"id": "resp_2", "status": "completed", "output": []}
        client.create_response.side_effect = [_completed("Body"), title_result]

        result = script.run(_fields())

        assert result.topic.title.startswith('{"id": "resp_2"')

    def test_unresolved_variables_reported(self, script, client):
        client.create_response.side_effect = [_completed("Body"), _completed("Title")]

        result = script.run(_fields(prompt="About {{subject}}"))

        assert result.unresolved_variables == ["subject"]
        assert client.create_response.call_args_list[0].args[0]["input"][0]["content"] == (
            "About {{subject}}"
        )

    def test_blank_title_text_falls_back_to_rendered_response(self, script, client):
        client.create_response.side_effect = [_completed("Body"), _completed("  ", "resp_2")]

        result = script.run(_fields())

        assert result.topic.title.startswith('{"id": "resp_2"')
