"""Tests for CLI commands using Click's CliRunner."""

import json
import os
from unittest.mock import MagicMock, patch

import pytest
import yaml
from click.testing import CliRunner

from auto_researcher.cli.main import cli, parse_field_overrides
from auto_researcher.llm.exceptions import LLMAuthenticationError

runner = CliRunner()

_ENV = {"LLM_PROVIDER": "openai", "OPENAI_API_KEY": "sk-test"}  # pragma: allowlist secret


def _completed(text):
    return {
        "id": "resp_1",
        "status": "completed",
        "output": [{"type": "message", "content": [{"type": "output_text", "text": text}]}],
    }


@pytest.fixture
def state_dir(tmp_path):
    """A forum data directory with one user and one category."""
    (tmp_path / "forum.yaml").write_text(
        yaml.safe_dump(
            {
                "users": ["system", "alice"],
                "categories": [{"category_id": 4, "slug": "research", "name": "Research"}],
            }
        )
    )
    return tmp_path


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "weekly.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "creator": {"value": "system"},
                "prompt": {"value": "News about {{topic}}"},
                "model": {"value": "gpt-4.1"},
                "category": {"value": "research"},
                "variables": {"value": [{"key": "topic", "value": "AI"}]},
            }
        )
    )
    return str(path)


class TestCLIBasics:
    """Basic CLI tests."""

    def test_version(self):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_help(self):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "run" in result.output
        assert "preview" in result.output
        assert "posts" in result.output


class TestParseFieldOverrides:
    def test_coercion(self):
        assert parse_field_overrides(("seed=7", "temperature=0.2", "enable_web_search=true")) == {
            "seed": 7,
            "temperature": 0.2,
            "enable_web_search": True,
        }

    def test_value_may_contain_equals(self):
        assert parse_field_overrides(("prompt=a=b",)) == {"prompt": "a=b"}


class TestPreviewCommand:
    def test_prints_request(self, config_file):
        result = runner.invoke(cli, ["preview", "--config-file", config_file])

        assert result.exit_code == 0
        request = json.loads(result.output)
        assert request["model"] == "gpt-4.1"
        assert request["input"][0]["content"] == "News about AI"

    def test_field_options_take_precedence(self, config_file):
        result = runner.invoke(
            cli, ["preview", "-c", config_file, "--field", "model=o3", "-f", "temperature=0.5"]
        )

        assert result.exit_code == 0
        request = json.loads(result.output)
        assert request["model"] == "o3"
        assert request["temperature"] == 0.5

    def test_reports_unresolved_variables(self, config_file):
        result = runner.invoke(
            cli, ["preview", "-c", config_file, "--field", "prompt=About {{subject}}"]
        )

        assert result.exit_code == 0
        assert "Unresolved variables: subject" in result.output

    def test_missing_required_fields(self):
        result = runner.invoke(cli, ["preview", "--field", "model=gpt-4.1"])

        assert result.exit_code != 0
        assert "Invalid script fields" in result.output
        assert "creator" in result.output

    def test_config_file_not_found(self):
        result = runner.invoke(cli, ["preview", "--config-file", "/nonexistent/weekly.yaml"])
        assert result.exit_code != 0
        assert "Config file not found" in result.output

    def test_config_file_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("key: [unterminated")
        result = runner.invoke(cli, ["preview", "--config-file", str(path)])
        assert result.exit_code != 0
        assert "Invalid YAML" in result.output

    def test_config_file_not_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- one\n- two\n")
        result = runner.invoke(cli, ["preview", "--config-file", str(path)])
        assert result.exit_code != 0
        assert "must contain a YAML mapping" in result.output

    def test_numeric_prompt_kept_as_text(self, config_file):
        result = runner.invoke(cli, ["preview", "-c", config_file, "--field", "prompt=2024"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["input"][0]["content"] == "2024"

    def test_numeric_flag_enables_web_search(self, config_file):
        result = runner.invoke(
            cli, ["preview", "-c", config_file, "--field", "enable_web_search=1"]
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["tools"] == [{"type": "web_search_preview"}]

    def test_invalid_field_format(self, config_file):
        result = runner.invoke(cli, ["preview", "-c", config_file, "--field", "no-equals"])
        assert result.exit_code != 0
        assert "Expected key=value" in result.output


class TestRunCommand:
    """Tests for the run command."""

    @patch("auto_researcher.cli.run.create_llm_client")
    def test_run_success(self, mock_create, config_file, state_dir):
        client = MagicMock()
        client.create_response.side_effect = [_completed("Report body"), _completed("AI Weekly")]
        mock_create.return_value = client

        with patch.dict(os.environ, _ENV):
            result = runner.invoke(
                cli, ["run", "-c", config_file, "--state-dir", str(state_dir), "--yes"]
            )

        assert result.exit_code == 0, result.output
        assert "Topic created:" in result.output
        assert "AI Weekly" in result.output
        posts = list((state_dir / "posts").glob("*.json"))
        assert len(posts) == 1
        assert json.loads(posts[0].read_text())["raw"] == "Report body"

    @patch("auto_researcher.cli.run.create_llm_client")
    def test_run_with_pm(self, mock_create, config_file, state_dir):
        client = MagicMock()
        client.create_response.side_effect = [_completed("Body"), _completed("Title")]
        mock_create.return_value = client

        with patch.dict(os.environ, _ENV):
            result = runner.invoke(
                cli,
                [
                    "run",
                    "-c",
                    config_file,
                    "--field",
                    "send_pm_with_full_response=alice",
                    "--state-dir",
                    str(state_dir),
                    "-y",
                ],
            )

        assert result.exit_code == 0, result.output
        assert "Raw response sent to: alice" in result.output

    @patch("auto_researcher.cli.run.create_llm_client")
    def test_run_confirmation_declined(self, mock_create, config_file, state_dir):
        with patch.dict(os.environ, _ENV):
            result = runner.invoke(
                cli, ["run", "-c", config_file, "--state-dir", str(state_dir)], input="n\n"
            )

        assert result.exit_code == 0
        assert "Aborted." in result.output
        mock_create.assert_not_called()

    @patch("auto_researcher.cli.run.create_llm_client")
    def test_run_api_error(self, mock_create, config_file, state_dir):
        client = MagicMock()
        client.create_response.side_effect = LLMAuthenticationError(
            "OpenAI error 401: invalid key", status_code=401
        )
        mock_create.return_value = client

        with patch.dict(os.environ, _ENV):
            result = runner.invoke(
                cli, ["run", "-c", config_file, "--state-dir", str(state_dir), "--yes"]
            )

        assert result.exit_code == 1
        assert "Error: OpenAI error 401" in result.output

    @patch("auto_researcher.cli.run.create_llm_client")
    def test_run_unknown_category(self, mock_create, config_file, state_dir):
        mock_create.return_value = MagicMock()

        with patch.dict(os.environ, _ENV):
            result = runner.invoke(
                cli,
                [
                    "run",
                    "-c",
                    config_file,
                    "--field",
                    "category=news",
                    "--state-dir",
                    str(state_dir),
                    "--yes",
                ],
            )

        assert result.exit_code == 1
        assert "Category not found" in result.output

    def test_run_missing_api_key(self, config_file, state_dir):
        with patch.dict(os.environ, {"LLM_PROVIDER": "openai"}, clear=True):
            result = runner.invoke(
                cli, ["run", "-c", config_file, "--state-dir", str(state_dir), "--yes"]
            )

        assert result.exit_code != 0
        assert "Invalid API configuration" in result.output
        assert "OPENAI_API_KEY" in result.output


class TestPostsCommand:
    def test_no_posts(self, state_dir):
        result = runner.invoke(cli, ["posts", "--state-dir", str(state_dir)])
        assert result.exit_code == 0
        assert "No posts found" in result.output

    def _create_post(self, state_dir):
        from auto_researcher.automation.file_forum import FileForum

        forum = FileForum(state_dir=state_dir)
        return forum.create_topic(
            forum.find_user("system"), "AI Weekly", "Body", forum.find_category("research")
        )

    def test_lists_posts(self, state_dir):
        record = self._create_post(state_dir)

        result = runner.invoke(cli, ["posts", "--state-dir", str(state_dir)])

        assert result.exit_code == 0
        assert record.post_id in result.output
        assert "AI Weekly" in result.output

    def test_json_format(self, state_dir):
        record = self._create_post(state_dir)

        result = runner.invoke(cli, ["posts", "--state-dir", str(state_dir), "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data[0]["post_id"] == record.post_id
        assert data[0]["archetype"] == "regular"
