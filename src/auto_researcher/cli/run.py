"""Run and preview commands for Auto Researcher CLI.

Fields come from a YAML file (flat values or host-style ``{value: ...}``
envelopes), with repeated ``--field key=value`` options taking precedence.
"""

import json
import sys
from typing import Any

import click
from pydantic import ValidationError

from ..automation import AutoResearcherScript, ScriptError, ScriptFields, prepare_request
from ..llm import LLMConfig, LLMError, create_llm_client
from .main import cli, get_forum, load_config_file, parse_field_overrides


def _load_fields(config_file: str | None, field: tuple[str, ...]) -> ScriptFields:
    """Merge file and CLI fields into a validated ScriptFields.

    Raises:
        click.ClickException: If the merged fields are invalid
    """
    data: dict[str, Any] = load_config_file(config_file) if config_file else {}
    data.update(parse_field_overrides(field))

    try:
        return ScriptFields.from_host_fields(data)
    except ValidationError as e:
        lines = [f"  - {'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        raise click.ClickException("Invalid script fields:\n" + "\n".join(lines)) from None


_config_file_option = click.option(
    "--config-file",
    "-c",
    type=click.Path(exists=False),
    help="YAML file with script fields (--field options take precedence)",
)
_field_option = click.option(
    "--field", "-f", multiple=True, help="Script field in key=value format"
)


@cli.command()
@_config_file_option
@_field_option
@click.option("--state-dir", type=click.Path(file_okay=False), help="Forum data directory")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def run(config_file: str | None, field: tuple[str, ...], state_dir: str | None, yes: bool) -> None:
    """Run the script once and create a topic.

    Credentials come from the environment (OPENAI_API_KEY, or
    LLM_PROVIDER=azure_openai with AZURE_OPENAI_ENDPOINT).

    \b
    Examples:
        auto-researcher run --config-file weekly.yaml
        auto-researcher run -c weekly.yaml --field temperature=0.2 --yes
    """
    fields = _load_fields(config_file, field)

    try:
        config = LLMConfig.from_env()
    except ValueError as e:
        raise click.ClickException(f"Invalid API configuration: {e}") from None

    if not yes:
        click.echo(f"Running auto researcher as {fields.creator}")
        click.echo(f"  Model:    {fields.model}")
        click.echo(f"  Category: {fields.category}")
        if not click.confirm("Proceed?"):
            click.echo("Aborted.")
            sys.exit(0)

    try:
        script = AutoResearcherScript(get_forum(state_dir), create_llm_client(config))
        result = script.run(fields)
    except (ScriptError, LLMError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"Error: Unexpected failure: {e}", err=True)
        sys.exit(1)

    click.echo(f"Topic created: {result.topic.post_id}")
    click.echo(f"  Title:    {result.topic.title}")
    click.echo(f"  Category: {result.topic.category_id}")
    if result.raw_response_pm:
        click.echo(f"  Raw response sent to: {', '.join(result.raw_response_pm.target_usernames)}")
    if result.unresolved_variables:
        click.echo(f"  Unresolved variables: {', '.join(result.unresolved_variables)}")


@cli.command()
@_config_file_option
@_field_option
def preview(config_file: str | None, field: tuple[str, ...]) -> None:
    """Print the request the script would send, without calling the API.

    \b
    Examples:
        auto-researcher preview --config-file weekly.yaml
    """
    fields = _load_fields(config_file, field)

    try:
        request, unresolved = prepare_request(fields)
    except (LLMError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(json.dumps(request, indent=2, ensure_ascii=False))
    if unresolved:
        click.echo(f"Unresolved variables: {', '.join(unresolved)}", err=True)
