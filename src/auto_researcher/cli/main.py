"""Main CLI entry point for Auto Researcher.

Provides commands to run and inspect the auto researcher script:
    auto-researcher run --config-file <fields.yaml> [--field key=value]
    auto-researcher preview --config-file <fields.yaml>
    auto-researcher posts [--format json]
"""

import logging
from pathlib import Path
from typing import Any

import click
import yaml

from .. import __version__
from ..automation import FileForum

# Global forum instance
_forum: FileForum | None = None


def get_forum(state_dir: str | None = None) -> FileForum:
    """Get or create the file-backed forum."""
    global _forum
    if state_dir is not None:
        return FileForum(state_dir=Path(state_dir))
    if _forum is None:
        _forum = FileForum()
    return _forum


def load_config_file(config_file: str) -> dict[str, Any]:
    """Load and validate a YAML field file.

    Args:
        config_file: Path to the YAML file

    Returns:
        Parsed field mapping

    Raises:
        click.ClickException: If file not found or invalid YAML
    """
    path = Path(config_file)
    if not path.exists():
        raise click.ClickException(f"Config file not found: {config_file}")

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise click.ClickException(f"Invalid YAML in config file: {e}") from None

    if not isinstance(data, dict):
        raise click.ClickException("Config file must contain a YAML mapping (dict)")

    return data


def parse_field_overrides(pairs: tuple[str, ...]) -> dict[str, Any]:
    """Parse repeated ``key=value`` options, coercing int/float/bool values."""
    fields: dict[str, Any] = {}
    for pair in pairs:
        if "=" not in pair:
            raise click.UsageError(f"Invalid --field format {pair!r}. Expected key=value")
        k, v = pair.split("=", 1)
        # Try to parse as int/float/bool
        try:
            fields[k] = int(v)
        except ValueError:
            try:
                fields[k] = float(v)
            except ValueError:
                if v.lower() in ("true", "false"):
                    fields[k] = v.lower() == "true"
                else:
                    fields[k] = v
    return fields


@click.group()
@click.version_option(version=__version__, prog_name="auto-researcher")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Auto Researcher - forum topics generated by the OpenAI Responses API.

    \b
    Commands:
        auto-researcher run --config-file weekly.yaml
        auto-researcher preview --config-file weekly.yaml
        auto-researcher posts
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Register commands
from . import posts, run  # noqa: E402,F401


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
