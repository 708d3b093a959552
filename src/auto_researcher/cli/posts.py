"""Post listing command for Auto Researcher CLI."""

import json

import click

from .main import cli, get_forum


@cli.command()
@click.option("--state-dir", type=click.Path(file_okay=False), help="Forum data directory")
@click.option("--limit", "-l", type=int, default=20, help="Maximum results")
@click.option(
    "--format", "-f", "output_format", type=click.Choice(["text", "json"]), default="text"
)
def posts(state_dir: str | None, limit: int, output_format: str) -> None:
    """List posts created by the script, newest first.

    \b
    Examples:
        auto-researcher posts
        auto-researcher posts --format json --limit 5
    """
    records = get_forum(state_dir).list_posts()[:limit]

    if not records:
        click.echo("No posts found.")
        return

    if output_format == "json":
        click.echo(json.dumps([r.model_dump() for r in records], indent=2, default=str))
    else:
        click.echo(f"{'ID':<14} {'Type':<16} {'Created':<20} {'Title'}")
        click.echo("-" * 75)
        for r in records:
            created = r.created_at.strftime("%Y-%m-%d %H:%M:%S")
            click.echo(f"{r.post_id:<14} {r.archetype:<16} {created:<20} {r.title}")
