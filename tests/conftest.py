"""Shared test fixtures."""

import pytest

from auto_researcher.automation.file_forum import FileForum


@pytest.fixture(autouse=True)
def _clear_cli_forum():
    """Clear the CLI's cached forum between tests."""
    from auto_researcher.cli import main

    main._forum = None
    yield
    main._forum = None


@pytest.fixture
def forum(tmp_path):
    """A file forum with two users and one category."""
    return FileForum(
        state_dir=tmp_path,
        users=["system", {"username": "Alice", "user_id": 2}],
        categories=[{"category_id": 4, "slug": "research", "name": "Research"}],
    )
