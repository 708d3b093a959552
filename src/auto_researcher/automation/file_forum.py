"""File-based Forum implementation.

Reads users and categories from ``forum.yaml`` and stores created posts as
JSON files on the local filesystem.

Public API (the "studs"):
    FileForum: Concrete Forum implementation using local files
"""

from __future__ import annotations

import logging
import re
import uuid
from pathlib import Path
from typing import Any

import yaml

from .models import ForumCategory, ForumUser, PostArchetype, PostRecord

_logger = logging.getLogger(__name__)

# Pattern for valid usernames: alphanumeric, hyphens, underscores, dots
_USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")

FORUM_FILE = "forum.yaml"


def _normalize_username(username: str) -> str:
    """Normalize a username for lookup.

    Args:
        username: Raw username, optionally prefixed with ``@``

    Returns:
        Lowercased username

    Raises:
        ValueError: If username is empty or contains invalid characters
    """
    name = username.strip().lstrip("@")
    if not name:
        raise ValueError("username must not be empty")

    if not _USERNAME_PATTERN.match(name):
        raise ValueError(
            f"username contains invalid characters: {username!r}. "
            "Only alphanumeric, hyphens, underscores, and dots are allowed."
        )

    return name.lower()


class FileForum:
    """File-based Forum implementation.

    Users and categories are read from ``{state_dir}/forum.yaml``::

        users:
          - system
          - username: alice
            user_id: 2
        categories:
          - category_id: 4
            slug: research
            name: Research

    and may also be passed to the constructor. Created posts are written to
    ``{state_dir}/posts/{post_id}.json``.
    """

    def __init__(
        self,
        state_dir: Path | None = None,
        users: list[Any] | None = None,
        categories: list[Any] | None = None,
    ) -> None:
        """Initialize FileForum.

        Args:
            state_dir: Directory for forum data. Defaults to ~/.auto-researcher/
            users: Extra users (usernames or user mappings)
            categories: Extra categories (category mappings)
        """
        if state_dir is None:
            state_dir = Path.home() / ".auto-researcher"
        self._state_dir = state_dir
        self._posts_dir = state_dir / "posts"
        self._posts_dir.mkdir(parents=True, exist_ok=True)

        data = self._load_forum_file()
        self._users: dict[str, ForumUser] = {}
        for entry in [*data.get("users", []), *(users or [])]:
            user = ForumUser(username=entry) if isinstance(entry, str) else ForumUser(**entry)
            self._users[_normalize_username(user.username)] = user

        self._categories: list[ForumCategory] = [
            ForumCategory(**entry) for entry in [*data.get("categories", []), *(categories or [])]
        ]

    def _load_forum_file(self) -> dict[str, Any]:
        path = self._state_dir / FORUM_FILE
        if not path.exists():
            _logger.debug("No forum file found at %s", path)
            return {}

        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path} must contain a YAML mapping")
        return data

    def find_user(self, username: str) -> ForumUser | None:
        """Find a user by username (case-insensitive).

        Args:
            username: Username to resolve

        Returns:
            ForumUser if known, None otherwise
        """
        try:
            key = _normalize_username(username)
        except ValueError:
            _logger.debug("Rejected username %r", username)
            return None
        return self._users.get(key)

    def find_category(self, identifier: str) -> ForumCategory | None:
        """Find a category by numeric id, slug or name.

        Args:
            identifier: Category id, slug or name

        Returns:
            ForumCategory if known, None otherwise
        """
        ident = str(identifier).strip()
        for category in self._categories:
            if ident == str(category.category_id):
                return category
        lowered = ident.lower()
        for category in self._categories:
            if lowered in (category.slug.lower(), category.name.lower()):
                return category
        return None

    def create_topic(
        self, creator: ForumUser, title: str, raw: str, category: ForumCategory
    ) -> PostRecord:
        """Create a topic and persist it as JSON."""
        record = PostRecord(
            post_id=self._new_post_id(),
            archetype=PostArchetype.REGULAR,
            title=title,
            raw=raw,
            creator=creator.username,
            category_id=category.category_id,
        )
        self._save(record)
        return record

    def create_private_message(
        self, creator: ForumUser, recipient: ForumUser, title: str, raw: str
    ) -> PostRecord:
        """Create a private message and persist it as JSON."""
        record = PostRecord(
            post_id=self._new_post_id(),
            archetype=PostArchetype.PRIVATE_MESSAGE,
            title=title,
            raw=raw,
            creator=creator.username,
            target_usernames=[recipient.username],
        )
        self._save(record)
        return record

    def list_posts(self) -> list[PostRecord]:
        """List stored posts, newest first.

        Unreadable files are skipped with a warning.
        """
        results: list[PostRecord] = []
        for post_file in self._posts_dir.glob("*.json"):
            try:
                results.append(PostRecord.model_validate_json(post_file.read_text()))
            except Exception:
                _logger.warning("Failed to read post file %s", post_file, exc_info=True)

        results.sort(key=lambda record: record.created_at, reverse=True)
        return results

    def _new_post_id(self) -> str:
        return uuid.uuid4().hex[:12]

    def _save(self, record: PostRecord) -> None:
        if not record.title.strip():
            raise ValueError("post title must not be blank")
        if not record.raw.strip():
            raise ValueError("post body must not be blank")

        path = self._posts_dir / f"{record.post_id}.json"
        path.write_text(record.model_dump_json(indent=2))
        _logger.debug("Saved post %s to %s", record.post_id, path)


__all__ = ["FileForum"]
