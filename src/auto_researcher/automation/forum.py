"""Forum protocol - defines the contract the script expects from the forum.

Public API (the "studs"):
    Forum: Protocol for identity resolution and post creation
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .models import ForumCategory, ForumUser, PostRecord


@runtime_checkable
class Forum(Protocol):
    """Protocol defining the forum services used by the script.

    Lookups return None when nothing matches; the script decides that a
    missing creator or category is fatal. Creation failures are raised by
    the implementation and propagate unchanged.
    """

    def find_user(self, username: str) -> ForumUser | None:
        """Resolve a username to a user."""
        ...

    def find_category(self, identifier: str) -> ForumCategory | None:
        """Resolve a category id, slug or name to a category."""
        ...

    def create_topic(
        self, creator: ForumUser, title: str, raw: str, category: ForumCategory
    ) -> PostRecord:
        """Create a new topic in a category."""
        ...

    def create_private_message(
        self, creator: ForumUser, recipient: ForumUser, title: str, raw: str
    ) -> PostRecord:
        """Send a private message."""
        ...


__all__ = ["Forum"]
