"""Automation script and its forum collaborators.

This module defines the auto researcher script together with the forum
interface it posts through.
"""

from .file_forum import FileForum
from .forum import Forum
from .models import ForumCategory, ForumUser, PostRecord, RunResult, ScriptFields
from .script import (
    AutoResearcherScript,
    CategoryNotFoundError,
    EmptyOutputError,
    ScriptError,
    UserNotFoundError,
    prepare_request,
)

__all__ = [
    "AutoResearcherScript",
    "FileForum",
    "Forum",
    "ForumCategory",
    "ForumUser",
    "PostRecord",
    "RunResult",
    "ScriptFields",
    "ScriptError",
    "UserNotFoundError",
    "CategoryNotFoundError",
    "EmptyOutputError",
    "prepare_request",
]
