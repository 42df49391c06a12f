"""Pydantic models for AppVeyor API responses and repository identities."""

from __future__ import annotations

from .projects import NON_TERMINAL_STATUSES, Build, BuildStatus, Project, ProjectBuild
from .repository import BadgeParams, ParsedGitUrl, RepoIdentity

__all__ = [
    "NON_TERMINAL_STATUSES",
    "BadgeParams",
    "Build",
    "BuildStatus",
    "ParsedGitUrl",
    "Project",
    "ProjectBuild",
    "RepoIdentity",
]
