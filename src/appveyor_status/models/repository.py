"""Repository URL and identity models."""

from __future__ import annotations

from pydantic import BaseModel

from .base import AppVeyorModel
from .projects import Project


class ParsedGitUrl(BaseModel):
    """A git remote URL decomposed like ``urllib.parse.urlsplit``.

    ``helper`` names the remote helper from a ``<helper>::<address>`` URL.
    """

    model_config = {"frozen": True}

    scheme: str
    netloc: str = ""
    username: str | None = None
    password: str | None = None
    hostname: str = ""
    port: int | None = None
    path: str = ""
    query: str = ""
    fragment: str = ""
    helper: str | None = None


class RepoIdentity(AppVeyorModel):
    """Repository properties as they appear on an AppVeyor project."""

    model_config = {**AppVeyorModel.model_config, "frozen": True}

    scm: str
    provider_type: str
    repository_name: str

    def matches(self, project: Project) -> bool:
        """Shallow strict equality over the properties both sides define."""
        pairs = (
            (self.scm, project.repository_scm),
            (self.provider_type, project.repository_type),
            (self.repository_name, project.repository_name),
        )
        return all(theirs is None or theirs == ours for ours, theirs in pairs)


class BadgeParams(AppVeyorModel):
    """Path parameters for a public repository status badge."""

    provider: str
    account_name: str
    slug: str
