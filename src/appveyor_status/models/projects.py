"""Project and build models."""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from .base import AppVeyorModel


class BuildStatus(str, Enum):
    CANCELLED = "cancelled"
    CANCELLING = "cancelling"
    FAILED = "failed"
    QUEUED = "queued"
    RUNNING = "running"
    STARTING = "starting"
    SUCCESS = "success"


# Statuses which may still change without new activity, so are worth polling.
NON_TERMINAL_STATUSES = frozenset(
    {BuildStatus.QUEUED.value, BuildStatus.RUNNING.value, BuildStatus.CANCELLING.value}
)


class Build(AppVeyorModel):
    build_id: int | None = None
    build_number: int | None = None
    version: str = ""
    message: str = ""
    branch: str = ""
    is_tag: bool = False
    commit_id: str = ""
    author_name: str = ""
    committer_name: str = ""
    # Not an enum: AppVeyor may report values this package does not know.
    status: str = ""
    started: str | None = None
    finished: str | None = None
    created: str | None = None
    updated: str | None = None


class Project(AppVeyorModel):
    """An AppVeyor project, identified by ``account_name`` and ``slug``."""

    model_config = {**AppVeyorModel.model_config, "frozen": True}

    account_name: str = Field(min_length=1)
    slug: str = Field(min_length=1)
    project_id: int | None = None
    account_id: int | None = None
    name: str = ""
    repository_type: str | None = None
    repository_scm: str | None = None
    repository_name: str | None = None
    repository_branch: str | None = None
    is_private: bool | None = None
    builds: tuple[Build, ...] = ()

    def __str__(self) -> str:
        return f"{self.account_name}/{self.slug}"


class ProjectBuild(AppVeyorModel):
    """A project paired with its most recent build."""

    project: Project
    build: Build
