"""Resolve caller options to the AppVeyor project, branch, and commit to query."""

from __future__ import annotations

import asyncio
import json
import math
import re
from collections.abc import Mapping
from dataclasses import dataclass, replace
from numbers import Real
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from .exceptions import AmbiguousProjectError, ConfigurationError, GitError
from .git import Git
from .logging_config import get_logger
from .models.projects import Project
from .repository import (
    git_url_is_local_not_ssh,
    parse_provider_repo_url,
    project_from_string,
    project_to_string,
)

if TYPE_CHECKING:
    import httpx

    from .client import AppVeyorClient
    from .config import AppVeyorConfig
    from .retry import Clock

logger = get_logger(__name__)

# Options which each identify the project on their own
IDENTITY_OPTIONS = ("project", "repo", "status_badge_id", "webhook_id")

_COMMIT_HASH_RE = re.compile(r"[0-9a-fA-F]{40}")


@dataclass
class StatusOptions:
    """Options accepted by the status query functions.

    At most one of ``project``, ``repo``, ``status_badge_id`` and
    ``webhook_id`` may be given; with none, ``repo`` defaults to the
    working copy in the current directory.

    ``branch`` is a branch name, or ``True`` for the current branch.
    ``commit`` is a commit hash or any name git can resolve in ``repo``.
    ``wait`` is how long, in milliseconds, to poll while the build is
    pending (``True`` waits indefinitely).
    ``client`` and ``http_client`` are never closed when supplied.
    """

    project: str | Project | Mapping[str, Any] | None = None
    repo: str | None = None
    status_badge_id: str | None = None
    webhook_id: str | None = None
    branch: str | bool | None = None
    commit: str | None = None
    token: str | None = None
    wait: float | bool | None = None
    verbosity: int = 0
    client: AppVeyorClient | None = None
    http_client: httpx.AsyncClient | None = None
    config: AppVeyorConfig | None = None
    git: Git | None = None
    clock: Clock | None = None


def _coerce_options(options: StatusOptions | Mapping[str, Any] | None) -> StatusOptions:
    if options is None:
        return StatusOptions()
    if isinstance(options, StatusOptions):
        return options
    if isinstance(options, Mapping):
        return StatusOptions(**options)
    msg = f"options must be StatusOptions or a mapping, got {type(options).__name__}"
    raise TypeError(msg)


def _canonical_wait(wait: Any) -> float:
    if wait is True:
        return math.inf
    if wait is None or wait is False:
        return 0.0
    if not isinstance(wait, Real) or math.isnan(wait):
        msg = f"wait must be a number, got {wait!r}"
        raise TypeError(msg)
    if wait < 0:
        msg = "wait must be non-negative"
        raise ValueError(msg)
    return float(wait)


def _canonical_project(project: Any) -> Project | None:
    if project is None or isinstance(project, Project):
        return project
    if isinstance(project, str):
        return project_from_string(project)
    if isinstance(project, Mapping):
        try:
            return Project.model_validate(project)
        except ValidationError as e:
            msg = "project must have account_name and slug"
            raise ConfigurationError(msg) from e
    msg = f"project must be a string or Project, got {type(project).__name__}"
    raise ConfigurationError(msg)


async def _resolve_commit(git: Git, commit: str) -> str:
    if _COMMIT_HASH_RE.fullmatch(commit):
        return commit.lower()
    return (await git.resolve_commit(commit)).lower()


async def _resolve_remote_url(git: Git, branch: str | None, verbosity: int) -> str:
    """URL of the upstream remote of *branch* (or the current branch), else origin."""
    try:
        remote_branch = branch or await git.get_branch()
        remote = await git.get_remote(remote_branch)
    except GitError as e:
        if verbosity > 0:
            logger.debug("Unable to get remote, will try to use origin remote", error=str(e))
        remote = "origin"
    return await git.get_remote_url(remote)


async def _noop(value: Any) -> Any:
    return value


async def _gather_or_cancel(*coros: Any) -> list[Any]:
    """Run *coros* concurrently; if one fails, cancel and await the rest."""
    tasks = [asyncio.ensure_future(coro) for coro in coros]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def canonicalize_options(
    options: StatusOptions | Mapping[str, Any] | None,
) -> StatusOptions:
    """Check caller options and resolve them against the local git repository.

    Returns a new :class:`StatusOptions` with ``project`` as a
    :class:`Project`, ``wait`` in milliseconds, ``commit`` as a lower-case
    hash, and a local ``repo`` replaced by its remote URL.
    """
    options = _coerce_options(options)

    given = [name for name in IDENTITY_OPTIONS if getattr(options, name)]
    if len(given) > 1:
        msg = f"{' and '.join(given)} can not be specified together"
        raise ConfigurationError(msg)

    wait = _canonical_wait(options.wait)
    project = _canonical_project(options.project)

    repo = options.repo
    git = options.git
    if git is None:
        git = Git(repo if repo and git_url_is_local_not_ssh(repo) else None)

    if not given:
        repo = "."

    if options.branch is True:
        branch = await git.get_branch()
    elif options.branch:
        branch = str(options.branch)
    else:
        branch = None

    commit_coro = _resolve_commit(git, options.commit) if options.commit else _noop(None)
    if repo and git_url_is_local_not_ssh(repo):
        repo_coro = _resolve_remote_url(git, branch, options.verbosity)
    else:
        repo_coro = _noop(repo)
    commit, repo = await _gather_or_cancel(commit_coro, repo_coro)

    return replace(
        options,
        project=project,
        repo=repo,
        branch=branch,
        commit=commit,
        wait=wait,
        git=git,
    )


async def find_matching_project(
    client: AppVeyorClient, repo_url: str, scm: str = "git"
) -> Project:
    """Find the single AppVeyor project built from *repo_url*.

    Raises ConfigurationError if no project matches and
    AmbiguousProjectError if more than one does.
    """
    # Parse before the request so a bad URL fails fast
    identity = parse_provider_repo_url(scm, repo_url)
    identity_str = json.dumps(identity.to_dict())

    projects = await client.list_projects()
    matching = [project for project in projects if identity.matches(project)]

    if not matching:
        msg = f"No AppVeyor projects matching {identity_str}"
        raise ConfigurationError(msg)
    if len(matching) > 1:
        names = [project_to_string(project) for project in matching]
        msg = f"Multiple AppVeyor projects matching {identity_str}: {', '.join(names)}"
        raise AmbiguousProjectError(msg, names)

    return matching[0]
