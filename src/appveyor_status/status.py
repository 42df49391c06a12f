"""Query the AppVeyor build status of a project, repository, or status badge."""

from __future__ import annotations

import re
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from dataclasses import replace
from typing import Any

from .backoff import exponential
from .client import AppVeyorClient
from .config import AppVeyorConfig
from .exceptions import CommitMismatchError, ConfigurationError, TransportError
from .logging_config import get_logger
from .models.projects import NON_TERMINAL_STATUSES, Build, BuildStatus, Project, ProjectBuild
from .repository import repo_url_to_badge_params
from .resolver import StatusOptions, canonicalize_options, find_matching_project
from .retry import (
    DEFAULT_INITIAL_WAIT_MS,
    DEFAULT_MAX_WAIT_MS,
    DEFAULT_MIN_WAIT_MS,
    RetryOptions,
    SystemClock,
    retry_async,
)

logger = get_logger(__name__)

__all__ = [
    "StatusOptions",
    "badge_to_status",
    "get_last_build",
    "get_status",
    "get_status_badge",
    "project_build_to_status",
    "should_retry_for_status",
]

# Matches any known status as a whole word
_STATUS_RE = re.compile(
    r"\b(" + "|".join(re.escape(status.value) for status in BuildStatus) + r")(?!\w)",
    re.IGNORECASE,
)


def should_retry_for_status(status: str) -> bool:
    """Return True if a build with *status* may still change and is worth polling."""
    return status in NON_TERMINAL_STATUSES


def project_build_to_status(project_build: ProjectBuild) -> str:
    return project_build.build.status


def badge_to_status(badge: str) -> str:
    """Extract the build status from the text of an SVG status badge.

    Raises TransportError unless exactly one distinct status appears.
    """
    if not isinstance(badge, str):
        msg = f"badge must be a string, got {type(badge).__name__}"
        raise TypeError(msg)

    statuses = list(dict.fromkeys(m.group(1).lower() for m in _STATUS_RE.finditer(badge)))
    if not statuses:
        raise TransportError("Status not found in badge")
    if len(statuses) > 1:
        raise TransportError(f"Badge contained multiple statuses: {', '.join(statuses)}")
    return statuses[0]


@asynccontextmanager
async def _open_client(options: StatusOptions) -> AsyncIterator[AppVeyorClient]:
    """Yield the caller's client, or one created (and closed) for this call."""
    if options.client is not None:
        yield options.client
        return

    config = options.config or AppVeyorConfig.from_env()
    if options.token is not None:
        config = replace(config, token=options.token)
    async with AppVeyorClient(config, http_client=options.http_client) as client:
        yield client


# ════════════════════════════════════════════════════════════════════
# Last build
# ════════════════════════════════════════════════════════════════════


def _listed_build(project: Project, branch: str | None) -> Build | None:
    """The build included in a project listing, if it is for *branch*."""
    return next((b for b in project.builds if not branch or b.branch == branch), None)


def _log_wait(options: StatusOptions, status: str, delay: float) -> None:
    if options.verbosity > 0:
        logger.debug(
            "AppVeyor build pending, waiting before retrying",
            status=status,
            seconds=delay / 1000,
        )


async def _poll_last_build(
    client: AppVeyorClient, options: StatusOptions, project: Project
) -> ProjectBuild:
    """Fetch the last build of *project*, polling while it is pending if requested."""
    last_status = ""

    async def fetch() -> ProjectBuild:
        nonlocal last_status
        project_build = await client.get_project_last_build(
            project.account_name, project.slug, options.branch
        )
        last_status = project_build.build.status
        return project_build

    if not options.wait:
        return await fetch()

    retry_options = RetryOptions(
        wait_ms=exponential(2, DEFAULT_INITIAL_WAIT_MS, DEFAULT_MAX_WAIT_MS),
        max_total_ms=options.wait,
        min_wait_ms=DEFAULT_MIN_WAIT_MS,
        should_retry=lambda project_build: should_retry_for_status(project_build.build.status),
        clock=options.clock or SystemClock(),
        on_wait=lambda delay: _log_wait(options, last_status, delay),
    )
    return await retry_async(fetch, retry_options)


async def _last_build_for_repo(client: AppVeyorClient, options: StatusOptions) -> ProjectBuild:
    project = await find_matching_project(client, options.repo)

    # The listing's build answers unless it is pending and waiting was requested
    build = _listed_build(project, options.branch)
    if build is not None:
        if not options.wait or not should_retry_for_status(build.status):
            return ProjectBuild(project=project, build=build)
        _log_wait(options, build.status, DEFAULT_MIN_WAIT_MS)
        await (options.clock or SystemClock()).sleep(DEFAULT_MIN_WAIT_MS)

    return await _poll_last_build(client, options, project)


async def _get_last_build(client: AppVeyorClient, options: StatusOptions) -> ProjectBuild:
    if isinstance(options.project, Project):
        project_build = await _poll_last_build(client, options, options.project)
    elif options.repo:
        project_build = await _last_build_for_repo(client, options)
    else:
        msg = "project or repo is required"
        raise ConfigurationError(msg)

    commit_id = project_build.build.commit_id
    if options.commit and commit_id.lower() != options.commit:
        raise CommitMismatchError(
            actual=commit_id,
            expected=options.commit,
            build=project_build.build,
            project=project_build.project,
        )

    return project_build


async def get_last_build(
    options: StatusOptions | Mapping[str, Any] | None = None,
) -> ProjectBuild:
    """Get the last AppVeyor build for a project, repository, or branch.

    Raises AmbiguousProjectError if the repository matches several projects
    and CommitMismatchError if the build is not for ``options.commit``.
    """
    opts = await canonicalize_options(options)
    async with _open_client(opts) as client:
        return await _get_last_build(client, opts)


# ════════════════════════════════════════════════════════════════════
# Status badges
# ════════════════════════════════════════════════════════════════════


async def _get_status_badge(client: AppVeyorClient, options: StatusOptions) -> str:
    if options.project is not None:
        msg = (
            "project is not supported for status badges"
            " (use repo, status_badge_id, or webhook_id)"
        )
        raise ConfigurationError(msg)

    badge_id = options.status_badge_id or options.webhook_id
    if badge_id:
        return await client.get_status_badge(badge_id, options.branch)
    if options.repo:
        badge = repo_url_to_badge_params("git", options.repo)
        return await client.get_public_status_badge(badge, options.branch)

    msg = "repo, status_badge_id, or webhook_id is required"
    raise ConfigurationError(msg)


async def get_status_badge(options: StatusOptions | Mapping[str, Any] | None = None) -> str:
    """Get the SVG status badge for a repository or status badge ID.

    Badges need no authentication. ``project`` and ``commit`` are not supported.
    """
    opts = await canonicalize_options(options)
    async with _open_client(opts) as client:
        return await _get_status_badge(client, opts)


# ════════════════════════════════════════════════════════════════════
# Status
# ════════════════════════════════════════════════════════════════════


async def get_status(options: StatusOptions | Mapping[str, Any] | None = None) -> str:
    """Get the current AppVeyor build status for the project named by *options*.

    Uses the last build when the project is known or the commit must be
    checked, and the status badge (a single unauthenticated request) otherwise.
    """
    opts = await canonicalize_options(options)
    async with _open_client(opts) as client:
        if opts.commit or opts.project is not None:
            return project_build_to_status(await _get_last_build(client, opts))
        return badge_to_status(await _get_status_badge(client, opts))
