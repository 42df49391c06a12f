"""Builders for AppVeyor API response bodies used in tests."""

from __future__ import annotations

from typing import Any

TEST_COMMIT = "123098123a941928301820ef938ab2c123572909"

BADGE_TEMPLATE = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="106" height="20">'
    '<g fill="#fff" text-anchor="middle" font-size="11">'
    '<text x="32.5" y="14">build</text><text x="83.5" y="14">{status}</text>'
    "</g></svg>"
)


def make_build(**overrides: Any) -> dict[str, Any]:
    build = {
        "buildId": 9876543,
        "buildNumber": 63,
        "version": "0.0.63",
        "message": "test commit message",
        "branch": "master",
        "isTag": False,
        "commitId": TEST_COMMIT,
        "authorName": "Test Author",
        "status": "success",
        "started": "2016-11-16T20:42:09.2109847+00:00",
        "finished": "2016-11-16T20:42:59.486954+00:00",
    }
    build.update(overrides)
    return build


def make_project(
    account_name: str = "test-account",
    slug: str = "test-proj",
    builds: list[dict[str, Any]] | None = None,
    **overrides: Any,
) -> dict[str, Any]:
    project = {
        "projectId": 12345,
        "accountId": 6789,
        "accountName": account_name,
        "slug": slug,
        "name": "Test Project",
        "repositoryType": "gitHub",
        "repositoryScm": "git",
        "repositoryName": f"{account_name}/{slug}",
        "repositoryBranch": "master",
        "isPrivate": False,
        "builds": builds if builds is not None else [make_build()],
    }
    project.update(overrides)
    return project


def make_project_build(
    account_name: str = "test-account", slug: str = "test-proj", **build: Any
) -> dict[str, Any]:
    return {
        "project": make_project(account_name, slug, builds=[]),
        "build": make_build(**build),
    }


def make_badge(status: str) -> str:
    return BADGE_TEMPLATE.format(status=status)
