"""AppVeyor status exceptions."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models.projects import Build, Project


class ErrorKind(str, Enum):
    """Tag identifying which kind of failure an error represents."""

    CONFIGURATION = "configuration"
    AMBIGUOUS_PROJECT = "ambiguous_project"
    COMMIT_MISMATCH = "commit_mismatch"
    TRANSPORT = "transport"
    GIT = "git"


class AppVeyorStatusError(Exception):
    """Base exception for appveyor-status operations.

    Callers should branch on ``kind`` rather than on the concrete class.
    """

    kind: ErrorKind = ErrorKind.CONFIGURATION

    def __init__(self, message: str, *, kind: ErrorKind | None = None) -> None:
        if kind is not None:
            self.kind = kind
        super().__init__(message)


class ConfigurationError(AppVeyorStatusError):
    """Raised for missing, malformed, or conflicting options."""

    kind = ErrorKind.CONFIGURATION


class AmbiguousProjectError(AppVeyorStatusError):
    """Raised when more than one AppVeyor project matches a repository."""

    kind = ErrorKind.AMBIGUOUS_PROJECT

    def __init__(
        self,
        message: str = "Project not uniquely identified",
        projects: list[str] | None = None,
    ) -> None:
        self.projects = list(projects or [])
        super().__init__(message)


class CommitMismatchError(AppVeyorStatusError):
    """Raised when the last build is for a different commit than requested."""

    kind = ErrorKind.COMMIT_MISMATCH

    def __init__(
        self,
        actual: str,
        expected: str,
        message: str | None = None,
        *,
        build: Build | None = None,
        project: Project | None = None,
    ) -> None:
        self.actual = actual
        self.expected = expected
        self.build = build
        self.project = project
        super().__init__(message or f"Commit {actual} did not match {expected}")


class TransportError(AppVeyorStatusError):
    """Raised when a request to AppVeyor could not be completed."""

    kind = ErrorKind.TRANSPORT

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        self.cause = cause
        super().__init__(message)


class AppVeyorApiError(TransportError):
    """Raised when the AppVeyor API returns a non-success or unusable response."""

    def __init__(
        self, status_code: int, status_text: str, body: str = "", prefix: str = ""
    ) -> None:
        self.status_code = status_code
        self.status_text = status_text
        self.body = body
        message = f"{prefix}AppVeyor API Error {status_code} {status_text}"
        if body:
            message += f": {body}"
        super().__init__(message)


class AppVeyorAuthError(AppVeyorApiError):
    """Raised on 401/403 authentication failures."""

    def __init__(self, status_code: int, body: str = "", prefix: str = "") -> None:
        status_text = "Unauthorized" if status_code == 401 else "Forbidden"
        super().__init__(status_code, status_text, body, prefix)


class AppVeyorNotFoundError(AppVeyorApiError):
    """Raised on 404 responses."""

    def __init__(self, body: str = "", prefix: str = "") -> None:
        super().__init__(404, "Not Found", body, prefix)


class GitError(AppVeyorStatusError):
    """Raised when a git command fails."""

    kind = ErrorKind.GIT

    def __init__(self, message: str, command: str = "", stderr: str = "") -> None:
        self.command = command
        self.stderr = stderr
        super().__init__(message)


def error_details(error: BaseException) -> dict[str, Any]:
    """Describe an error as a dict of its kind-specific fields."""
    detail: dict[str, Any] = {"error": str(error)}
    if not isinstance(error, AppVeyorStatusError):
        return detail

    detail["kind"] = error.kind.value
    if error.kind is ErrorKind.AMBIGUOUS_PROJECT:
        detail["projects"] = error.projects
    elif error.kind is ErrorKind.COMMIT_MISMATCH:
        detail["actual"] = error.actual
        detail["expected"] = error.expected
    elif error.kind is ErrorKind.GIT:
        detail["command"] = error.command
        detail["stderr"] = error.stderr
    elif error.kind is ErrorKind.TRANSPORT and isinstance(error, AppVeyorApiError):
        detail["status_code"] = error.status_code
        detail["body"] = error.body
    return detail
