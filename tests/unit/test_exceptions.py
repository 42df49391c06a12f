"""Tests for exceptions."""

from appveyor_status.exceptions import (
    AmbiguousProjectError,
    AppVeyorApiError,
    AppVeyorAuthError,
    AppVeyorNotFoundError,
    AppVeyorStatusError,
    CommitMismatchError,
    ConfigurationError,
    ErrorKind,
    GitError,
    TransportError,
    error_details,
)


def test_api_error():
    e = AppVeyorApiError(500, "Internal Server Error", "something broke")
    assert e.status_code == 500
    assert e.kind is ErrorKind.TRANSPORT
    assert "500" in str(e)
    assert "something broke" in str(e)


def test_api_error_prefix():
    e = AppVeyorApiError(502, "Bad Gateway", prefix="Unable to get projects: ")
    assert str(e) == "Unable to get projects: AppVeyor API Error 502 Bad Gateway"


def test_auth_error_401():
    e = AppVeyorAuthError(401)
    assert e.status_code == 401
    assert "Unauthorized" in str(e)


def test_auth_error_403():
    e = AppVeyorAuthError(403)
    assert e.status_code == 403
    assert "Forbidden" in str(e)


def test_not_found_error():
    e = AppVeyorNotFoundError("resource not found")
    assert e.status_code == 404
    assert isinstance(e, TransportError)


def test_configuration_error_kind():
    e = ConfigurationError("bad option")
    assert e.kind is ErrorKind.CONFIGURATION
    assert isinstance(e, AppVeyorStatusError)


def test_kind_override():
    e = AppVeyorStatusError("oops", kind=ErrorKind.GIT)
    assert e.kind is ErrorKind.GIT
    assert AppVeyorStatusError.kind is ErrorKind.CONFIGURATION


def test_ambiguous_project_default_message():
    e = AmbiguousProjectError(projects=["a/b", "c/d"])
    assert e.kind is ErrorKind.AMBIGUOUS_PROJECT
    assert e.projects == ["a/b", "c/d"]
    assert str(e) == "Project not uniquely identified"


def test_commit_mismatch():
    e = CommitMismatchError("abc", "def")
    assert e.kind is ErrorKind.COMMIT_MISMATCH
    assert e.actual == "abc"
    assert e.expected == "def"
    assert str(e) == "Commit abc did not match def"


def test_transport_error_cause():
    cause = OSError("connection reset")
    e = TransportError("request failed", cause)
    assert e.cause is cause


def test_error_details_commit_mismatch():
    details = error_details(CommitMismatchError("abc", "def"))
    assert details == {
        "error": "Commit abc did not match def",
        "kind": "commit_mismatch",
        "actual": "abc",
        "expected": "def",
    }


def test_error_details_git():
    details = error_details(GitError("failed", command="git status", stderr="fatal"))
    assert details["kind"] == "git"
    assert details["command"] == "git status"
    assert details["stderr"] == "fatal"


def test_error_details_api():
    details = error_details(AppVeyorNotFoundError("gone"))
    assert details["status_code"] == 404
    assert details["body"] == "gone"


def test_error_details_other_exception():
    assert error_details(ValueError("nope")) == {"error": "nope"}
