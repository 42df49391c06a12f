"""Tests for local git queries."""

from __future__ import annotations

import asyncio
import shutil
from unittest.mock import patch

import pytest

from appveyor_status.exceptions import ErrorKind, GitError
from appveyor_status.git import Git


class FakeProcess:
    def __init__(self, stdout: str = "", stderr: str = "", returncode: int = 0, delay: float = 0):
        self._stdout = stdout.encode()
        self._stderr = stderr.encode()
        self.returncode = returncode
        self.delay = delay
        self.killed = False
        self.waited = False

    async def communicate(self):
        if self.delay:
            await asyncio.sleep(self.delay)
        return self._stdout, self._stderr

    def kill(self):
        self.killed = True

    async def wait(self):
        self.waited = True
        return self.returncode


def _patch_exec(*processes):
    return patch(
        "appveyor_status.git.asyncio.create_subprocess_exec",
        side_effect=list(processes),
    )


class TestRun:
    async def test_returns_stripped_stdout(self):
        with _patch_exec(FakeProcess("main\n")) as mock_exec:
            assert await Git("/repo").get_branch() == "main"
        args, kwargs = mock_exec.call_args
        assert args == ("git", "symbolic-ref", "-q", "--short", "HEAD")
        assert kwargs["cwd"] == "/repo"

    async def test_default_cwd(self):
        with _patch_exec(FakeProcess("abc")) as mock_exec:
            await Git().resolve_commit("HEAD")
        assert mock_exec.call_args.kwargs["cwd"] is None

    async def test_nonzero_exit(self):
        process = FakeProcess(stderr="fatal: bad revision", returncode=128)
        with _patch_exec(process), pytest.raises(GitError) as exc_info:
            await Git().resolve_commit("nope")
        e = exc_info.value
        assert e.kind is ErrorKind.GIT
        assert e.command == "git rev-parse --verify nope"
        assert e.stderr == "fatal: bad revision"
        assert "exit 128" in str(e)

    async def test_git_not_installed(self):
        with patch(
            "appveyor_status.git.asyncio.create_subprocess_exec",
            side_effect=FileNotFoundError("git"),
        ), pytest.raises(GitError, match="Unable to run git"):
            await Git().resolve_commit("HEAD")

    async def test_timeout_kills_process(self):
        process = FakeProcess("late", delay=1)
        with _patch_exec(process), pytest.raises(GitError, match="timed out"):
            await Git(timeout=0.01).resolve_commit("HEAD")
        assert process.killed
        assert process.waited


class TestQueries:
    async def test_get_branch_failure(self):
        process = FakeProcess(returncode=1)
        with _patch_exec(process), pytest.raises(GitError, match="current branch"):
            await Git().get_branch()

    async def test_get_remote(self):
        with _patch_exec(FakeProcess("upstream\n")) as mock_exec:
            assert await Git().get_remote("topic") == "upstream"
        assert mock_exec.call_args.args == ("git", "config", "--get", "branch.topic.remote")

    async def test_get_remote_url(self):
        url = "https://github.com/owner/repo.git"
        with _patch_exec(FakeProcess(url + "\n")) as mock_exec:
            assert await Git().get_remote_url("origin") == url
        assert mock_exec.call_args.args == ("git", "ls-remote", "--get-url", "origin")

    async def test_get_remote_url_default(self):
        with _patch_exec(FakeProcess("git://x/y")) as mock_exec:
            assert await Git().get_remote_url() == "git://x/y"
        assert mock_exec.call_args.args == ("git", "ls-remote", "--get-url")

    async def test_get_remote_url_unknown_remote(self):
        with _patch_exec(FakeProcess("nosuch\n")), pytest.raises(GitError, match="No URL"):
            await Git().get_remote_url("nosuch")

    async def test_resolve_commit(self):
        sha = "a" * 40
        with _patch_exec(FakeProcess(sha)) as mock_exec:
            assert await Git().resolve_commit("HEAD~1") == sha
        assert mock_exec.call_args.args == ("git", "rev-parse", "--verify", "HEAD~1")


@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
async def test_real_repository(tmp_path):
    git = Git(tmp_path)
    await git._run("init", "-q")
    await git._run("symbolic-ref", "HEAD", "refs/heads/topic")
    assert await git.get_branch() == "topic"
    with pytest.raises(GitError):
        await git.resolve_commit("HEAD")
