"""Queries against a local git working copy."""

from __future__ import annotations

import asyncio
from pathlib import Path

from .exceptions import GitError


class Git:
    """Runs read-only git commands in ``cwd`` (default: the current directory)."""

    def __init__(self, cwd: str | Path | None = None, timeout: float = 30.0) -> None:
        self.cwd = cwd
        self.timeout = timeout

    async def _run(self, *args: str) -> str:
        """Run a git command and return its stripped stdout.

        Raises GitError if the command can not be run or exits non-zero.
        """
        cmd = ["git", *args]
        cmd_str = " ".join(cmd)
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(self.cwd) if self.cwd else None,
            )
        except OSError as e:
            raise GitError(f"Unable to run {cmd_str}: {e}", command=cmd_str) from e

        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise GitError(
                f"Git command timed out after {self.timeout}s: {cmd_str}",
                command=cmd_str,
            ) from None

        stdout = stdout_bytes.decode("utf-8", errors="replace").strip()
        stderr = stderr_bytes.decode("utf-8", errors="replace").strip()

        if process.returncode != 0:
            message = f"Git command failed (exit {process.returncode}): {cmd_str}"
            if stderr:
                message += f"\n{stderr}"
            raise GitError(message, command=cmd_str, stderr=stderr)

        return stdout

    async def get_branch(self) -> str:
        """Name of the current branch. Fails on a detached HEAD or outside a repository."""
        try:
            return await self._run("symbolic-ref", "-q", "--short", "HEAD")
        except GitError as e:
            raise GitError(
                f"Unable to determine current branch: {e}", command=e.command, stderr=e.stderr
            ) from e

    async def get_remote(self, branch: str) -> str:
        """Name of the upstream remote configured for *branch*."""
        return await self._run("config", "--get", f"branch.{branch}.remote")

    async def get_remote_url(self, remote: str | None = None) -> str:
        """URL of *remote*, or of the default remote as chosen by ``git ls-remote``."""
        args = ["ls-remote", "--get-url"]
        if remote:
            args.append(remote)
        url = await self._run(*args)
        # ls-remote prints its argument back when it has no URL for it
        if remote and url == remote:
            raise GitError(f"No URL for {remote} remote", command=f"git {' '.join(args)}")
        return url

    async def resolve_commit(self, name: str) -> str:
        """Full hash of the commit named by *name*."""
        return await self._run("rev-parse", "--verify", name)
