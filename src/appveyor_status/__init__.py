"""Report the AppVeyor build status of a repository, branch, or commit."""

from __future__ import annotations

import asyncio
import math
from enum import IntEnum
from typing import IO

import click
from dotenv import load_dotenv

__version__ = "0.1.0"


class ExitCode(IntEnum):
    SUCCESS = 0
    FAIL_OTHER = 1
    FAIL_STATUS = 2
    FAIL_COMMIT = 3
    FAIL_ARGUMENTS = 4


STATUS_COLORS = {
    "failed": "red",
    "success": "green",
}


def _arguments_error(message: str, ctx: click.Context | None = None) -> click.UsageError:
    error = click.UsageError(message, ctx)
    error.exit_code = ExitCode.FAIL_ARGUMENTS
    return error


class StatusCommand(click.Command):
    """Command which reports argument errors with ExitCode.FAIL_ARGUMENTS."""

    def make_context(self, *args, **kwargs) -> click.Context:
        try:
            return super().make_context(*args, **kwargs)
        except click.UsageError as e:
            e.exit_code = ExitCode.FAIL_ARGUMENTS
            raise


@click.command(cls=StatusCommand, context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--badge",
    "-B",
    "status_badge_id",
    help="Status badge ID of project (from badge URL, exclusive with commit)",
)
@click.option(
    "--branch",
    "-b",
    is_flag=False,
    flag_value="",
    default=None,
    help="Query latest build for a branch (default: current branch)",
)
@click.option("--color/--no-color", default=None, help="Colorize the output (default: if TTY)")
@click.option(
    "--commit",
    "-c",
    is_flag=False,
    flag_value="HEAD",
    default=None,
    help="Require build to be for named commit (default: HEAD; requires project or token)",
)
@click.option("--project", "-p", help="AppVeyor project to query (as ACCOUNT/SLUG)")
@click.option("--quiet", "-q", count=True, help="Print less output")
@click.option("--repo", "-r", help="Repository to query (URL or path, default: .)")
@click.option("--token", "-t", help="API access token (default: $APPVEYOR_API_TOKEN)")
@click.option(
    "--token-file",
    "-T",
    type=click.File("r"),
    help="File containing API access token ('-' for stdin)",
)
@click.option("--verbose", "-v", count=True, help="Print more output")
@click.option(
    "--wait",
    "-w",
    type=float,
    is_flag=False,
    flag_value=math.inf,
    default=None,
    help="Wait if build is pending (timeout in seconds, default: forever)",
)
@click.option("--webhook", "-W", "webhook_id", hidden=True)
@click.version_option(__version__, "--version", "-V", prog_name="appveyor-status")
@click.pass_context
def main(
    ctx: click.Context,
    status_badge_id: str | None,
    branch: str | None,
    color: bool | None,
    commit: str | None,
    project: str | None,
    quiet: int,
    repo: str | None,
    token: str | None,
    token_file: IO[str] | None,
    verbose: int,
    wait: float | None,
    webhook_id: str | None,
) -> None:
    """Report the AppVeyor build status of a repository, branch, or commit."""
    load_dotenv()

    from .config import AppVeyorConfig
    from .exceptions import AppVeyorStatusError, ErrorKind, error_details
    from .logging_config import configure_logging, get_logger
    from .status import StatusOptions, get_status

    verbosity = verbose - quiet
    configure_logging(verbosity, colors=bool(color))

    if token is not None and token_file is not None:
        raise _arguments_error("--token and --token-file can not be specified together", ctx)
    if wait is not None and (math.isnan(wait) or wait < 0):
        raise _arguments_error(f"Invalid wait {wait}: must be a non-negative number", ctx)

    try:
        if token_file is not None:
            token = token_file.read().strip()
        config = AppVeyorConfig.from_env()
        options = StatusOptions(
            project=project,
            repo=repo,
            status_badge_id=status_badge_id,
            webhook_id=webhook_id,
            # A bare --branch means the current branch
            branch=True if branch == "" else branch,
            commit=commit,
            token=token or config.token or None,
            wait=None if wait is None else wait * 1000,
            verbosity=verbosity,
            config=config,
        )
        status = asyncio.run(get_status(options))
    except AppVeyorStatusError as e:
        if verbosity > 0:
            get_logger(__name__).debug("Status query failed", **error_details(e))
        if e.kind is ErrorKind.COMMIT_MISMATCH:
            expected = commit
            if commit != e.expected:
                expected = f"{commit} ({e.expected})"
            click.echo(f"Error: Last build commit {e.actual} did not match {expected}", err=True)
            ctx.exit(ExitCode.FAIL_COMMIT)
        click.echo(f"Error: {e}", err=True)
        ctx.exit(ExitCode.FAIL_OTHER)
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(ExitCode.FAIL_OTHER)

    if verbosity >= 0:
        fg = STATUS_COLORS.get(status)
        styled = click.style(status, fg=fg) if fg else status
        click.echo(f"AppVeyor build status: {styled}", color=color)

    ctx.exit(ExitCode.SUCCESS if status == "success" else ExitCode.FAIL_STATUS)


if __name__ == "__main__":
    main()
