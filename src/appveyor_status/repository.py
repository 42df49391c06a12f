"""Repository URL parsing and mapping to AppVeyor repository identities."""

from __future__ import annotations

import os
import re
from pathlib import Path
from urllib.parse import urlsplit

from .exceptions import ConfigurationError
from .models.projects import Project
from .models.repository import BadgeParams, ParsedGitUrl, RepoIdentity

_IS_WINDOWS = os.name == "nt"

# ════════════════════════════════════════════════════════════════════
# Git URL parsing
# ════════════════════════════════════════════════════════════════════

# Matches:  <scheme>:...  before any "/"  (url_is_local_not_ssh in git's connect.c)
_HAS_SCHEME_RE = re.compile(r"^[^/]*:")
_DRIVE_RE = re.compile(r"^[A-Za-z]:")
# Matches:  <helper>::<address>  (transport_get in git's transport.c)
_HELPER_RE = re.compile(r"^([A-Za-z0-9][A-Za-z0-9+.-]*)::(.*)$", re.DOTALL)
# Matches:  <user>@<host>:<path>  where host may be wrapped in [] to disambiguate
_SCP_RE = re.compile(r"^([^@/]+@(?:\[[^\]/]+\]|[^:/]+)):(.*)$", re.DOTALL)


def git_url_is_local_not_ssh(git_url: str) -> bool:
    """Return True if *git_url* names a local path rather than a remote URL."""
    return not _HAS_SCHEME_RE.match(git_url) or bool(_IS_WINDOWS and _DRIVE_RE.match(git_url))


def parse_git_url(git_url: str) -> ParsedGitUrl:
    """Parse a git URL, including remote helpers, SCP-like syntax, and local paths.

    Local paths become ``file://`` URLs of the absolute path.

    Raises ValueError if *git_url* can not be parsed as a URL.
    """
    if git_url_is_local_not_ssh(git_url):
        file_url = Path(os.path.abspath(git_url)).as_uri()
        return _split(file_url, None)

    helper = None
    m = _HELPER_RE.match(git_url)
    if m:
        helper, git_url = m.group(1), m.group(2)

    m = _SCP_RE.match(git_url)
    if m:
        git_url = f"ssh://{m.group(1)}/{m.group(2)}"

    return _split(git_url, helper)


def _split(url: str, helper: str | None) -> ParsedGitUrl:
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError as e:
        msg = f"Invalid git URL {url!r}: {e}"
        raise ValueError(msg) from e
    if not parts.scheme:
        msg = f"Invalid git URL {url!r}: missing scheme"
        raise ValueError(msg)

    return ParsedGitUrl(
        scheme=parts.scheme,
        netloc=parts.netloc,
        username=parts.username,
        password=parts.password,
        hostname=parts.hostname or "",
        port=port,
        path=parts.path,
        query=parts.query,
        fragment=parts.fragment,
        helper=helper,
    )


# ════════════════════════════════════════════════════════════════════
# AppVeyor repository identities
# ════════════════════════════════════════════════════════════════════

_HOST_PROVIDERS = {
    "bitbucket.org": "bitBucket",
    "github.com": "gitHub",
    "gitlab.com": "gitLab",
}

# Providers accepted by the public repository status badge endpoint
BADGE_PROVIDERS = ("bitBucket", "gitHub")

_VSO_HOST_RE = re.compile(r"^([^.]+)\.visualstudio\.com$", re.IGNORECASE)
# Matches:  [/<project>]/_git/<repo>
_VSO_PATH_RE = re.compile(r"^(?:/([^/]+))?/_git/([^/]+)$")
_GIT_EXT_RE = re.compile(r"\.git$")


def parse_provider_repo_url(scm: str, repo_url: str) -> RepoIdentity:
    """Map a repository URL to the repository properties of an AppVeyor project."""
    if scm != "git":
        return RepoIdentity(scm=scm, provider_type=scm, repository_name=repo_url)

    parsed = parse_git_url(repo_url)
    hostname = parsed.hostname.lower()
    path = _GIT_EXT_RE.sub("", parsed.path)

    provider = _HOST_PROVIDERS.get(hostname)
    if provider:
        return RepoIdentity(scm=scm, provider_type=provider, repository_name=path[1:])

    host_m = _VSO_HOST_RE.match(hostname)
    path_m = _VSO_PATH_RE.match(path)
    if host_m and path_m:
        account = host_m.group(1)
        repo = path_m.group(2)
        project = path_m.group(1) or repo
        return RepoIdentity(
            scm=scm,
            provider_type="vso",
            repository_name=f"git/{account}/{project}/{repo}",
        )

    return RepoIdentity(scm=scm, provider_type=scm, repository_name=repo_url)


def repo_url_to_badge_params(scm: str, repo_url: str) -> BadgeParams:
    """Build public status badge parameters for a repository URL.

    Raises ConfigurationError if the repository can not have a public badge.
    """
    identity = parse_provider_repo_url(scm, repo_url)
    if identity.provider_type not in BADGE_PROVIDERS:
        msg = (
            f"Repo status badges only supported for {', '.join(BADGE_PROVIDERS)}"
            f" not {identity.provider_type}"
        )
        raise ConfigurationError(msg)

    parts = identity.repository_name.split("/")
    if len(parts) != 2:
        msg = (
            f"Badge requires repo with 2 path parts.  Found {len(parts)}:"
            f" {identity.repository_name}"
        )
        raise ConfigurationError(msg)

    return BadgeParams(provider=identity.provider_type, account_name=parts[0], slug=parts[1])


def project_from_string(project_str: str) -> Project:
    """Parse ``"{account_name}/{slug}"`` into a :class:`Project`."""
    if not isinstance(project_str, str):
        msg = f"project must be a string, got {type(project_str).__name__}"
        raise ConfigurationError(msg)
    parts = project_str.split("/")
    if len(parts) != 2:
        msg = f'Invalid project "{project_str}": Must have one "/"'
        raise ConfigurationError(msg)
    if not all(parts):
        msg = f'Invalid project "{project_str}": account name and slug are required'
        raise ConfigurationError(msg)
    return Project(account_name=parts[0], slug=parts[1])


def project_to_string(project: Project) -> str:
    return f"{project.account_name}/{project.slug}"
