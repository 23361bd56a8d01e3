"""Run git commands in the watched repository (current branch, remote URL).

Owner and repository name are parsed from the remote URL once at
startup; the branch is read again on every poll.
"""

import logging
import re
import subprocess
from pathlib import Path


class GitRunnerError(Exception):
    """Raised when a git command fails."""

    pass


class IdentityError(Exception):
    """Raised when the repository or environment identity cannot be resolved."""

    pass


# Everything after the host: git@github.com:o/r.git, ssh://git@github.com/o/r, https://github.com/o/r.git
_REMOTE_PATH_RE = re.compile(r"^(?:[a-z][a-z0-9+.-]*://)?(?:[^@/]+@)?[^:/]+(?::\d+)?[:/](?P<path>.+)$", re.IGNORECASE)


def _run_git(args: list[str], cwd: Path, log: logging.Logger | None = None) -> str:
    """Run git command and return stripped stdout; raise GitRunnerError on failure."""
    cmd = ["git"] + args
    try:
        res = subprocess.run(cmd, cwd=cwd, check=True, capture_output=True, text=True, timeout=30)
    except subprocess.CalledProcessError as e:
        err = (e.stderr or e.stdout or "").strip()
        if log:
            log.debug("Git %s failed: %s", args, err)
        raise GitRunnerError(f"git {' '.join(args)}: {err}") from e
    except subprocess.TimeoutExpired as e:
        raise GitRunnerError(f"git {' '.join(args)}: timed out") from e
    except FileNotFoundError as e:
        raise GitRunnerError("git not found") from e
    return res.stdout.strip()


def get_current_branch(
    repo_dir: Path | None = None,
    log: logging.Logger | None = None,
) -> str | None:
    """Return the checked-out branch, or None on detached HEAD or git failure."""
    cwd = Path(repo_dir) if repo_dir is not None else Path.cwd()
    try:
        branch = _run_git(["branch", "--show-current"], cwd=cwd, log=log)
    except GitRunnerError as e:
        if log:
            log.debug("Cannot read current branch: %s", e)
        return None
    return branch or None


def get_remote_url(
    remote: str = "origin",
    repo_dir: Path | None = None,
    log: logging.Logger | None = None,
) -> str:
    """Return the URL configured for `remote`."""
    cwd = Path(repo_dir) if repo_dir is not None else Path.cwd()
    return _run_git(["remote", "get-url", remote], cwd=cwd, log=log)


def parse_owner_repo(url: str) -> tuple[str, str]:
    """Extract (owner, repo) from a git remote URL.

    Takes the path after the host, strips a trailing ".git" and slashes.
    Owner is the first path segment, repo the last.

    Raises:
        ValueError: If the URL has no path or owner/repo would be empty.
    """
    match = _REMOTE_PATH_RE.match(url.strip())
    if not match:
        raise ValueError(f"Cannot parse remote URL: {url!r}")
    path = match.group("path").strip("/")
    if path.endswith(".git"):
        path = path[: -len(".git")]
    parts = [p for p in path.split("/") if p]
    if len(parts) < 2:
        raise ValueError(f"Remote URL has no owner/repo path: {url!r}")
    return parts[0], parts[-1]


def resolve_owner_repo(
    remote: str = "origin",
    repo_dir: Path | None = None,
    log: logging.Logger | None = None,
) -> tuple[str, str]:
    """Resolve (owner, repo) from the remote URL; raise IdentityError on failure."""
    try:
        url = get_remote_url(remote, repo_dir=repo_dir, log=log)
        return parse_owner_repo(url)
    except (GitRunnerError, ValueError) as e:
        raise IdentityError(f"could not determine repo owner/name from git remote: {e}") from e
