"""Local identity lookups: git branch, remote owner/repo, environment id."""

from prstatus.services.environment import resolve_environment_id
from prstatus.services.git_runner import (
    GitRunnerError,
    IdentityError,
    get_current_branch,
    parse_owner_repo,
    resolve_owner_repo,
)

__all__ = [
    "GitRunnerError",
    "IdentityError",
    "get_current_branch",
    "parse_owner_repo",
    "resolve_environment_id",
    "resolve_owner_repo",
]
