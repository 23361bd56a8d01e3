"""Remote API adapters (GitHub lookup, Gitpod rename)."""

from prstatus.adapters.base import (
    EnvironmentAdapter,
    EnvironmentUpdateError,
    GitPlatformAdapter,
    GitPlatformError,
)
from prstatus.adapters.github import GitHubAdapter
from prstatus.adapters.gitpod import GitpodAdapter

__all__ = [
    "EnvironmentAdapter",
    "EnvironmentUpdateError",
    "GitHubAdapter",
    "GitPlatformAdapter",
    "GitPlatformError",
    "GitpodAdapter",
]
