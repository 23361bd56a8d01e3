"""Abstract base for the PR lookup and environment rename adapters."""

from abc import ABC, abstractmethod

from prstatus.models import PullRequestSnapshot


class GitPlatformError(Exception):
    """Raised when a Git platform API call fails."""

    pass


class EnvironmentUpdateError(Exception):
    """Raised when renaming the development environment fails."""

    pass


class GitPlatformAdapter(ABC):
    """Looks up pull requests on a Git hosting platform."""

    @abstractmethod
    def find_pull_request(self, owner: str, repo: str, branch: str) -> PullRequestSnapshot | None:
        """Return the most recently updated PR whose head is `branch`, or None."""
        ...


class EnvironmentAdapter(ABC):
    """Renames a cloud development environment."""

    @abstractmethod
    def update_environment_name(self, environment_id: str, name: str) -> None:
        """Set the display name; "" resets it to the platform default."""
        ...
