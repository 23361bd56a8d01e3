"""Configuration loading from YAML and environment.

Secrets (tokens) are taken from environment variables or from files.
Never put real tokens in config files committed to the repo.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_GITPOD_HOST = "https://app.gitpod.io"
DEFAULT_GITPOD_TOKEN_FILE = Path("/usr/local/gitpod/secrets/token")


def _read_secret(env_keys: tuple[str, ...], file_env_key: str) -> str | None:
    """Read secret from the first set env var or from file path in env."""
    for env_key in env_keys:
        value = _current_env.get(env_key)
        if value and value.strip():
            return value.strip()
    file_path = _current_env.get(file_env_key)
    if file_path and Path(file_path).is_file():
        return Path(file_path).read_text().strip() or None
    return None


# Injected by load_config so properties can read env/file
_current_env: dict[str, str] = {}


class GitHubConfig(BaseSettings):
    """GitHub GraphQL API settings and the git remote to resolve owner/repo from."""

    model_config = SettingsConfigDict(env_prefix="GITHUB_", extra="ignore")

    token: str | None = Field(default=None, description="PAT or app token; prefer GH_TOKEN env")
    graphql_url: str = Field(default="https://api.github.com/graphql", description="GraphQL endpoint")
    remote: str = Field(default="origin", description="Git remote whose URL names owner/repo")


class GitpodConfig(BaseSettings):
    """Gitpod environment management API settings."""

    model_config = SettingsConfigDict(env_prefix="GITPOD_", extra="ignore")

    host: str = Field(default=DEFAULT_GITPOD_HOST, description="Gitpod API host")
    token_file: Path = Field(
        default=DEFAULT_GITPOD_TOKEN_FILE,
        description="File holding the bearer token for the Gitpod API (read on every update)",
    )
    environment_id: str | None = Field(
        default=None,
        description="Explicit environment id; when unset it is resolved with environment_id_command",
    )
    environment_id_command: list[str] = Field(
        default_factory=lambda: ["gitpod", "environment", "get", "-f", "id"],
        description="Command printing the current environment id",
    )


class PollerConfig(BaseSettings):
    """Polling loop settings."""

    model_config = SettingsConfigDict(env_prefix="PR_STATUS_", extra="ignore")

    poll_interval: int = Field(default=30, ge=1, description="Seconds between polls")
    max_label_length: int = Field(default=80, ge=8, description="Maximum environment name length")
    request_timeout: float = Field(default=10.0, gt=0, description="HTTP timeout in seconds")
    repo_dir: Path = Field(default=Path("."), description="Working repository to watch")


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="%(asctime)s %(message)s", description="Log format")
    datefmt: str = Field(default="%H:%M:%S", description="Timestamp format")


class AppConfig(BaseSettings):
    """Root application config from YAML + env."""

    model_config = SettingsConfigDict(extra="ignore")

    github: GitHubConfig = Field(default_factory=GitHubConfig)
    gitpod: GitpodConfig = Field(default_factory=GitpodConfig)
    poller: PollerConfig = Field(default_factory=PollerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def github_token_resolved(self) -> str | None:
        """Resolve GitHub token from config, GH_TOKEN/GITHUB_TOKEN or GITHUB_TOKEN_FILE."""
        t = self.github.token
        if t and t.strip() and not t.startswith("${"):
            return t.strip()
        return _read_secret(("GH_TOKEN", "GITHUB_TOKEN"), "GITHUB_TOKEN_FILE")


def _substitute_env(value: Any) -> Any:
    """Replace ${VAR} and $VAR in strings with os.environ."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1].strip()
            return _current_env.get(key, value)
        # Simple $VAR
        if value.startswith("$") and not value.startswith("${"):
            key = value[1:].strip()
            return _current_env.get(key, value)
        return value
    if isinstance(value, dict):
        return {k: _substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v) for v in value]
    return value


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load config from YAML file and environment.

    Precedence per section: YAML values, then prefixed env vars
    (e.g. PR_STATUS_POLL_INTERVAL, GITPOD_HOST) override them, then
    defaults. A missing file yields env + defaults only.

    Secrets: GH_TOKEN, GITHUB_TOKEN or GITHUB_TOKEN_FILE.
    """
    global _current_env

    _current_env = dict(os.environ)

    raw: dict[str, Any] = {}
    path = config_path or Path("config.yaml")
    if path.is_file():
        raw = yaml.safe_load(path.read_text()) or {}
        raw = _substitute_env(raw)

    github = GitHubConfig(**_without_env_overrides(raw.get("github"), "GITHUB_"))
    gitpod = GitpodConfig(**_without_env_overrides(raw.get("gitpod"), "GITPOD_"))
    poller = PollerConfig(**_without_env_overrides(raw.get("poller"), "PR_STATUS_"))
    logging = LoggingConfig(**_without_env_overrides(raw.get("logging"), "LOGGING_"))

    return AppConfig(github=github, gitpod=gitpod, poller=poller, logging=logging)


def _without_env_overrides(section: Any, prefix: str) -> dict[str, Any]:
    """Drop YAML keys that are set in env so pydantic-settings reads env for them.

    Init kwargs take precedence over env in BaseSettings; removing them
    lets e.g. PR_STATUS_POLL_INTERVAL override the YAML file.
    """
    section = dict(section or {})
    return {k: v for k, v in section.items() if f"{prefix}{k}".upper() not in _current_env}
