"""Gitpod environment API adapter: rename the current environment."""

from pathlib import Path

import requests

from prstatus.adapters.base import EnvironmentAdapter, EnvironmentUpdateError
from prstatus.config import DEFAULT_GITPOD_HOST, DEFAULT_GITPOD_TOKEN_FILE

UPDATE_ENVIRONMENT_PATH = "/api/gitpod.v1.EnvironmentService/UpdateEnvironment"


class GitpodAdapter(EnvironmentAdapter):
    """Gitpod EnvironmentService implementation.

    The bearer token is read from `token_file` on every call so a
    rotated secret is picked up without a restart.
    """

    def __init__(
        self,
        host: str = DEFAULT_GITPOD_HOST,
        token_file: Path = DEFAULT_GITPOD_TOKEN_FILE,
        timeout: float = 10,
    ) -> None:
        self._host = host.rstrip("/")
        self._token_file = Path(token_file)
        self._timeout = timeout
        self._session = requests.Session()
        self._session.headers["Content-Type"] = "application/json"

    @property
    def update_url(self) -> str:
        return f"{self._host}{UPDATE_ENVIRONMENT_PATH}"

    def _read_token(self) -> str:
        try:
            token = self._token_file.read_text().strip()
        except OSError as e:
            raise EnvironmentUpdateError(f"Cannot read Gitpod token {self._token_file}: {e}") from e
        if not token:
            raise EnvironmentUpdateError(f"Gitpod token file is empty: {self._token_file}")
        return token

    def update_environment_name(self, environment_id: str, name: str) -> None:
        token = self._read_token()
        try:
            resp = self._session.request(
                "POST",
                self.update_url,
                json={"environmentId": environment_id, "metadata": {"name": name}},
                headers={"Authorization": f"Bearer {token}"},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise EnvironmentUpdateError(f"UpdateEnvironment request failed: {e}") from e
        if not 200 <= resp.status_code < 300:
            raise EnvironmentUpdateError(f"{resp.status_code}: {resp.text or resp.reason}")
