"""Resolve the id of the development environment this process runs in."""

import logging
import subprocess

from prstatus.services.git_runner import IdentityError


def resolve_environment_id(
    command: list[str],
    explicit_id: str | None = None,
    log: logging.Logger | None = None,
) -> str:
    """Return the environment id, from `explicit_id` or by running `command`.

    All whitespace is removed from the command output. Raises
    IdentityError when the command is missing, fails, times out or prints
    nothing.
    """
    if explicit_id and explicit_id.strip():
        return "".join(explicit_id.split())
    if not command:
        raise IdentityError("could not determine environment ID: no command configured")
    try:
        res = subprocess.run(command, check=True, capture_output=True, text=True, timeout=30)
    except subprocess.CalledProcessError as e:
        err = (e.stderr or e.stdout or "").strip()
        if log:
            log.debug("%s failed: %s", command, err)
        raise IdentityError(f"could not determine environment ID: {err or e}") from e
    except subprocess.TimeoutExpired as e:
        raise IdentityError("could not determine environment ID: command timed out") from e
    except FileNotFoundError as e:
        raise IdentityError(f"could not determine environment ID: {command[0]} not found") from e
    env_id = "".join(res.stdout.split())
    if not env_id:
        raise IdentityError("could not determine environment ID")
    return env_id
