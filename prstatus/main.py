"""prstatus entry point.

Long-running background process for a Gitpod environment: every poll
interval it looks up the PR for the checked-out branch and renames the
environment to "<status emoji> <PR title>". Usage: prstatus [--once].
"""

import argparse
import logging
import sys
from pathlib import Path

from prstatus.adapters.github import GitHubAdapter
from prstatus.adapters.gitpod import GitpodAdapter
from prstatus.config import AppConfig, load_config
from prstatus.logging import PrStatusLogging
from prstatus.poller import StatusPoller, run_poller_loop
from prstatus.services.environment import resolve_environment_id
from prstatus.services.git_runner import IdentityError, resolve_owner_repo

APP_NAME = "pr-status-env-name"


def _positive_int(value: str) -> int:
    """argparse type: integer >= 1 (same bound as poller.poll_interval)."""
    try:
        number = int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from e
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        prog="prstatus",
        description="Show the current branch's PR status as the Gitpod environment name",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("config.yaml"),
        help="Path to YAML config file (optional)",
    )
    parser.add_argument(
        "--interval",
        type=_positive_int,
        default=None,
        help="Seconds between polls (overrides poller.poll_interval)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single poll then exit",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only load and validate config, then exit",
    )
    return parser.parse_args(argv)


def build_poller(config: AppConfig, token: str, log: logging.Logger) -> StatusPoller:
    """Resolve environment id and owner/repo; raise IdentityError if either fails."""
    environment_id = resolve_environment_id(
        config.gitpod.environment_id_command,
        explicit_id=config.gitpod.environment_id,
        log=log,
    )
    repo_dir = config.poller.repo_dir
    owner, repo = resolve_owner_repo(config.github.remote, repo_dir=repo_dir, log=log)
    timeout = config.poller.request_timeout
    return StatusPoller(
        github=GitHubAdapter(token=token, graphql_url=config.github.graphql_url, timeout=timeout),
        environment=GitpodAdapter(host=config.gitpod.host, token_file=config.gitpod.token_file, timeout=timeout),
        environment_id=environment_id,
        owner=owner,
        repo=repo,
        repo_dir=repo_dir,
        max_label_length=config.poller.max_label_length,
        log=logging.getLogger("prstatus.poller"),
    )


def run(config: AppConfig, once: bool = False) -> int:
    """Validate startup requirements, then poll. Returns the process exit code."""
    logs = PrStatusLogging(config.logging)
    logs.setup()
    log = logs.get_logger("prstatus")

    token = config.github_token_resolved
    if not token:
        print("error: GH_TOKEN is not set", file=sys.stderr)
        return 1

    try:
        poller = build_poller(config, token, log)
    except IdentityError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    interval = config.poller.poll_interval
    log.info(
        "%s: polling every %ss (env=%s repo=%s)",
        APP_NAME,
        interval,
        poller.environment_id,
        poller.repository,
    )

    if once:
        poller.poll_once()
        return 0
    run_poller_loop(poller, interval)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for prstatus."""
    args = parse_args(argv)
    config = load_config(args.config)
    if args.interval is not None:
        config.poller.poll_interval = args.interval

    if args.check:
        print(
            "Config OK:",
            f"interval={config.poller.poll_interval}s",
            f"gitpod={config.gitpod.host}",
            f"token={'set' if config.github_token_resolved else 'missing'}",
        )
        return 0

    try:
        return run(config, once=args.once)
    except KeyboardInterrupt:
        return 0
    except Exception as e:
        logging.getLogger("prstatus").exception("Fatal error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
