"""Poller: every interval, look up the branch's PR and rename the environment on change."""

import logging
import time
from pathlib import Path

from prstatus.adapters.base import (
    EnvironmentAdapter,
    EnvironmentUpdateError,
    GitPlatformAdapter,
    GitPlatformError,
)
from prstatus.label import MAX_LABEL_LENGTH, compute_label
from prstatus.models import SKIP, AppliedState, LabelOutcome
from prstatus.services.git_runner import get_current_branch

LOG = logging.getLogger("prstatus.poller")


class StatusPoller:
    """Holds the applied state for one environment and drives single iterations.

    Applied state starts as INIT and only becomes LABELED(name) after the
    rename call for `name` succeeded, so a failed update is retried on the
    next iteration.
    """

    def __init__(
        self,
        github: GitPlatformAdapter,
        environment: EnvironmentAdapter,
        environment_id: str,
        owner: str,
        repo: str,
        repo_dir: Path | None = None,
        max_label_length: int = MAX_LABEL_LENGTH,
        log: logging.Logger | None = None,
    ) -> None:
        self._github = github
        self._environment = environment
        self._environment_id = environment_id
        self._owner = owner
        self._repo = repo
        self._repo_dir = repo_dir
        self._max_label_length = max_label_length
        self._log = log or LOG
        self._state = AppliedState.init()

    @property
    def environment_id(self) -> str:
        return self._environment_id

    @property
    def repository(self) -> str:
        return f"{self._owner}/{self._repo}"

    @property
    def state(self) -> AppliedState:
        return self._state

    def next_outcome(self, branch: str) -> LabelOutcome:
        """Query the PR for `branch` and compute the label; lookup failures are SKIP."""
        try:
            pr = self._github.find_pull_request(self._owner, self._repo, branch)
        except GitPlatformError as e:
            self._log.warning("PR lookup failed for %s: %s", branch, e)
            return SKIP
        return compute_label(pr, self._max_label_length)

    def apply(self, outcome: LabelOutcome) -> AppliedState:
        """Push `outcome` to the environment name if it differs from the applied state."""
        if outcome is SKIP:
            if self._state.is_labeled:
                try:
                    self._environment.update_environment_name(self._environment_id, "")
                    self._log.info("cleared (no PR)")
                except EnvironmentUpdateError as e:
                    self._log.error("failed to clear name: %s", e)
            # Best-effort clear: SKIPPED even if the call failed
            self._state = AppliedState.skipped()
            return self._state

        if self._state.matches(outcome):
            return self._state

        try:
            self._environment.update_environment_name(self._environment_id, outcome)
        except EnvironmentUpdateError as e:
            self._log.error("failed to update name: %s", e)
            return self._state
        if outcome:
            self._log.info("updated: %s", outcome)
        else:
            self._log.info("cleared (merged/closed)")
        self._state = AppliedState.labeled(outcome)
        return self._state

    def poll_once(self) -> AppliedState:
        """Run one iteration: branch, lookup, label, maybe rename.

        Detached HEAD (no branch) skips the iteration without touching state.
        """
        branch = get_current_branch(self._repo_dir, log=self._log)
        if not branch:
            self._log.debug("No branch checked out; skipping")
            return self._state
        outcome = self.next_outcome(branch)
        self._log.debug("Branch %s -> %r (applied: %s)", branch, outcome, self._state.kind.value)
        return self.apply(outcome)


def run_poller_loop(poller: StatusPoller, interval_seconds: int = 30) -> None:
    """Loop forever: poll once, then sleep interval_seconds, whatever happened."""
    log = logging.getLogger("prstatus.poller")
    while True:
        try:
            poller.poll_once()
        except Exception as e:
            log.exception("Poll tick error: %s", e)
        time.sleep(interval_seconds)
