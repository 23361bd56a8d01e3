"""Tests for the poller: applied-state transitions and the sleep loop."""

import logging
from unittest.mock import MagicMock, call, patch

import pytest

from prstatus.adapters.base import EnvironmentUpdateError, GitPlatformError
from prstatus.models import SKIP, AppliedKind, AppliedState, PullRequestSnapshot
from prstatus.poller import StatusPoller, run_poller_loop


def make_pr(title: str = "Add retries", state: str = "OPEN", **kwargs: object) -> PullRequestSnapshot:
    return PullRequestSnapshot(number=3, title=title, state=state, **kwargs)


@pytest.fixture
def github() -> MagicMock:
    return MagicMock()


@pytest.fixture
def environment() -> MagicMock:
    return MagicMock()


@pytest.fixture
def poller(github: MagicMock, environment: MagicMock) -> StatusPoller:
    return StatusPoller(github, environment, environment_id="env-1", owner="octo", repo="widgets")


@pytest.fixture
def on_branch():
    with patch("prstatus.poller.get_current_branch", return_value="feature/retries") as mock_branch:
        yield mock_branch


def test_initial_state_is_init(poller: StatusPoller) -> None:
    assert poller.state == AppliedState.init()
    assert poller.repository == "octo/widgets"
    assert poller.environment_id == "env-1"


class TestApply:
    """apply(outcome) against each applied state."""

    def test_new_label_updates_and_records(self, poller: StatusPoller, environment: MagicMock) -> None:
        state = poller.apply("✅ Add retries")
        environment.update_environment_name.assert_called_once_with("env-1", "✅ Add retries")
        assert state == AppliedState.labeled("✅ Add retries")

    def test_same_label_makes_no_call(self, poller: StatusPoller, environment: MagicMock) -> None:
        poller.apply("✅ Add retries")
        poller.apply("✅ Add retries")
        assert environment.update_environment_name.call_count == 1

    def test_failed_update_keeps_state_and_retries(self, poller: StatusPoller, environment: MagicMock) -> None:
        environment.update_environment_name.side_effect = [EnvironmentUpdateError("503"), None]

        assert poller.apply("👀 Add retries") == AppliedState.init()
        assert poller.apply("👀 Add retries") == AppliedState.labeled("👀 Add retries")
        assert environment.update_environment_name.call_count == 2

    def test_empty_label_is_applied_state(self, poller: StatusPoller, environment: MagicMock) -> None:
        poller.apply("✅ Add retries")
        state = poller.apply("")
        assert environment.update_environment_name.call_args == call("env-1", "")
        assert state.kind is AppliedKind.LABELED
        assert state.value == ""

    def test_empty_label_from_init_is_pushed(self, poller: StatusPoller, environment: MagicMock) -> None:
        poller.apply("")
        environment.update_environment_name.assert_called_once_with("env-1", "")
        assert poller.state == AppliedState.labeled("")

    def test_skip_from_init_makes_no_call(self, poller: StatusPoller, environment: MagicMock) -> None:
        assert poller.apply(SKIP) == AppliedState.skipped()
        environment.update_environment_name.assert_not_called()

    def test_skip_from_labeled_clears_once(self, poller: StatusPoller, environment: MagicMock) -> None:
        poller.apply("✅ Add retries")
        environment.update_environment_name.reset_mock()

        poller.apply(SKIP)
        poller.apply(SKIP)

        environment.update_environment_name.assert_called_once_with("env-1", "")
        assert poller.state == AppliedState.skipped()

    def test_skip_from_empty_label_clears(self, poller: StatusPoller, environment: MagicMock) -> None:
        poller.apply("")
        environment.update_environment_name.reset_mock()
        poller.apply(SKIP)
        environment.update_environment_name.assert_called_once_with("env-1", "")

    def test_failed_clear_still_skipped(self, poller: StatusPoller, environment: MagicMock) -> None:
        poller.apply("✅ Add retries")
        environment.update_environment_name.side_effect = EnvironmentUpdateError("down")

        assert poller.apply(SKIP) == AppliedState.skipped()
        environment.update_environment_name.side_effect = None
        environment.update_environment_name.reset_mock()
        poller.apply(SKIP)
        environment.update_environment_name.assert_not_called()

    def test_label_after_skip_updates(self, poller: StatusPoller, environment: MagicMock) -> None:
        poller.apply(SKIP)
        poller.apply("🟢 Add retries")
        environment.update_environment_name.assert_called_once_with("env-1", "🟢 Add retries")

    def test_update_logged(self, poller: StatusPoller, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO, logger="prstatus.poller")
        poller.apply("✅ Add retries")
        assert [(r.levelno, r.getMessage()) for r in caplog.records] == [(logging.INFO, "updated: ✅ Add retries")]

    def test_merged_clear_logged(self, poller: StatusPoller, caplog: pytest.LogCaptureFixture) -> None:
        poller.apply("✅ Add retries")
        caplog.clear()
        caplog.set_level(logging.INFO, logger="prstatus.poller")
        poller.apply("")
        assert [r.getMessage() for r in caplog.records] == ["cleared (merged/closed)"]

    def test_no_pr_clear_logged(self, poller: StatusPoller, caplog: pytest.LogCaptureFixture) -> None:
        poller.apply("✅ Add retries")
        caplog.clear()
        caplog.set_level(logging.INFO, logger="prstatus.poller")
        poller.apply(SKIP)
        poller.apply(SKIP)
        assert [r.getMessage() for r in caplog.records] == ["cleared (no PR)"]

    def test_failed_update_logged_as_error(
        self, poller: StatusPoller, environment: MagicMock, caplog: pytest.LogCaptureFixture
    ) -> None:
        environment.update_environment_name.side_effect = EnvironmentUpdateError("503: unavailable")
        caplog.set_level(logging.INFO, logger="prstatus.poller")
        poller.apply("✅ Add retries")
        assert [(r.levelno, r.getMessage()) for r in caplog.records] == [
            (logging.ERROR, "failed to update name: 503: unavailable")
        ]

    def test_unchanged_label_logs_nothing(self, poller: StatusPoller, caplog: pytest.LogCaptureFixture) -> None:
        poller.apply("✅ Add retries")
        caplog.clear()
        caplog.set_level(logging.INFO, logger="prstatus.poller")
        poller.apply("✅ Add retries")
        assert caplog.records == []


class TestPollOnce:
    """poll_once wires branch -> lookup -> label -> apply."""

    def test_no_branch_skips_everything(self, poller: StatusPoller, github: MagicMock, environment: MagicMock) -> None:
        with patch("prstatus.poller.get_current_branch", return_value=None):
            assert poller.poll_once() == AppliedState.init()
        github.find_pull_request.assert_not_called()
        environment.update_environment_name.assert_not_called()

    def test_no_branch_keeps_labeled_state(self, poller: StatusPoller, environment: MagicMock) -> None:
        poller.apply("✅ Add retries")
        environment.update_environment_name.reset_mock()
        with patch("prstatus.poller.get_current_branch", return_value=None):
            assert poller.poll_once() == AppliedState.labeled("✅ Add retries")
        environment.update_environment_name.assert_not_called()

    def test_approved_success(self, poller: StatusPoller, github: MagicMock, environment: MagicMock, on_branch) -> None:
        github.find_pull_request.return_value = make_pr(review_decision="APPROVED", ci_state="SUCCESS")

        poller.poll_once()

        github.find_pull_request.assert_called_once_with("octo", "widgets", "feature/retries")
        environment.update_environment_name.assert_called_once_with("env-1", "✅ Add retries")

    def test_draft_pending(self, poller: StatusPoller, github: MagicMock, environment: MagicMock, on_branch) -> None:
        github.find_pull_request.return_value = make_pr(is_draft=True, ci_state="PENDING")
        poller.poll_once()
        environment.update_environment_name.assert_called_once_with("env-1", "📝⏳ Add retries")

    def test_unchanged_label_one_call(self, poller: StatusPoller, github: MagicMock, environment: MagicMock, on_branch) -> None:
        github.find_pull_request.return_value = make_pr(review_decision="REVIEW_REQUIRED")
        poller.poll_once()
        poller.poll_once()
        environment.update_environment_name.assert_called_once_with("env-1", "👀 Add retries")

    def test_open_then_merged(self, poller: StatusPoller, github: MagicMock, environment: MagicMock, on_branch) -> None:
        github.find_pull_request.side_effect = [
            make_pr(review_decision="APPROVED"),
            make_pr(state="MERGED", review_decision="APPROVED"),
        ]

        poller.poll_once()
        state = poller.poll_once()

        assert environment.update_environment_name.call_args_list == [
            call("env-1", "✅ Add retries"),
            call("env-1", ""),
        ]
        assert state == AppliedState.labeled("")

    def test_pr_disappears_clears_once(self, poller: StatusPoller, github: MagicMock, environment: MagicMock, on_branch) -> None:
        github.find_pull_request.side_effect = [make_pr(), None, None]

        poller.poll_once()
        poller.poll_once()
        state = poller.poll_once()

        assert environment.update_environment_name.call_args_list == [
            call("env-1", "🟢 Add retries"),
            call("env-1", ""),
        ]
        assert state == AppliedState.skipped()

    def test_lookup_failure_is_skip(self, poller: StatusPoller, github: MagicMock, environment: MagicMock, on_branch) -> None:
        github.find_pull_request.side_effect = GitPlatformError("502: Bad Gateway")

        assert poller.poll_once() == AppliedState.skipped()
        environment.update_environment_name.assert_not_called()

    def test_max_label_length_applied(self, github: MagicMock, environment: MagicMock, on_branch) -> None:
        poller = StatusPoller(github, environment, "env-1", "octo", "widgets", max_label_length=22)
        github.find_pull_request.return_value = make_pr(title="Fix the flaky integration test for retries")
        poller.poll_once()
        environment.update_environment_name.assert_called_once_with("env-1", "🟢 Fix the flaky…")


def test_loop_sleeps_after_each_iteration() -> None:
    """run_poller_loop polls, then sleeps interval_seconds."""
    poller = MagicMock()
    with patch("prstatus.poller.time.sleep", side_effect=[None, StopIteration("two ticks")]) as sleep:
        with pytest.raises(StopIteration, match="two ticks"):
            run_poller_loop(poller, interval_seconds=30)
    assert poller.poll_once.call_count == 2
    assert sleep.call_args_list == [call(30), call(30)]


def test_loop_survives_iteration_errors() -> None:
    """An unexpected error in one iteration is logged and the loop sleeps and continues."""
    poller = MagicMock()
    poller.poll_once.side_effect = [RuntimeError("unexpected"), None]
    with patch("prstatus.poller.time.sleep", side_effect=[None, StopIteration("done")]) as sleep:
        with pytest.raises(StopIteration):
            run_poller_loop(poller, interval_seconds=5)
    assert poller.poll_once.call_count == 2
    assert sleep.call_count == 2
