"""Data models: pull request snapshot, label outcome and applied state (Pydantic)."""

from enum import Enum
from typing import Final

from pydantic import BaseModel, ConfigDict


class PRState(str, Enum):
    """Pull request lifecycle state as reported by GitHub."""

    OPEN = "OPEN"
    MERGED = "MERGED"
    CLOSED = "CLOSED"


class ReviewDecision(str, Enum):
    """Review decision computed by GitHub from required reviewers."""

    APPROVED = "APPROVED"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    REVIEW_REQUIRED = "REVIEW_REQUIRED"


class CheckState(str, Enum):
    """Rolled-up status of all checks on the latest commit (GitHub StatusState)."""

    SUCCESS = "SUCCESS"
    PENDING = "PENDING"
    EXPECTED = "EXPECTED"
    FAILURE = "FAILURE"
    ERROR = "ERROR"

    @property
    def is_failing(self) -> bool:
        return self in (CheckState.FAILURE, CheckState.ERROR)

    @property
    def is_pending(self) -> bool:
        return self is CheckState.PENDING


class PullRequestSnapshot(BaseModel):
    """The most recently updated PR for a branch, as seen by one poll."""

    model_config = ConfigDict(frozen=True)

    number: int
    title: str
    state: PRState
    is_draft: bool = False
    review_decision: ReviewDecision | None = None
    ci_state: CheckState | None = None

    @property
    def ci_failing(self) -> bool:
        return self.ci_state is not None and self.ci_state.is_failing

    @property
    def ci_pending(self) -> bool:
        return self.ci_state is not None and self.ci_state.is_pending


class Skip:
    """Outcome meaning "no active PR to report".

    Distinct from the empty-string label, which resets the environment
    name to its default. Use the module-level SKIP instance.
    """

    _instance: "Skip | None" = None

    def __new__(cls) -> "Skip":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SKIP"


SKIP: Final = Skip()

LabelOutcome = str | Skip


class AppliedKind(str, Enum):
    """What the poller last did to the environment name."""

    INIT = "init"
    SKIPPED = "skipped"
    LABELED = "labeled"


class AppliedState(BaseModel):
    """Last environment name the poller pushed successfully.

    INIT only at startup; SKIPPED after a SKIP outcome; LABELED carries the
    pushed name, which may be "" (reset to default).
    """

    model_config = ConfigDict(frozen=True)

    kind: AppliedKind
    value: str | None = None

    @classmethod
    def init(cls) -> "AppliedState":
        return cls(kind=AppliedKind.INIT)

    @classmethod
    def skipped(cls) -> "AppliedState":
        return cls(kind=AppliedKind.SKIPPED)

    @classmethod
    def labeled(cls, value: str) -> "AppliedState":
        return cls(kind=AppliedKind.LABELED, value=value)

    @property
    def is_labeled(self) -> bool:
        return self.kind is AppliedKind.LABELED

    def matches(self, label: str) -> bool:
        """True when this state already shows exactly `label`."""
        return self.is_labeled and self.value == label
