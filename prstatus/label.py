"""Status label for the environment name: emoji tag plus truncated PR title."""

from typing import Callable

from prstatus.models import SKIP, LabelOutcome, PRState, PullRequestSnapshot, ReviewDecision

MAX_LABEL_LENGTH = 80
ELLIPSIS = "…"

# Order is precedence: first matching rule wins.
TAG_RULES: tuple[tuple[Callable[[PullRequestSnapshot], bool], str], ...] = (
    (lambda pr: pr.is_draft and pr.ci_failing, "📝❌"),
    (lambda pr: pr.is_draft and pr.ci_pending, "📝⏳"),
    (lambda pr: pr.is_draft, "📝"),
    (lambda pr: pr.ci_failing, "❌"),
    (lambda pr: pr.review_decision is ReviewDecision.APPROVED, "✅"),
    (lambda pr: pr.review_decision is ReviewDecision.CHANGES_REQUESTED, "🔄"),
    (lambda pr: pr.review_decision is ReviewDecision.REVIEW_REQUIRED and pr.ci_pending, "⏳"),
    (lambda pr: pr.review_decision is ReviewDecision.REVIEW_REQUIRED, "👀"),
    (lambda pr: pr.ci_pending, "⏳"),
)
DEFAULT_TAG = "🟢"


def status_tag(pr: PullRequestSnapshot) -> str:
    """Return the emoji tag of the first matching rule in TAG_RULES."""
    for predicate, tag in TAG_RULES:
        if predicate(pr):
            return tag
    return DEFAULT_TAG


def truncate_title(title: str, budget: int) -> str:
    """Clip `title` to at most `budget` characters, preferring a word boundary.

    A title that fits is returned unchanged. Otherwise the first
    budget - 1 characters are kept, cut back to the last space in them if
    there is one, and an ellipsis is appended.
    """
    if len(title) <= budget:
        return title
    cut = title[: max(budget - 1, 0)]
    if " " in cut:
        cut = cut[: cut.rindex(" ")]
    return f"{cut}{ELLIPSIS}"


def compute_label(pr: PullRequestSnapshot | None, max_length: int = MAX_LABEL_LENGTH) -> LabelOutcome:
    """Map a PR snapshot to the environment name to show.

    Returns:
        SKIP when there is no PR, "" for merged/closed PRs (reset the name
        to its default), otherwise "<tag> <title>" within max_length.
    """
    if pr is None:
        return SKIP
    if pr.state in (PRState.MERGED, PRState.CLOSED):
        return ""
    prefix = f"{status_tag(pr)} "
    return prefix + truncate_title(pr.title, max_length - len(prefix))
