"""Status classification for issues and pull requests.

Everything in here is a pure function of the entity's fields. The
output is locale-free: action phrases and headings are returned as
localization keys plus parameters, and the renderer translates them.

Pull request precedence: merged → draft → closed → open. Merged comes
first because a merged PR is also closed.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from .models import (
    EntityKind,
    Issue,
    PullRequest,
    RawEntity,
    ReviewDecision,
    ReviewState,
)


class IssueStatus(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class PullRequestStatus(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    MERGED = "MERGED"
    DRAFT = "DRAFT"


Status = Union[IssueStatus, PullRequestStatus]

# Embed colors by status
STATE_COLORS = {
    "OPEN": 4827469,
    "CLOSED": 12267569,
    "MERGED": 6441376,
    "DRAFT": 12961221,
}

# Which entity field holds the status timestamp
TIMESTAMP_FIELDS = {
    "OPEN": "published_at",
    "CLOSED": "closed_at",
    "MERGED": "merged_at",
    "DRAFT": "published_at",
}

PR_ICONS = {
    PullRequestStatus.OPEN: "https://cdn.discordapp.com/emojis/751210109333405727.png",
    PullRequestStatus.CLOSED: "https://cdn.discordapp.com/emojis/751210080459817092.png",
    PullRequestStatus.MERGED: "https://cdn.discordapp.com/emojis/751210169609748481.png",
    PullRequestStatus.DRAFT: "https://cdn.discordapp.com/emojis/751210097463525377.png",
}

ISSUE_ICONS = {
    IssueStatus.OPEN: "https://cdn.discordapp.com/emojis/751210140086042686.png?v=1",
    IssueStatus.CLOSED: "https://cdn.discordapp.com/emojis/751210129977901100.png",
}

# Only these PR statuses get an install hint
INSTALLABLE_STATUSES = frozenset({PullRequestStatus.OPEN, PullRequestStatus.DRAFT})

REVIEW_STATE_KEYS = {
    ReviewState.CHANGES_REQUESTED: "command.issue-pr.review_state.changes_requested",
    ReviewState.APPROVED: "command.issue-pr.review_state.approved",
    ReviewState.COMMENTED: "command.issue-pr.review_state.commented",
    ReviewState.DISMISSED: "command.issue-pr.review_state.dismissed",
    ReviewState.PENDING: "command.issue-pr.review_state.pending",
}

REVIEW_DECISION_KEYS = {
    ReviewDecision.CHANGES_REQUESTED: "command.issue-pr.heading.reviews.changes_requested",
    ReviewDecision.APPROVED: "command.issue-pr.heading.reviews.approved",
    ReviewDecision.REVIEW_REQUIRED: "command.issue-pr.heading.reviews.review_required",
}


@dataclass(frozen=True)
class Phrase:
    """A localization key with its parameters."""
    key: str
    params: dict = field(default_factory=dict)


@dataclass(frozen=True)
class InstallTarget:
    """Where to install a PR from. None parts were deleted on GitHub."""
    repository: Optional[str]
    branch: Optional[str]


@dataclass(frozen=True)
class ReviewEntry:
    reviewer: str
    state_key: str
    url: str


@dataclass(frozen=True)
class ReviewSummary:
    heading_key: str
    entries: tuple[ReviewEntry, ...]


@dataclass(frozen=True)
class Classification:
    kind: EntityKind
    status: Status
    timestamp_field: str
    timestamp: Optional[str]
    icon: str
    color: int
    action: Phrase
    install: Optional[InstallTarget] = None
    reviews: Optional[ReviewSummary] = None


def classify_status(entity: RawEntity) -> Status:
    """Compute the canonical status of an issue or pull request."""
    if entity.kind is EntityKind.PULL_REQUEST:
        if entity.merged:
            return PullRequestStatus.MERGED
        if entity.is_draft:
            return PullRequestStatus.DRAFT
        if entity.closed:
            return PullRequestStatus.CLOSED
        return PullRequestStatus.OPEN
    return IssueStatus.CLOSED if entity.closed else IssueStatus.OPEN


def status_icon(kind: EntityKind, status: Status) -> str:
    if kind is EntityKind.PULL_REQUEST:
        return PR_ICONS[PullRequestStatus(status.value)]
    return ISSUE_ICONS[IssueStatus(status.value)]


def action_phrase(entity: RawEntity, status: Status) -> Phrase:
    """Footer action for a status. Merges pick one of four templates."""
    if status is PullRequestStatus.MERGED:
        user = entity.merged_by
        commit = entity.merge_commit
        if user and commit:
            return Phrase("command.issue-pr.action.merge_by_in", {"user": user, "commit": commit})
        if user:
            return Phrase("command.issue-pr.action.merge_by", {"user": user})
        if commit:
            return Phrase("command.issue-pr.action.merge_in", {"commit": commit})
        return Phrase("command.issue-pr.action.merge")
    if status.value == "CLOSED":
        return Phrase("command.issue-pr.action.close")
    if status is PullRequestStatus.DRAFT:
        return Phrase("command.issue-pr.action.draft")
    return Phrase("command.issue-pr.action.open")


def install_target(entity: RawEntity, status: Status) -> Optional[InstallTarget]:
    """Install hint source, only for open or draft pull requests."""
    if entity.kind is not EntityKind.PULL_REQUEST or status not in INSTALLABLE_STATUSES:
        return None
    return InstallTarget(repository=entity.head_repository, branch=entity.head_ref)


def review_summary(entity: RawEntity) -> Optional[ReviewSummary]:
    """Review field source, only for pull requests with at least one review."""
    if entity.kind is not EntityKind.PULL_REQUEST or not entity.reviews:
        return None
    decision = entity.review_decision or ReviewDecision.REVIEW_REQUIRED
    return ReviewSummary(
        heading_key=REVIEW_DECISION_KEYS[decision],
        entries=tuple(
            ReviewEntry(reviewer=r.author, state_key=REVIEW_STATE_KEYS[r.state], url=r.url)
            for r in entity.reviews
        ),
    )


def classify(entity: Union[Issue, PullRequest]) -> Classification:
    """Classify an entity: status, timestamp, icon, color, action and extras."""
    status = classify_status(entity)
    ts_field = TIMESTAMP_FIELDS[status.value]
    return Classification(
        kind=entity.kind,
        status=status,
        timestamp_field=ts_field,
        timestamp=getattr(entity, ts_field),
        icon=status_icon(entity.kind, status),
        color=STATE_COLORS[status.value],
        action=action_phrase(entity, status),
        install=install_target(entity, status),
        reviews=review_summary(entity),
    )
