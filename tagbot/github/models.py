"""Typed GitHub issue / pull request payloads.

``parse_entity`` turns one ``issueOrPullRequest`` GraphQL node into an
Issue or a PullRequest. The node's ``__typename`` decides which; fields
are never probed to guess the kind.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


class EntityKind(str, Enum):
    ISSUE = "Issue"
    PULL_REQUEST = "PullRequest"


class ReviewState(str, Enum):
    """State of a single review. Unmapped values count as PENDING."""
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    APPROVED = "APPROVED"
    COMMENTED = "COMMENTED"
    DISMISSED = "DISMISSED"
    PENDING = "PENDING"

    @classmethod
    def _missing_(cls, value):
        return cls.PENDING


class ReviewDecision(str, Enum):
    """Aggregate review decision of a PR. Unmapped values count as REVIEW_REQUIRED."""
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    APPROVED = "APPROVED"
    REVIEW_REQUIRED = "REVIEW_REQUIRED"

    @classmethod
    def _missing_(cls, value):
        return cls.REVIEW_REQUIRED


@dataclass(frozen=True)
class Author:
    login: str
    url: str = ""
    avatar_url: str = ""

    @classmethod
    def from_node(cls, node: Optional[dict]) -> "Author":
        # Deleted accounts come back as null
        if not node:
            return cls(login="ghost", url="https://github.com/ghost")
        return cls(
            login=node.get("login") or "ghost",
            url=node.get("url") or "",
            avatar_url=node.get("avatarUrl") or "",
        )


@dataclass(frozen=True)
class Review:
    author: str
    state: ReviewState
    url: str


@dataclass(frozen=True)
class Issue:
    number: int
    title: str
    url: str
    author: Author
    closed: bool = False
    published_at: Optional[str] = None
    closed_at: Optional[str] = None
    comment_count: int = 0
    body: str = ""
    kind: EntityKind = field(default=EntityKind.ISSUE, init=False)


@dataclass(frozen=True)
class PullRequest:
    number: int
    title: str
    url: str
    author: Author
    closed: bool = False
    merged: bool = False
    is_draft: bool = False
    published_at: Optional[str] = None
    closed_at: Optional[str] = None
    merged_at: Optional[str] = None
    merged_by: Optional[str] = None
    merge_commit: Optional[str] = None
    head_ref: Optional[str] = None
    head_repository: Optional[str] = None
    review_decision: Optional[ReviewDecision] = None
    reviews: tuple[Review, ...] = ()
    comment_count: int = 0
    body: str = ""
    kind: EntityKind = field(default=EntityKind.PULL_REQUEST, init=False)


RawEntity = Union[Issue, PullRequest]


def _get(node: Optional[dict], *path: str) -> Any:
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def parse_entity(node: dict) -> RawEntity:
    """Build an Issue or PullRequest from an ``issueOrPullRequest`` node.

    Raises:
        ValueError: the node has no known ``__typename``
    """
    typename = node.get("__typename")
    try:
        kind = EntityKind(typename)
    except ValueError:
        raise ValueError(f"Unknown issueOrPullRequest type: {typename!r}")

    common = dict(
        number=int(node["number"]),
        title=node.get("title") or "",
        url=node.get("url") or "",
        author=Author.from_node(node.get("author")),
        closed=bool(node.get("closed")),
        published_at=node.get("publishedAt"),
        closed_at=node.get("closedAt"),
        comment_count=int(_get(node, "comments", "totalCount") or 0),
        body=node.get("body") or "",
    )

    if kind is EntityKind.ISSUE:
        return Issue(**common)

    reviews = tuple(
        Review(
            author=_get(r, "author", "login") or "ghost",
            state=ReviewState(r.get("state")),
            url=r.get("url") or "",
        )
        for r in (_get(node, "latestOpinionatedReviews", "nodes") or [])
        if r
    )
    decision = node.get("reviewDecision")
    return PullRequest(
        **common,
        merged=bool(node.get("merged")),
        is_draft=bool(node.get("isDraft")),
        merged_at=node.get("mergedAt"),
        merged_by=_get(node, "mergedBy", "login"),
        merge_commit=_get(node, "mergeCommit", "abbreviatedOid"),
        head_ref=_get(node, "headRef", "name"),
        head_repository=_get(node, "headRepository", "nameWithOwner"),
        review_decision=ReviewDecision(decision) if decision is not None else None,
        reviews=reviews,
    )
