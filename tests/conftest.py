"""Pytest configuration and shared fixtures."""

import pytest

from tagbot.commands.base import CommandContext
from tagbot.db.records import TagRecord


def make_ctx(**overrides) -> CommandContext:
    values = dict(
        actor_id="100",
        actor_name="@alice",
        chat_id=-500,
        community_id="-500",
        roles=frozenset({"member"}),
        locale="en",
    )
    values.update(overrides)
    return CommandContext(**values)


def issue_node(**overrides) -> dict:
    node = {
        "__typename": "Issue",
        "author": {"avatarUrl": "https://avatars.example/a.png", "login": "octocat", "url": "https://github.com/octocat"},
        "body": "It broke.",
        "closed": False,
        "closedAt": None,
        "comments": {"totalCount": 0},
        "number": 42,
        "publishedAt": "2024-01-02T03:04:05Z",
        "title": "Something is broken",
        "url": "https://github.com/acme/widgets/issues/42",
    }
    node.update(overrides)
    return node


def pr_node(**overrides) -> dict:
    node = {
        "__typename": "PullRequest",
        "author": {"avatarUrl": "https://avatars.example/b.png", "login": "bob", "url": "https://github.com/bob"},
        "body": "Fixes #42",
        "closed": False,
        "closedAt": None,
        "comments": {"totalCount": 3},
        "headRef": {"name": "fix-widgets"},
        "headRepository": {"nameWithOwner": "bob/widgets"},
        "isDraft": False,
        "merged": False,
        "mergedAt": None,
        "mergedBy": None,
        "mergeCommit": None,
        "number": 43,
        "publishedAt": "2024-01-03T00:00:00Z",
        "reviewDecision": None,
        "title": "Fix widgets",
        "url": "https://github.com/acme/widgets/pull/43",
        "latestOpinionatedReviews": {"nodes": []},
    }
    node.update(overrides)
    return node


@pytest.fixture
def ctx():
    return make_ctx()


@pytest.fixture
def tag():
    return TagRecord(id=7, name="Test", owner_id="100", content="old content", hoisted=False, templated=False)
