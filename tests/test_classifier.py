"""Tests for issue/PR status classification."""

import itertools

import pytest

from tagbot.github.classifier import (
    ISSUE_ICONS,
    PR_ICONS,
    STATE_COLORS,
    IssueStatus,
    PullRequestStatus,
    classify,
    classify_status,
)
from tagbot.github.models import EntityKind, ReviewDecision, ReviewState, parse_entity

from conftest import issue_node, pr_node


class TestParseEntity:

    def test_issue(self):
        entity = parse_entity(issue_node())
        assert entity.kind is EntityKind.ISSUE
        assert entity.number == 42
        assert entity.author.login == "octocat"

    def test_pull_request(self):
        entity = parse_entity(pr_node())
        assert entity.kind is EntityKind.PULL_REQUEST
        assert entity.head_ref == "fix-widgets"
        assert entity.head_repository == "bob/widgets"

    def test_unknown_typename(self):
        with pytest.raises(ValueError):
            parse_entity(issue_node(__typename="Discussion"))

    def test_deleted_author(self):
        assert parse_entity(issue_node(author=None)).author.login == "ghost"

    def test_unmapped_review_state_is_pending(self):
        node = pr_node(latestOpinionatedReviews={"nodes": [
            {"author": {"login": "r"}, "state": "SOMETHING_NEW", "url": "u"},
        ]})
        assert parse_entity(node).reviews[0].state is ReviewState.PENDING

    def test_unmapped_review_decision_is_review_required(self):
        assert parse_entity(pr_node(reviewDecision="WHATEVER")).review_decision is ReviewDecision.REVIEW_REQUIRED


class TestStatus:

    def test_merged_wins_over_everything(self):
        """merged=true → MERGED for every closed/isDraft combination."""
        for closed, draft in itertools.product([True, False], repeat=2):
            entity = parse_entity(pr_node(merged=True, closed=closed, isDraft=draft))
            assert classify_status(entity) is PullRequestStatus.MERGED

    def test_draft_before_closed(self):
        assert classify_status(parse_entity(pr_node(isDraft=True, closed=True))) is PullRequestStatus.DRAFT

    def test_closed_pr(self):
        assert classify_status(parse_entity(pr_node(closed=True))) is PullRequestStatus.CLOSED

    def test_open_pr(self):
        assert classify_status(parse_entity(pr_node())) is PullRequestStatus.OPEN

    def test_issue_closed_iff_closed(self):
        assert classify_status(parse_entity(issue_node(closed=True))) is IssueStatus.CLOSED
        assert classify_status(parse_entity(issue_node(closed=False))) is IssueStatus.OPEN


class TestClassification:

    def test_merged_by_in(self):
        entity = parse_entity(pr_node(
            merged=True,
            closed=True,
            mergedAt="2024-02-01T10:00:00Z",
            mergedBy={"login": "alice"},
            mergeCommit={"abbreviatedOid": "abc1234"},
        ))
        result = classify(entity)
        assert result.action.key == "command.issue-pr.action.merge_by_in"
        assert result.action.params == {"user": "alice", "commit": "abc1234"}
        assert result.color == STATE_COLORS["MERGED"]
        assert result.timestamp_field == "merged_at"
        assert result.timestamp == "2024-02-01T10:00:00Z"
        assert result.icon == PR_ICONS[PullRequestStatus.MERGED]

    def test_merge_templates(self):
        cases = [
            ({"mergedBy": {"login": "alice"}}, "merge_by"),
            ({"mergeCommit": {"abbreviatedOid": "abc1234"}}, "merge_in"),
            ({}, "merge"),
        ]
        for extra, key in cases:
            result = classify(parse_entity(pr_node(merged=True, **extra)))
            assert result.action.key == f"command.issue-pr.action.{key}"

    def test_open_issue(self):
        result = classify(parse_entity(issue_node()))
        assert result.kind is EntityKind.ISSUE
        assert result.action.key == "command.issue-pr.action.open"
        assert result.timestamp == "2024-01-02T03:04:05Z"
        assert result.icon == ISSUE_ICONS[IssueStatus.OPEN]
        assert result.color == STATE_COLORS["OPEN"]
        assert result.install is None
        assert result.reviews is None

    def test_closed_issue_uses_close_time(self):
        result = classify(parse_entity(issue_node(closed=True, closedAt="2024-03-01T00:00:00Z")))
        assert result.action.key == "command.issue-pr.action.close"
        assert result.timestamp == "2024-03-01T00:00:00Z"
        assert result.color == STATE_COLORS["CLOSED"]

    def test_draft_uses_publish_time(self):
        result = classify(parse_entity(pr_node(isDraft=True)))
        assert result.action.key == "command.issue-pr.action.draft"
        assert result.timestamp_field == "published_at"
        assert result.color == STATE_COLORS["DRAFT"]

    def test_same_input_same_output(self):
        node = pr_node(merged=True, mergedBy={"login": "alice"})
        assert classify(parse_entity(node)) == classify(parse_entity(node))


class TestInstallable:

    def test_open_and_draft_are_installable(self):
        for extra in ({}, {"isDraft": True}):
            target = classify(parse_entity(pr_node(**extra))).install
            assert target.repository == "bob/widgets"
            assert target.branch == "fix-widgets"

    def test_closed_and_merged_are_not(self):
        assert classify(parse_entity(pr_node(closed=True))).install is None
        assert classify(parse_entity(pr_node(merged=True))).install is None

    def test_deleted_branch(self):
        target = classify(parse_entity(pr_node(headRef=None))).install
        assert target.branch is None


class TestReviews:

    def test_no_reviews_no_summary(self):
        assert classify(parse_entity(pr_node())).reviews is None

    def test_summary(self):
        node = pr_node(
            reviewDecision="APPROVED",
            latestOpinionatedReviews={"nodes": [
                {"author": {"login": "carol"}, "state": "APPROVED", "url": "https://r/1"},
                {"author": {"login": "dave"}, "state": "CHANGES_REQUESTED", "url": "https://r/2"},
            ]},
        )
        summary = classify(parse_entity(node)).reviews
        assert summary.heading_key == "command.issue-pr.heading.reviews.approved"
        assert [e.reviewer for e in summary.entries] == ["carol", "dave"]
        assert summary.entries[1].state_key == "command.issue-pr.review_state.changes_requested"

    def test_missing_decision_is_review_required(self):
        node = pr_node(latestOpinionatedReviews={"nodes": [
            {"author": {"login": "carol"}, "state": "COMMENTED", "url": "https://r/1"},
        ]})
        summary = classify(parse_entity(node)).reviews
        assert summary.heading_key == "command.issue-pr.heading.reviews.review_required"
