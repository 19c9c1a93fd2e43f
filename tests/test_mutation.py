"""Tests for the tag mutation builder."""

import pytest

from tagbot.commands.mutation import (
    MAX_CONTENT_LENGTH,
    build_mutation,
    content_length,
    resolve_flag_pair,
)
from tagbot.commands.permissions import PermissionTier
from tagbot.db.records import MutationKind, TagRecord
from tagbot.errors import AuthorizationError, ValidationError


def args(**overrides):
    values = {"hoist": False, "unhoist": False, "templated": False, "untemplated": False, "content": None}
    values.update(overrides)
    return values


class TestFlagPair:

    def test_positive_forces_true(self):
        assert resolve_flag_pair(True, False, False) is True

    def test_negative_forces_false(self):
        assert resolve_flag_pair(False, True, True) is False

    def test_neither_keeps_prior(self):
        assert resolve_flag_pair(False, False, True) is True
        assert resolve_flag_pair(False, False, False) is False

    def test_both_positive_wins(self):
        assert resolve_flag_pair(True, True, False) is True


class TestAuthorization:

    def test_stranger_refused(self, tag):
        with pytest.raises(AuthorizationError) as exc:
            build_mutation(args(content="x"), PermissionTier.NONE, tag, "999")
        assert exc.value.key == "command.tags.edit.own_tag"

    def test_elevated_stranger_allowed(self, tag):
        request = build_mutation(args(content="x"), PermissionTier.ELEVATED, tag, "999")
        assert request.editor_id == "999"


class TestContentLength:

    def test_limit_is_refused(self, tag):
        with pytest.raises(ValidationError) as exc:
            build_mutation(args(content="a" * 1950), PermissionTier.NONE, tag, "100")
        assert exc.value.key == "command.tags.edit.too_long"
        assert exc.value.params["limit"] == MAX_CONTENT_LENGTH

    def test_one_below_limit_proceeds(self, tag):
        request = build_mutation(args(content="a" * 1949), PermissionTier.NONE, tag, "100")
        assert request.kind is MutationKind.CONTENT
        assert len(request.content) == 1949

    def test_emoji_count_as_two_units(self, tag):
        # 1000 astral characters are 2000 UTF-16 units
        with pytest.raises(ValidationError):
            build_mutation(args(content="\U0001F600" * 1000), PermissionTier.NONE, tag, "100")

    def test_emoji_below_limit_proceeds(self, tag):
        request = build_mutation(args(content="\U0001F600" * 974), PermissionTier.NONE, tag, "100")
        assert content_length(request.content) == 1948


class TestFlags:

    def test_no_tier_no_flags_keeps_prior(self):
        tag = TagRecord(id=1, name="t", owner_id="100", content="c", hoisted=True, templated=True)
        request = build_mutation(args(content="new"), PermissionTier.NONE, tag, "100")
        assert request.hoisted is True
        assert request.templated is True

    def test_hoist_elevated(self, tag):
        request = build_mutation(args(hoist=True), PermissionTier.ELEVATED, tag, "100")
        assert request.hoisted is True

    def test_hoist_without_tier_ignored(self, tag):
        request = build_mutation(args(hoist=True), PermissionTier.NONE, tag, "100")
        assert request.hoisted is False

    def test_unhoist_elevated(self):
        tag = TagRecord(id=1, name="t", owner_id="100", content="c", hoisted=True)
        request = build_mutation(args(unhoist=True), PermissionTier.ELEVATED, tag, "100")
        assert request.hoisted is False

    def test_hoist_and_unhoist_positive_wins(self, tag):
        request = build_mutation(args(hoist=True, unhoist=True), PermissionTier.ELEVATED, tag, "100")
        assert request.hoisted is True

    def test_template_pair(self, tag):
        request = build_mutation(args(templated=True), PermissionTier.ELEVATED, tag, "100")
        assert request.templated is True
        assert request.hoisted is False

    def test_flags_kept_when_content_changes_without_flags(self):
        tag = TagRecord(id=1, name="t", owner_id="100", content="c", hoisted=True, templated=False)
        request = build_mutation(args(content="new"), PermissionTier.ELEVATED, tag, "100")
        assert request.hoisted is True
        assert request.templated is False


class TestShape:

    def test_content_update(self, tag):
        request = build_mutation(args(content="new", hoist=True), PermissionTier.ELEVATED, tag, "100")
        assert request.kind is MutationKind.CONTENT
        assert request.content == "new"
        assert request.hoisted is True
        assert request.tag_id == tag.id

    def test_flag_only_update(self, tag):
        request = build_mutation(args(hoist=True), PermissionTier.ELEVATED, tag, "100")
        assert request.kind is MutationKind.FLAGS
        assert request.content is None

    def test_empty_content_is_flag_only(self, tag):
        request = build_mutation(args(content=""), PermissionTier.NONE, tag, "100")
        assert request.kind is MutationKind.FLAGS
