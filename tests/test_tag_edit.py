"""Tests for the /tagedit command."""

from unittest.mock import AsyncMock, patch

import pytest

from tagbot.commands.dispatcher import Dispatcher
from tagbot.commands.tag_edit import TagEditCommand, resolve_tag_content
from tagbot.db.records import MutationKind, TagRecord
from tagbot.errors import AuthorizationError

from conftest import make_ctx


TAG = TagRecord(id=7, name="Test", owner_id="100", content="old", hoisted=False, templated=False)

MOD_SETTINGS = {"mod_role": "Moderator", "restrict_roles": {"tag": "Muted"}}


@pytest.fixture
def db():
    """Patch the database calls made by /tagedit."""
    async def fake_get_tag(community_id, name):
        return TAG if name.lower() == "test" else None

    with patch("tagbot.commands.tag_edit.get_tag", side_effect=fake_get_tag) as get_tag, \
         patch("tagbot.commands.tag_edit.apply_mutation", AsyncMock(return_value=True)) as apply_mutation, \
         patch("tagbot.commands.tag_edit.get_community_settings", AsyncMock(return_value=MOD_SETTINGS)):
        yield get_tag, apply_mutation


@pytest.fixture
def dispatcher():
    return Dispatcher([TagEditCommand()])


def recorder():
    replies = []

    async def reply(text):
        replies.append(text)

    return replies, reply


class TestResolvers:

    @pytest.mark.asyncio
    async def test_blank_content_rejected(self, ctx):
        assert await resolve_tag_content("   \n ", ctx) is None
        assert await resolve_tag_content("  hi  ", ctx) == "hi"


class TestPermissions:

    @pytest.mark.asyncio
    async def test_restricted_role_refused_before_prompting(self, db, dispatcher):
        get_tag, apply_mutation = db
        replies, reply = recorder()
        ctx = make_ctx(roles=frozenset({"member", "Muted"}))

        await dispatcher.invoke("tagedit", ctx, "Test new content", reply)

        assert replies == ["You are restricted from using tag commands."]
        get_tag.assert_not_called()
        apply_mutation.assert_not_called()

    @pytest.mark.asyncio
    async def test_restricted_owner_still_refused(self, db):
        command = TagEditCommand()
        with pytest.raises(AuthorizationError):
            await command.check_permissions(make_ctx(actor_id="100", roles=frozenset({"Muted"})))

    @pytest.mark.asyncio
    async def test_not_owner(self, db, dispatcher):
        _, apply_mutation = db
        replies, reply = recorder()

        await dispatcher.invoke("tagedit", make_ctx(actor_id="999"), "Test new content", reply)

        assert replies == ["You can only edit your own tags."]
        apply_mutation.assert_not_called()


class TestEdit:

    @pytest.mark.asyncio
    async def test_owner_edits_content(self, db, dispatcher):
        _, apply_mutation = db
        replies, reply = recorder()

        await dispatcher.invoke("tagedit", make_ctx(), "Test Some new content", reply)

        request = apply_mutation.call_args.args[0]
        assert request.kind is MutationKind.CONTENT
        assert request.content == "Some new content"
        assert request.editor_id == "100"
        assert replies == ["Successfully edited **Test**."]

    @pytest.mark.asyncio
    async def test_owner_flags_are_ignored(self, db, dispatcher):
        _, apply_mutation = db
        replies, reply = recorder()

        await dispatcher.invoke("tagedit", make_ctx(), "Test --hoist", reply)

        request = apply_mutation.call_args.args[0]
        assert request.kind is MutationKind.FLAGS
        assert request.hoisted is False
        assert replies == ["Successfully edited **Test**."]

    @pytest.mark.asyncio
    async def test_moderator_hoists(self, db, dispatcher):
        _, apply_mutation = db
        replies, reply = recorder()
        ctx = make_ctx(actor_id="555", roles=frozenset({"Moderator"}))

        await dispatcher.invoke("tagedit", ctx, "Test --pin", reply)

        request = apply_mutation.call_args.args[0]
        assert request.kind is MutationKind.FLAGS
        assert request.hoisted is True
        assert replies == ["Successfully edited **Test** to be hoisted."]

    @pytest.mark.asyncio
    async def test_too_long(self, db, dispatcher):
        _, apply_mutation = db
        replies, reply = recorder()

        await dispatcher.invoke("tagedit", make_ctx(), "Test " + "x" * 1950, reply)

        assert replies == ["Tags must be shorter than 1950 characters."]
        apply_mutation.assert_not_called()

    @pytest.mark.asyncio
    async def test_save_failure(self, db, dispatcher):
        _, apply_mutation = db
        apply_mutation.return_value = False
        replies, reply = recorder()

        await dispatcher.invoke("tagedit", make_ctx(), "Test content", reply)

        assert replies == ["The tag could not be saved. Please try again later."]


class TestPrompting:

    @pytest.mark.asyncio
    async def test_unknown_tag_then_content(self, db, dispatcher):
        _, apply_mutation = db
        replies, reply = recorder()
        ctx = make_ctx()

        await dispatcher.invoke("tagedit", ctx, "Nope", reply)
        assert replies[-1].startswith("@alice, a tag with the name **Nope** does not exist.")

        await dispatcher.handle_reply(ctx, "Test", reply)
        assert replies[-1].startswith("@alice, what should the new content be?")

        await dispatcher.handle_reply(ctx, "fresh content", reply)
        assert replies[-1] == "Successfully edited **Test**."
        assert apply_mutation.call_args.args[0].content == "fresh content"
