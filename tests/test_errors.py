"""Tests for the error taxonomy and classify_error()."""

import asyncio

import asyncpg
import httpx

from tagbot.errors import (
    AuthorizationError,
    ConfigurationError,
    NotFoundError,
    TagbotError,
    ValidationError,
    classify_error,
    is_reportable,
)
from tagbot.i18n import t


# ── Taxonomy ────────────────────────────────────────────────

class TestTaxonomy:
    def test_key_and_params(self):
        e = ValidationError("command.issue-pr.invalid_owner", value="foo bar")
        assert isinstance(e, TagbotError)
        assert e.key == "command.issue-pr.invalid_owner"
        assert e.params == {"value": "foo bar"}

    def test_reportable(self):
        assert is_reportable(ValidationError("k"))
        assert is_reportable(AuthorizationError("k"))
        assert is_reportable(ConfigurationError("k"))
        assert not is_reportable(NotFoundError("k"))
        assert not is_reportable(RuntimeError("k"))


# ── httpx.HTTPStatusError ────────────────────────────────────

def _make_http_error(status_code: int) -> httpx.HTTPStatusError:
    request = httpx.Request("POST", "https://api.github.com/graphql")
    response = httpx.Response(status_code, request=request)
    return httpx.HTTPStatusError(
        f"{status_code} error", request=request, response=response
    )


class TestHTTPStatusError:
    def test_429(self):
        assert "rate limit" in classify_error(_make_http_error(429))

    def test_401(self):
        assert "credentials" in classify_error(_make_http_error(401))

    def test_403(self):
        assert "credentials" in classify_error(_make_http_error(403))

    def test_502(self):
        assert "server issues" in classify_error(_make_http_error(502))

    def test_unknown_status(self):
        assert "HTTP 418" in classify_error(_make_http_error(418))


# ── Database errors ──────────────────────────────────────────

class TestDatabaseErrors:
    def test_asyncpg_interface_error(self):
        msg = classify_error(asyncpg.InterfaceError("connection pool exhausted"))
        assert "connection pool" in msg.lower()

    def test_asyncpg_postgres_error(self):
        assert "Database error" in classify_error(asyncpg.PostgresError("relation does not exist"))


# ── Network / timeout errors ────────────────────────────────

class TestNetworkErrors:
    def test_connect_error(self):
        assert "Cannot connect" in classify_error(httpx.ConnectError("Connection refused"))

    def test_read_timeout(self):
        assert "timed out" in classify_error(httpx.ReadTimeout("read timed out"))

    def test_asyncio_timeout(self):
        assert "timed out" in classify_error(asyncio.TimeoutError())


# ── Fallback ─────────────────────────────────────────────────

class TestFallback:
    def test_unknown_exception_uses_generic_message(self):
        assert classify_error(ValueError("bad value")) == t("common.unexpected", "en")

    def test_details_stay_out_of_the_reply(self):
        assert "secret-dsn" not in classify_error(RuntimeError("secret-dsn"))


# ── Localization ────────────────────────────────────────────

class TestLocalized:
    def test_messages_come_from_catalog(self):
        assert classify_error(_make_http_error(418), "en") == t("errors.github_http", "en", code=418)

    def test_unknown_locale_falls_back_to_english(self):
        assert classify_error(asyncio.TimeoutError(), "xx") == "Request timed out. Please try again."
