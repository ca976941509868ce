from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from app.core.errors import (
    SessionExpiredError,
    SessionExpiryAuthority,
    is_auth_error,
    is_missing_table_error,
    to_http_error,
    wrap_supabase_error,
)


@pytest.mark.parametrize("error", [
    SimpleNamespace(status=401, message="Unauthorized"),
    SimpleNamespace(status_code=403, message="Forbidden"),
    {"code": "401", "message": "nope"},
    Exception("JWT expired"),
    Exception("Invalid JWT: unable to parse"),
    Exception("refresh_token_not_found"),
    Exception("User not found"),
])
def test_auth_errors_are_recognised(error):
    assert is_auth_error(error) is True


@pytest.mark.parametrize("error", [
    None,
    Exception("Failed to fetch"),
    SimpleNamespace(status=500, message="Internal error"),
    {"code": "42P01", "message": "relation \"profiles\" does not exist"},
])
def test_other_errors_are_not_auth_errors(error):
    assert is_auth_error(error) is False


def test_wrap_supabase_error():
    assert isinstance(wrap_supabase_error(Exception("jwt expired")), SessionExpiredError)
    original = ValueError("bad input")
    assert wrap_supabase_error(original) is original


def test_to_http_error():
    passthrough = HTTPException(status_code=404, detail="Asset not found")
    assert to_http_error(passthrough) is passthrough
    assert isinstance(to_http_error(Exception("Not authenticated")), SessionExpiredError)

    mapped = to_http_error(Exception("connection reset"))
    assert isinstance(mapped, HTTPException)
    assert mapped.status_code == 500


def test_authority_calls_handler_only_for_auth_errors():
    calls = []
    authority = SessionExpiryAuthority()
    authority.set_handler(lambda: calls.append("expired"))

    assert authority.handle_possible_session_error(Exception("timeout")) is False
    assert authority.handle_possible_session_error(SimpleNamespace(status=401, message="x")) is True
    assert calls == ["expired"]


def test_authority_without_handler_still_reports():
    assert SessionExpiryAuthority().handle_possible_session_error(SessionExpiredError()) is True


def test_missing_table_detection():
    assert is_missing_table_error({"code": "42P01", "message": ""}) is True
    assert is_missing_table_error(Exception('relation "client_notes" does not exist')) is True
    assert is_missing_table_error(Exception("duplicate key")) is False
