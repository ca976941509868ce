"""
Session expiry detection.

Only authoritative unauthorized responses from real data calls end a portal
session. Background checks (focus refresh) never route through here.
"""

import logging
from typing import Any, Callable, Optional

from fastapi import HTTPException

logger = logging.getLogger(__name__)

SESSION_EXPIRED_MESSAGE = "Your session has expired. Please log in again."

_AUTH_ERROR_PHRASES = (
    "jwt expired",
    "invalid jwt",
    "not authenticated",
    "invalid authentication",
    "refresh_token_not_found",
    "invalid refresh token",
    "user not found",
)


def _error_status(error: Any) -> Optional[int]:
    for attr in ("status", "status_code", "code"):
        value = getattr(error, attr, None)
        if value is None and isinstance(error, dict):
            value = error.get(attr)
        if value is None:
            continue
        try:
            return int(value)
        except (TypeError, ValueError):
            continue
    return None


def _error_message(error: Any) -> str:
    if isinstance(error, dict):
        return str(error.get("message") or "")
    message = getattr(error, "message", None)
    if message is None:
        message = getattr(error, "detail", None)
    if message is None:
        message = str(error)
    return str(message)


def is_auth_error(error: Any) -> bool:
    """True if the error is an unauthorized/forbidden response from the backend."""
    if not error:
        return False
    if _error_status(error) in (401, 403):
        return True
    msg = _error_message(error).lower()
    return any(phrase in msg for phrase in _AUTH_ERROR_PHRASES)


class SessionExpiredError(Exception):
    def __init__(self, message: str = SESSION_EXPIRED_MESSAGE):
        super().__init__(message)
        self.message = message


def wrap_supabase_error(error: Exception) -> Exception:
    """Convert auth failures into SessionExpiredError, pass everything else through."""
    if isinstance(error, SessionExpiredError):
        return error
    if is_auth_error(error):
        return SessionExpiredError()
    return error


class SessionExpiryAuthority:
    """Holds the single handler allowed to force a logout."""

    def __init__(self):
        self._handler: Optional[Callable[[], None]] = None

    def set_handler(self, handler: Optional[Callable[[], None]]) -> None:
        self._handler = handler

    def handle_possible_session_error(self, error: Any) -> bool:
        """Returns True if it was a session error and was handled."""
        if not (isinstance(error, SessionExpiredError) or is_auth_error(error)):
            return False
        logger.warning("Session expired or auth error detected: %s", _error_message(error))
        if self._handler is not None:
            self._handler()
        return True


def to_http_error(error: Exception) -> Exception:
    """Map a failed Supabase call onto the exception a route should raise."""
    if isinstance(error, HTTPException):
        return error
    wrapped = wrap_supabase_error(error)
    if isinstance(wrapped, SessionExpiredError):
        return wrapped
    return HTTPException(status_code=500, detail=str(error))


def is_missing_table_error(error: Any) -> bool:
    msg = _error_message(error).lower()
    code = getattr(error, "code", None) if not isinstance(error, dict) else error.get("code")
    return code == "42P01" or "relation" in msg or "does not exist" in msg
