"""Thread-safe registry of portal session_id -> AuthGate."""
import threading
import logging
from typing import Optional

from app.config import settings
from app.modules.session.gate import AuthGate

logger = logging.getLogger(__name__)
_lock = threading.Lock()
_registry: dict[str, AuthGate] = {}


def prune(idle_ttl: Optional[float] = None) -> int:
    """Drop idle and logged-out sessions. Returns how many were removed."""
    ttl = settings.session_idle_ttl_seconds if idle_ttl is None else idle_ttl
    with _lock:
        evicted = [sid for sid, gate in _registry.items() if gate.is_evictable(ttl)]
        for session_id in evicted:
            del _registry[session_id]
    if evicted:
        logger.info("Evicted %d portal sessions", len(evicted))
    return len(evicted)


def register(gate: AuthGate) -> str:
    prune()
    with _lock:
        _registry[gate.session_id] = gate
        logger.debug("Registered portal session %s", gate.session_id)
    return gate.session_id


def unregister(session_id: str) -> None:
    with _lock:
        _registry.pop(session_id, None)
        logger.debug("Unregistered portal session %s", session_id)


def get_gate(session_id: Optional[str]) -> Optional[AuthGate]:
    if not session_id:
        return None
    prune()
    with _lock:
        return _registry.get(session_id)


def count() -> int:
    with _lock:
        return len(_registry)


def expire(session_id: Optional[str]) -> bool:
    """Route an authoritative session expiry to the gate. Returns True if the session was found."""
    gate = get_gate(session_id)
    if gate is None:
        return False
    gate.expire_session()
    return True


def invalidate(*names: str, user_id: Optional[str] = None) -> None:
    """Mark views stale in every session, or only in the sessions of `user_id`."""
    with _lock:
        gates = list(_registry.values())
    for gate in gates:
        if user_id is None or gate.owns(user_id):
            gate.mark_stale(*names)


def clear() -> None:
    with _lock:
        _registry.clear()
