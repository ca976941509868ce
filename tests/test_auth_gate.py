"""Tests for AuthGate, DataView and the portal session registry."""

import asyncio

import pytest

from app.config import settings
from app.core.errors import SESSION_EXPIRED_MESSAGE, SessionExpiredError
from app.modules.session import registry
from app.modules.session.gate import SIGNED_IN, SIGNED_OUT, AuthGate, mark_stale, read_through
from app.modules.session.views import DataView


class FakeClock:
    def __init__(self, now=500.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeProvider:
    def __init__(self, user_id="user-1"):
        self.user = {"id": user_id, "email": "casey@example.com"}
        self.error = None
        self.raise_on_validate = None
        self.profile_error = None
        self.profile = {"id": user_id, "full_name": "Casey", "is_admin": False}

    async def get_current_user(self):
        if self.raise_on_validate is not None:
            raise self.raise_on_validate
        return self.user, self.error

    async def init_user_profile(self):
        if self.profile_error is not None:
            raise self.profile_error
        return dict(self.profile)


class Loader:
    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return {"load": self.calls}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def gate(provider, clock):
    return AuthGate(provider, min_interval=30.0, notice_seconds=5.0, clock=clock)


@pytest.fixture
def signed_in(gate):
    asyncio.run(gate.check_auth())
    return gate


def test_gate_starts_checking(gate):
    assert gate.is_checking_auth is True
    assert gate.is_authenticated is False
    assert gate.coordinator is None
    assert gate.refresh_token == 0


def test_check_auth_authenticates_and_loads_profile(signed_in, provider):
    assert signed_in.is_checking_auth is False
    assert signed_in.is_authenticated is True
    assert signed_in.current_user == provider.profile
    assert signed_in.coordinator is not None


def test_check_auth_without_user(gate, provider):
    provider.user = None

    assert asyncio.run(gate.check_auth()) is False
    assert gate.is_checking_auth is False
    assert gate.coordinator is None


def test_check_auth_profile_failure_does_not_block(gate, provider):
    provider.profile_error = RuntimeError("profiles table not configured properly")

    assert asyncio.run(gate.check_auth()) is True
    assert gate.current_user is None
    assert gate.is_checking_auth is False


def test_check_auth_exception_leaves_gate_unauthenticated(gate, provider):
    provider.raise_on_validate = ConnectionError("network down")

    assert asyncio.run(gate.check_auth()) is False
    assert gate.is_checking_auth is False
    assert gate.is_authenticated is False


def test_focus_refresh_bumps_token_and_syncs_user(signed_in, provider):
    provider.profile = {"id": "user-1", "full_name": "Casey Renamed", "is_admin": False}

    assert asyncio.run(signed_in.on_focus()) is True
    assert signed_in.refresh_token == 1
    assert signed_in.current_user["full_name"] == "Casey Renamed"


def test_focus_refresh_failure_keeps_user_signed_in(signed_in, provider):
    provider.error = Exception("Failed to fetch")

    assert asyncio.run(signed_in.on_focus()) is False
    assert signed_in.is_authenticated is True
    assert signed_in.current_user is not None
    assert signed_in.notice() is None


def test_hidden_visibility_change_is_ignored(signed_in):
    assert asyncio.run(signed_in.on_visibility_change("hidden")) is False
    assert signed_in.refresh_token == 0


def test_visible_visibility_change_refreshes(signed_in):
    assert asyncio.run(signed_in.on_visibility_change("visible")) is True
    assert signed_in.refresh_token == 1


def test_focus_before_authentication_is_a_noop(gate):
    assert asyncio.run(gate.on_focus()) is False


def test_signed_out_event_tears_down_coordinator(signed_in):
    asyncio.run(signed_in.on_focus())
    asyncio.run(signed_in.on_auth_state_change(SIGNED_OUT))

    assert signed_in.is_authenticated is False
    assert signed_in.current_user is None
    assert signed_in.coordinator is None
    assert signed_in.refresh_token == 0


def test_signed_in_event_starts_fresh_coordinator(gate, provider):
    asyncio.run(gate.on_auth_state_change(SIGNED_IN))

    assert gate.is_authenticated is True
    assert gate.is_checking_auth is False
    assert gate.current_user == provider.profile
    assert gate.refresh_token == 0
    # first refresh after sign-in is never throttled
    assert asyncio.run(gate.on_focus()) is True


def test_signed_in_profile_failure_stays_unauthenticated(gate, provider):
    provider.profile_error = RuntimeError("boom")

    asyncio.run(gate.on_auth_state_change(SIGNED_IN))

    assert gate.is_authenticated is False
    assert gate.is_checking_auth is False


def test_expire_session_shows_notice_for_five_seconds(signed_in, clock):
    signed_in.expire_session()

    assert signed_in.is_authenticated is False
    assert signed_in.current_user is None
    assert signed_in.notice() == SESSION_EXPIRED_MESSAGE
    clock.advance(4.9)
    assert signed_in.notice() == SESSION_EXPIRED_MESSAGE
    clock.advance(0.2)
    assert signed_in.notice() is None


def test_authority_routes_only_auth_errors(signed_in):
    assert signed_in.authority.handle_possible_session_error(Exception("Failed to fetch")) is False
    assert signed_in.is_authenticated is True

    assert signed_in.authority.handle_possible_session_error(SessionExpiredError()) is True
    assert signed_in.is_authenticated is False


def test_read_view_reloads_only_when_token_moves(signed_in):
    loader = Loader()

    assert signed_in.read_view("requests", loader) == {"load": 1}
    assert signed_in.read_view("requests", loader) == {"load": 1}
    asyncio.run(signed_in.on_focus())
    assert signed_in.read_view("requests", loader) == {"load": 2}
    assert loader.calls == 2


def test_mark_stale_forces_reload(signed_in):
    history, board = Loader(), Loader()
    signed_in.read_view("history", history)
    signed_in.read_view("board", board)

    mark_stale(signed_in, "history")
    signed_in.read_view("history", history)
    signed_in.read_view("board", board)
    assert (history.calls, board.calls) == (2, 1)

    signed_in.mark_stale()
    signed_in.read_view("board", board)
    assert board.calls == 2


def test_read_through_ignores_other_users_session(signed_in):
    loader = Loader()

    read_through(signed_in, "someone-else", "assets", loader)
    read_through(signed_in, "someone-else", "assets", loader)

    assert loader.calls == 2
    assert "assets" not in signed_in.views


def test_read_through_without_gate_calls_loader():
    loader = Loader()

    assert read_through(None, "user-1", "assets", loader) == {"load": 1}
    mark_stale(None, "assets")


def test_read_through_uses_gate_cache_for_owner(signed_in):
    loader = Loader()

    read_through(signed_in, "user-1", "assets", loader)
    read_through(signed_in, "user-1", "assets", loader)

    assert loader.calls == 1


def test_data_view_keeps_cache_when_loader_fails():
    state = {"fail": False}

    def loader():
        if state["fail"]:
            raise RuntimeError("query failed")
        return ["row"]

    view = DataView("rows", loader)
    assert view.read(0) == ["row"]
    state["fail"] = True

    with pytest.raises(RuntimeError):
        view.read(1)
    assert view.is_loaded is True
    assert view.version == 0


def test_registry_round_trip(gate):
    registry.clear()
    session_id = registry.register(gate)

    assert registry.get_gate(session_id) is gate
    assert registry.get_gate(None) is None
    assert registry.expire("missing") is False

    registry.unregister(session_id)
    assert registry.get_gate(session_id) is None


def test_data_view_reloads_after_max_age(clock):
    loader = Loader()
    view = DataView("assets", loader, max_age=60.0, clock=clock)

    view.read(0)
    clock.advance(59)
    assert view.read(0) == {"load": 1}
    clock.advance(1)
    assert view.read(0) == {"load": 2}


def test_gate_views_use_max_age(provider, clock):
    gate = AuthGate(provider, view_max_age=30.0, clock=clock)
    asyncio.run(gate.check_auth())
    loader = Loader()

    gate.read_view("assets", loader)
    clock.advance(31)
    gate.read_view("assets", loader)

    assert loader.calls == 2


def test_view_max_age_never_outlives_signed_urls():
    assert 0 < settings.view_max_age <= settings.signed_url_ttl_seconds


def test_check_auth_records_owner(signed_in):
    assert signed_in.user_id == "user-1"
    assert signed_in.owns("user-1") is True
    assert signed_in.owns("user-2") is False
    assert signed_in.owns(None) is False


def test_registry_invalidate_targets_owner_sessions(clock):
    registry.clear()
    mine = AuthGate(FakeProvider("user-1"), clock=clock)
    theirs = AuthGate(FakeProvider("user-2"), clock=clock)
    for g in (mine, theirs):
        asyncio.run(g.check_auth())
        registry.register(g)
    mine_loader, theirs_loader = Loader(), Loader()
    mine.read_view("assets", mine_loader)
    theirs.read_view("assets", theirs_loader)

    registry.invalidate("assets", user_id="user-1")
    mine.read_view("assets", mine_loader)
    theirs.read_view("assets", theirs_loader)
    assert (mine_loader.calls, theirs_loader.calls) == (2, 1)

    registry.invalidate("assets")
    mine.read_view("assets", mine_loader)
    theirs.read_view("assets", theirs_loader)
    assert (mine_loader.calls, theirs_loader.calls) == (3, 2)
    registry.clear()


def test_registry_evicts_idle_sessions(signed_in, clock):
    registry.clear()
    session_id = registry.register(signed_in)

    clock.advance(100)
    assert registry.prune(idle_ttl=120) == 0
    signed_in.touch()
    clock.advance(100)
    assert registry.prune(idle_ttl=120) == 0
    clock.advance(21)
    assert registry.prune(idle_ttl=120) == 1
    assert registry.get_gate(session_id) is None


def test_registry_evicts_expired_session_after_notice(signed_in, clock):
    registry.clear()
    session_id = registry.register(signed_in)

    assert registry.expire(session_id) is True
    assert registry.get_gate(session_id) is signed_in
    clock.advance(5.1)
    assert registry.get_gate(session_id) is None
    assert registry.count() == 0
