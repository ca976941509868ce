import logging
import time
import uuid
from typing import Any, Callable, Dict, Optional

from app.core.errors import SESSION_EXPIRED_MESSAGE, SessionExpiryAuthority
from app.modules.session.coordinator import (
    RefreshCoordinator, RefreshEnvironment, VISIBLE,
)
from app.modules.session.views import DataView

logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"


class AuthGate:
    """
    Top-level authentication state of one portal session.

    Owns the refresh coordinator for as long as the user is authenticated and
    the data views that re-fetch when its refresh token moves.
    """

    def __init__(
        self,
        provider,
        min_interval: float = 30.0,
        refresh_timeout: Optional[float] = None,
        notice_seconds: float = 5.0,
        view_max_age: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.session_id = str(uuid.uuid4())
        # provider: get_current_user() -> (user, error) and init_user_profile() -> profile, both awaitable
        self.provider = provider
        self._min_interval = min_interval
        self._refresh_timeout = refresh_timeout
        self._notice_seconds = notice_seconds
        self._view_max_age = view_max_age
        self._clock = clock
        self.last_seen_at = clock()

        self.is_checking_auth = True
        self.is_authenticated = False
        self.current_user: Optional[Dict[str, Any]] = None
        # id of the auth user the session was opened for; kept after logout
        self.user_id: Optional[str] = None
        self.coordinator: Optional[RefreshCoordinator] = None
        self.views: Dict[str, DataView] = {}
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._notice: Optional[str] = None
        self._notice_expires_at = 0.0

        self.authority = SessionExpiryAuthority()
        self.authority.set_handler(self.expire_session)

    @property
    def refresh_token(self) -> int:
        return self.coordinator.refresh_token if self.coordinator else 0

    @property
    def is_refreshing(self) -> bool:
        return bool(self.coordinator and self.coordinator.is_refreshing)

    def _set_authenticated(self, authenticated: bool) -> None:
        if authenticated and self.coordinator is None:
            self.coordinator = RefreshCoordinator(
                self.provider.get_current_user,
                self.provider.init_user_profile,
                min_interval=self._min_interval,
                timeout=self._refresh_timeout,
                clock=self._clock,
            )
            self._unsubscribe = self.coordinator.subscribe(self._on_refreshed)
        elif not authenticated and self.coordinator is not None:
            if self._unsubscribe:
                self._unsubscribe()
                self._unsubscribe = None
            self.coordinator.reset()
            self.coordinator = None
            self.views.clear()
        self.is_authenticated = authenticated

    def _on_refreshed(self, token: int) -> None:
        if self.coordinator and self.coordinator.current_profile is not None:
            self.current_user = self.coordinator.current_profile

    async def check_auth(self) -> bool:
        """Initial authentication check. Always leaves is_checking_auth False."""
        try:
            user, error = await self.provider.get_current_user()
            authenticated = bool(user) and not error
            logger.info("Auth check result: %s", authenticated)
            if authenticated:
                self.user_id = user.get("id")
                try:
                    self.current_user = await self.provider.init_user_profile()
                except Exception as e:
                    # The UI must not block on a missing profile
                    logger.error("Failed to initialize user profile: %s", e)
                    self.current_user = None
            else:
                self.current_user = None
            self._set_authenticated(authenticated)
        except Exception as e:
            logger.error("Auth check failed: %s", e)
            self.current_user = None
            self._set_authenticated(False)
        finally:
            self.is_checking_auth = False
        return self.is_authenticated

    async def on_auth_state_change(self, event: str) -> None:
        logger.info("Auth state changed: %s", event)
        if event == SIGNED_IN:
            try:
                self.current_user = await self.provider.init_user_profile()
                self._set_authenticated(True)
                if self.user_id is None:
                    self.user_id = self.current_user.get("id")
            except Exception as e:
                logger.error("Failed to initialize user profile: %s", e)
            finally:
                self.is_checking_auth = False
        elif event == SIGNED_OUT:
            self.current_user = None
            self._set_authenticated(False)
            self.is_checking_auth = False

    def _environment(self, visibility_state: str, online: bool) -> RefreshEnvironment:
        return RefreshEnvironment(
            is_checking_auth=self.is_checking_auth,
            is_authenticated=self.is_authenticated,
            visibility_state=visibility_state,
            online=online,
        )

    async def on_focus(self, visibility_state: str = VISIBLE, online: bool = True) -> bool:
        if self.coordinator is None:
            return False
        return await self.coordinator.request_refresh(self._environment(visibility_state, online))

    async def on_visibility_change(self, visibility_state: str, online: bool = True) -> bool:
        if visibility_state != VISIBLE:
            return False
        return await self.on_focus(visibility_state, online)

    def expire_session(self) -> None:
        """Authoritative logout, raised only by explicit unauthorized responses."""
        logger.info("Session expired - clearing auth state")
        self.current_user = None
        self._set_authenticated(False)
        self._notice = SESSION_EXPIRED_MESSAGE
        self._notice_expires_at = self._clock() + self._notice_seconds

    def notice(self) -> Optional[str]:
        if self._notice and self._clock() < self._notice_expires_at:
            return self._notice
        self._notice = None
        return None

    def touch(self) -> None:
        self.last_seen_at = self._clock()

    def owns(self, user_id: Optional[str]) -> bool:
        return bool(user_id) and user_id == self.user_id

    def is_evictable(self, idle_ttl: float) -> bool:
        """Idle too long, or logged out with no expiry notice left to show."""
        if self._clock() - self.last_seen_at > idle_ttl:
            return True
        return not self.is_checking_auth and not self.is_authenticated and self.notice() is None

    def read_view(self, name: str, loader: Callable[[], Any]) -> Any:
        view = self.views.get(name)
        if view is None:
            view = self.views[name] = DataView(name, loader, max_age=self._view_max_age, clock=self._clock)
        return view.read(self.refresh_token, loader)

    def mark_stale(self, *names: str) -> None:
        for name in names or list(self.views):
            view = self.views.get(name)
            if view is not None:
                view.mark_stale()

    def snapshot(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "is_checking_auth": self.is_checking_auth,
            "is_authenticated": self.is_authenticated,
            "is_refreshing": self.is_refreshing,
            "refresh_token": self.refresh_token,
            "current_user": self.current_user,
            "notice": self.notice(),
        }


def read_through(gate: Optional[AuthGate], user_id: str, name: str, loader: Callable[[], Any]) -> Any:
    """Serve a data view from the portal session's cache when the session belongs to this user."""
    if gate is None or not gate.is_authenticated or not gate.owns(user_id):
        return loader()
    return gate.read_view(name, loader)


def mark_stale(gate: Optional[AuthGate], *names: str) -> None:
    if gate is not None:
        gate.mark_stale(*names)
