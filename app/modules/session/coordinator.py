"""
Focus/visibility refresh coordination.

When the browser tab regains focus or becomes visible, the coordinator
revalidates the session and bumps a refresh token so every data view
re-fetches. At most one refresh runs at a time, and successive refreshes
are at least `min_interval` apart. An ambiguous validation failure never
logs the user out; that is reserved for SessionExpiryAuthority.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

VISIBLE = "visible"
HIDDEN = "hidden"


@dataclass(frozen=True)
class RefreshEnvironment:
    """Snapshot of the runtime conditions at the moment an event fires."""
    is_checking_auth: bool
    is_authenticated: bool
    visibility_state: str = VISIBLE
    online: bool = True


# get_current_user() -> (user | None, error | None)
GetCurrentUser = Callable[[], Awaitable[Tuple[Optional[Dict[str, Any]], Optional[Any]]]]
FetchProfile = Callable[[], Awaitable[Dict[str, Any]]]
TokenListener = Callable[[int], None]


class RefreshCoordinator:
    def __init__(
        self,
        get_current_user: GetCurrentUser,
        fetch_and_upsert_profile: FetchProfile,
        min_interval: float = 30.0,
        timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._get_current_user = get_current_user
        self._fetch_and_upsert_profile = fetch_and_upsert_profile
        self.min_interval = min_interval
        self.timeout = timeout
        self._clock = clock
        self._listeners: List[TokenListener] = []
        self.is_refreshing = False
        self.last_refresh_at: Optional[float] = None
        self.refresh_token = 0
        self.current_profile: Optional[Dict[str, Any]] = None

    def subscribe(self, listener: TokenListener) -> Callable[[], None]:
        """Register a listener for token bumps. Returns the unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def reset(self) -> None:
        self._listeners.clear()
        self.is_refreshing = False
        self.last_refresh_at = None
        self.refresh_token = 0
        self.current_profile = None

    def should_refresh(self, env: RefreshEnvironment) -> bool:
        if self.is_refreshing:
            return False
        if env.is_checking_auth or not env.is_authenticated:
            return False
        if env.visibility_state != VISIBLE or not env.online:
            return False
        if self.last_refresh_at is not None and self._clock() - self.last_refresh_at < self.min_interval:
            return False
        return True

    async def _bounded(self, awaitable: Awaitable):
        if self.timeout is None:
            return await awaitable
        return await asyncio.wait_for(awaitable, self.timeout)

    async def request_refresh(self, env: RefreshEnvironment) -> bool:
        """Run one guarded refresh. Returns True only if the token was bumped; never raises."""
        if not self.should_refresh(env):
            return False

        self.is_refreshing = True
        logger.debug("Running focus refresh")
        try:
            try:
                user, error = await self._bounded(self._get_current_user())
            except asyncio.TimeoutError:
                logger.warning("Focus refresh timed out validating the session; keeping current session state")
                return False
            if error or not user:
                logger.warning("Focus refresh found no user (network hiccup or session issue): %s", error)
                return False

            try:
                profile = await self._bounded(self._fetch_and_upsert_profile())
            except asyncio.TimeoutError:
                logger.warning("Focus refresh timed out fetching the profile")
                return False
            self.current_profile = profile
            self.last_refresh_at = self._clock()
            previous = self.refresh_token
            self.refresh_token = previous + 1
            logger.info("Focus refresh complete - refresh token %d -> %d", previous, self.refresh_token)
            self._notify()
            return True
        except Exception as e:
            logger.error("Focus refresh failed: %s", e)
            return False
        finally:
            self.is_refreshing = False

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self.refresh_token)
            except Exception as e:
                logger.error("Refresh listener failed: %s", e)
