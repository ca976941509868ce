import logging
import time
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

# Views served through a portal session
REQUEST_HISTORY_VIEW = "request_history"
ADMIN_BOARD_VIEW = "admin_board"
ADMIN_CLIENTS_VIEW = "admin_clients"
ASSET_LIBRARY_VIEW = "asset_library"

_UNLOADED = object()


class DataView:
    """
    Cached result of a loader.

    Re-fetched whenever the refresh token changes, when marked stale, and
    once the cached result is older than `max_age` seconds.
    """

    def __init__(
        self,
        name: str,
        loader: Callable[[], Any],
        max_age: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self._loader = loader
        self.max_age = max_age
        self._clock = clock
        self._data: Any = _UNLOADED
        self._version: Optional[int] = None
        self._loaded_at = 0.0

    @property
    def is_loaded(self) -> bool:
        return self._data is not _UNLOADED

    @property
    def version(self) -> Optional[int]:
        return self._version

    def mark_stale(self) -> None:
        self._version = None

    def is_expired(self) -> bool:
        return self.max_age is not None and self._clock() - self._loaded_at >= self.max_age

    def read(self, token: int, loader: Optional[Callable[[], Any]] = None) -> Any:
        if loader is not None:
            self._loader = loader
        if self._data is _UNLOADED or self._version != token or self.is_expired():
            logger.debug("Loading view %s at refresh token %d", self.name, token)
            data = self._loader()
            self._data = data
            self._version = token
            self._loaded_at = self._clock()
        return self._data
