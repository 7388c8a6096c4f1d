"""In-memory response cache with a fixed time-to-live."""
import asyncio
import logging
import threading
import time
from datetime import date
from typing import Any, Callable, Dict, Optional, Tuple, Union

logger = logging.getLogger(__name__)


def range_cache_key(prefix: str, date_from: Union[date, str], date_to: Union[date, str]) -> str:
    """Key for a query over a resolved (already defaulted) date range."""
    f = date_from.isoformat() if isinstance(date_from, date) else date_from
    t = date_to.isoformat() if isinstance(date_to, date) else date_to
    return f"{prefix}_{f}_{t}"


class TTLCache:
    """
    key -> (value, stored_at). An entry older than ttl_seconds is stale: `get`
    evicts it lazily and the periodic sweep removes whatever `get` never revisits.
    """

    def __init__(self, ttl_seconds: float, enabled: bool = True, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.enabled = enabled
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}
        self._lock = threading.Lock()
        self._sweeper: Optional[asyncio.Task] = None

    def _expired(self, stored_at: float, now: float) -> bool:
        return now - stored_at > self.ttl_seconds

    def get(self, key: str) -> Optional[Any]:
        """Cached value, or None if disabled, missing or stale."""
        if not self.enabled:
            return None
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, stored_at = entry
            if self._expired(stored_at, self._clock()):
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any) -> None:
        if not self.enabled:
            return
        with self._lock:
            self._entries[key] = (value, self._clock())

    def sweep(self) -> int:
        """Evict every expired entry. Returns how many were removed."""
        with self._lock:
            now = self._clock()
            stale = [k for k, (_, stored_at) in self._entries.items() if self._expired(stored_at, now)]
            for k in stale:
                del self._entries[k]
        if stale:
            logger.debug("Cache sweep evicted %d entries", len(stale))
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self.ttl_seconds)
            self.sweep()

    def start_sweeper(self) -> None:
        """Run `sweep` every TTL on the current event loop. A non-positive TTL has no sweeper."""
        if self.ttl_seconds <= 0:
            logger.warning("Cache TTL is %s; background sweep disabled", self.ttl_seconds)
            return
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.get_running_loop().create_task(self._sweep_forever())

    async def stop_sweeper(self) -> None:
        """Cancel the sweep task and drop all entries."""
        if self._sweeper is not None:
            self._sweeper.cancel()
            try:
                await self._sweeper
            except asyncio.CancelledError:
                pass
            self._sweeper = None
        self.clear()
