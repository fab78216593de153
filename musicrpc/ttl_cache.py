"""In-memory TTL caches for songs and Apple Music metadata."""

import logging
import threading
import time
from datetime import timedelta
from typing import Callable, Dict, Generic, Hashable, Optional, Tuple, TypeVar, Union

from .errors import CacheClosedError

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

TTL = Union[float, int, timedelta]


def _seconds(ttl: TTL) -> float:
    if isinstance(ttl, timedelta):
        return ttl.total_seconds()
    return float(ttl)


class TTLCache(Generic[K, V]):
    """Thread-safe mapping where every entry carries its own expiration.

    Expired entries are dropped lazily on ``get`` and, when ``sweep_interval``
    is set, by a daemon timer that purges the whole cache periodically.
    """

    def __init__(
        self,
        name: str = "cache",
        sweep_interval: Optional[float] = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.name = name
        self._clock = clock
        self._data: Dict[K, Tuple[V, float]] = {}
        self._lock = threading.RLock()
        self._closed = False
        self._sweep_interval = sweep_interval
        self._timer: Optional[threading.Timer] = None
        if sweep_interval:
            self._schedule_sweep()

    def _schedule_sweep(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._timer = threading.Timer(self._sweep_interval, self._sweep)
            self._timer.daemon = True
            self._timer.start()

    def _sweep(self) -> None:
        purged = self.purge_expired()
        if purged:
            logger.debug("purged expired entries cache=%s count=%d", self.name, purged)
        self._schedule_sweep()

    def _check_open(self) -> None:
        if self._closed:
            raise CacheClosedError(f"{self.name} is closed")

    def get(self, key: K) -> Tuple[Optional[V], bool]:
        with self._lock:
            self._check_open()
            entry = self._data.get(key)
            if entry is None:
                return None, False
            value, expires_at = entry
            if expires_at <= self._clock():
                del self._data[key]
                return None, False
            return value, True

    def set(self, key: K, value: V, ttl: TTL) -> None:
        with self._lock:
            self._check_open()
            self._data[key] = (value, self._clock() + _seconds(ttl))

    def delete(self, key: K) -> None:
        with self._lock:
            self._check_open()
            self._data.pop(key, None)

    def purge_expired(self) -> int:
        with self._lock:
            if self._closed:
                return 0
            now = self._clock()
            expired = [key for key, (_, expires_at) in self._data.items() if expires_at <= now]
            for key in expired:
                del self._data[key]
            return len(expired)

    def __len__(self) -> int:
        with self._lock:
            now = self._clock()
            return sum(1 for _, expires_at in self._data.values() if expires_at > now)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            timer, self._timer = self._timer, None
            self._data.clear()
        if timer is not None:
            timer.cancel()


class CacheSet:
    """Song, artwork, share URL, artist artwork and share id caches for one running instance."""

    def __init__(self, sweep_interval: Optional[float] = 60.0, clock: Callable[[], float] = time.monotonic):
        self.songs: TTLCache[int, object] = TTLCache("songs", sweep_interval, clock)
        self.artwork: TTLCache[str, str] = TTLCache("artwork", sweep_interval, clock)
        self.share_urls: TTLCache[str, str] = TTLCache("share_urls", sweep_interval, clock)
        self.artist_artwork: TTLCache[str, str] = TTLCache("artist_artwork", sweep_interval, clock)
        self.share_ids: TTLCache[str, str] = TTLCache("share_ids", sweep_interval, clock)

    def __iter__(self):
        return iter((self.songs, self.artwork, self.share_urls, self.artist_artwork, self.share_ids))

    def close(self) -> None:
        for cache in self:
            cache.close()
