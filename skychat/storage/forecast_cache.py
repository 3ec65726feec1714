"""In-memory TTL cache for forecast results, keyed by rounded coordinates."""

import logging
import threading
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from skychat.models.common import Clock, monotonic_clock
from skychat.models.forecast import ForecastResult
from skychat.storage.staleness import is_expired

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 600.0
DEFAULT_KEY_PRECISION = 3


def forecast_cache_key(
    lat: float, lon: float, precision: int = DEFAULT_KEY_PRECISION
) -> str:
    """Derive the cache key for a coordinate pair.

    Coordinates are rounded half-up to ``precision`` decimals (3 ~= 110 m), so
    nearby points share an entry.
    """
    return f"forecast:{_round_coord(lat, precision)}:{_round_coord(lon, precision)}"


def _round_coord(value: float, precision: int) -> str:
    quantum = Decimal(1).scaleb(-precision)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    if rounded == 0:
        rounded = abs(rounded)  # -0.000 and 0.000 share a key
    return f"{rounded:.{precision}f}"


@dataclass(frozen=True)
class CacheEntry:
    key: str
    value: ForecastResult
    born_at: float
    ttl_seconds: float


class ForecastCache:
    """Thread-safe key/value store whose entries expire after a fixed TTL.

    Expired entries read as misses and are evicted lazily on lookup.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Clock = monotonic_clock,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> ForecastResult | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                logger.debug("Cache miss: %s", key)
                return None
            if is_expired(entry.born_at, entry.ttl_seconds, self._clock()):
                del self._entries[key]
                logger.debug("Cache expired: %s", key)
                return None
            logger.debug("Cache hit: %s", key)
            return entry.value

    def set(self, key: str, value: ForecastResult) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(
                key=key,
                value=value,
                born_at=self._clock(),
                ttl_seconds=self.ttl_seconds,
            )

    def purge_expired(self) -> int:
        """Drop every expired entry. Returns the number removed."""
        with self._lock:
            now = self._clock()
            stale = [
                k for k, e in self._entries.items()
                if is_expired(e.born_at, e.ttl_seconds, now)
            ]
            for k in stale:
                del self._entries[k]
            return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
