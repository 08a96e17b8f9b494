import logging
import time
from collections.abc import Callable

from domain.models.currency import CacheEntry, RateTable

logger = logging.getLogger(__name__)


class RateCache:
    """In-process rate tables keyed by base currency.

    Concurrent writers for the same base are not coordinated; the last write wins.
    Entries are immutable snapshots, so a reader never sees a half-written table.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    @property
    def ttl(self) -> float:
        return self._ttl

    def _make_key(self, base_currency: str) -> str:
        return f'latest:{base_currency}'

    def read(self, base_currency: str, allow_stale: bool = False) -> RateTable | None:
        key = self._make_key(base_currency)
        entry = self._entries.get(key)
        if entry is None:
            return None

        if allow_stale:
            return entry.rate_table

        age = self._clock() - entry.stored_at
        if age > self._ttl:
            # pop with default: a concurrent write may already have replaced it
            if self._entries.get(key) is entry:
                self._entries.pop(key, None)
            logger.debug(f'Evicted expired rates for {base_currency} (age {age:.1f}s)')
            return None

        return entry.rate_table

    def write(self, base_currency: str, rate_table: RateTable) -> None:
        self._entries[self._make_key(base_currency)] = CacheEntry(
            rate_table=rate_table, stored_at=self._clock()
        )

    def cached_bases(self) -> list[str]:
        return sorted(key.split(':', 1)[1] for key in self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
