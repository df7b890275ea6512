# cache.py
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from auditapi.core.devices import DeviceProfile
from auditapi.models.schema import AuditResult

log = logging.getLogger("page-audit")

CacheKey = Tuple[str, DeviceProfile]


@dataclass(frozen=True)
class CacheEntry:
    result: AuditResult
    created_at: float  # seconds, from the cache clock

    def is_fresh(self, now: float, ttl: float) -> bool:
        return now - self.created_at < ttl


class AuditCache:
    """In-process store of the last result per (url, device).

    Staleness is checked on read only; stale entries stay until overwritten.
    ``max_entries`` of 0 means unbounded; otherwise the oldest-written entry
    is evicted on ``put``.
    """

    def __init__(self, ttl_ms: int = 60 * 60 * 1000, max_entries: int = 0,
                 clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl_ms / 1000
        self.max_entries = max_entries
        self._clock = clock
        self._entries: Dict[CacheKey, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, url: str, device: DeviceProfile) -> Optional[AuditResult]:
        entry = self._entries.get((url, device))
        if entry is None:
            return None
        if not entry.is_fresh(self._clock(), self.ttl):
            log.debug("[%s] Cache entry for %s is stale", device.value, url)
            return None
        return entry.result

    def put(self, url: str, device: DeviceProfile, result: AuditResult) -> None:
        key = (url, device)
        # re-insert so dict order tracks write time
        self._entries.pop(key, None)
        self._entries[key] = CacheEntry(result=result, created_at=self._clock())
        if self.max_entries and len(self._entries) > self.max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            log.debug("Evicted cache entry for %s (%s)", oldest[0], oldest[1].value)
