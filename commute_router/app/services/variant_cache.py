from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable

from commute_router.domain.models import GeoPoint, RouteVariant

DEFAULT_RESULT_TTL_S = 15 * 60.0

CacheKey = tuple[tuple[float, float], tuple[float, float]]


@dataclass(slots=True)
class RouteVariantCache:
    """Short-lived cache of synthesized variants per origin/destination pair.

    Coordinates are rounded to 5 decimals (about 1 m) so repeated searches
    for the same places hit the cache.
    """

    ttl_s: float = DEFAULT_RESULT_TTL_S
    clock: Callable[[], float] = time.monotonic
    _entries: dict[CacheKey, tuple[float, tuple[RouteVariant, ...]]] = field(
        default_factory=dict, init=False, repr=False
    )

    @staticmethod
    def key(origin: GeoPoint, destination: GeoPoint) -> CacheKey:
        return (origin.rounded(5), destination.rounded(5))

    def get(
        self, origin: GeoPoint, destination: GeoPoint
    ) -> tuple[RouteVariant, ...] | None:
        k = self.key(origin, destination)
        entry = self._entries.get(k)
        if entry is None:
            return None
        stored_at, variants = entry
        if (self.clock() - stored_at) >= self.ttl_s:
            self._entries.pop(k, None)
            return None
        return variants

    def put(
        self,
        origin: GeoPoint,
        destination: GeoPoint,
        variants: tuple[RouteVariant, ...],
    ) -> None:
        now = self.clock()
        self.purge_expired(now)
        self._entries[self.key(origin, destination)] = (now, variants)

    def purge_expired(self, now: float | None = None) -> int:
        """Drop every expired entry; returns how many were removed."""

        if now is None:
            now = self.clock()
        expired = [
            k for k, (stored_at, _) in self._entries.items() if now - stored_at >= self.ttl_s
        ]
        for k in expired:
            del self._entries[k]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()
