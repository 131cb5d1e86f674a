from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable

from commute_router.app.ports.output import IStationFeed
from commute_router.domain.exceptions import StationFeedUnavailable
from commute_router.domain.models import (
    StationInformation,
    StationRecord,
    StationStatus,
)

logger = logging.getLogger(__name__)

DEFAULT_TTL_S = 60.0


@dataclass(frozen=True, slots=True)
class StationSnapshot:
    stations: tuple[StationRecord, ...]
    fetched_at: float


def join_station_feeds(
    information: Iterable[StationInformation], status: Iterable[StationStatus]
) -> tuple[StationRecord, ...]:
    """Join inventory with live status by station_id.

    Inventory rows with no status are kept with an all-unavailable status so
    station identity survives a partial feed outage. Status rows without an
    inventory row are dropped (no location to route to).
    """

    status_by_id = {s.station_id: s for s in status}
    out: list[StationRecord] = []
    for info in information:
        st = status_by_id.get(info.station_id)
        if st is None:
            logger.debug("No status for station %s", info.station_id)
            st = StationStatus.unavailable(info.station_id)
        out.append(StationRecord.from_feeds(info, st))
    return tuple(out)


@dataclass(slots=True)
class StationCache:
    """Process-wide cache of the joined bike-share station feed.

    - A snapshot is served without I/O while `now - fetched_at < ttl_s`.
    - On expiry, inventory and status are fetched concurrently and joined.
    - If a refresh fails, the previous snapshot keeps being served; with no
      snapshot at all, StationFeedUnavailable is raised.

    Snapshots are replaced by a single attribute assignment, so a cancelled
    or failed refresh never leaves a half-written cache behind.
    """

    feed: IStationFeed
    ttl_s: float = DEFAULT_TTL_S
    clock: Callable[[], float] = time.monotonic

    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)
    _snapshot: StationSnapshot | None = field(default=None, init=False, repr=False)

    @property
    def is_warm(self) -> bool:
        return self._snapshot is not None

    @property
    def fetched_at(self) -> float | None:
        return self._snapshot.fetched_at if self._snapshot else None

    def _fresh(self) -> StationSnapshot | None:
        snap = self._snapshot
        if snap is not None and (self.clock() - snap.fetched_at) < self.ttl_s:
            return snap
        return None

    def invalidate(self) -> None:
        self._snapshot = None

    async def get_stations(self) -> tuple[StationRecord, ...]:
        snap = self._fresh()
        if snap is not None:
            return snap.stations

        async with self._lock:
            # Another caller may have refreshed while we waited.
            snap = self._fresh()
            if snap is not None:
                return snap.stations

            try:
                information, status = await asyncio.gather(
                    self.feed.fetch_information(), self.feed.fetch_status()
                )
            except Exception as exc:
                previous = self._snapshot
                if previous is not None:
                    logger.warning(
                        "Station feed refresh failed, serving snapshot from %.0fs ago: %s",
                        self.clock() - previous.fetched_at,
                        exc,
                    )
                    return previous.stations
                logger.error("Station feed unavailable and cache is cold: %s", exc)
                raise StationFeedUnavailable(str(exc) or type(exc).__name__) from exc

            stations = join_station_feeds(information, status)
            self._snapshot = StationSnapshot(stations=stations, fetched_at=self.clock())
            logger.debug("Station cache refreshed with %d stations", len(stations))
            return stations
