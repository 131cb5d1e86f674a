from __future__ import annotations

from typing import Iterable

from commute_router.domain.models import GeoPoint, StationRecord

from .geo_utils import bounding_box, haversine_distance_m


def is_usable(station: StationRecord, *, require_bikes: bool, min_count: int) -> bool:
    if require_bikes:
        return station.can_pickup(min_count)
    return station.can_dropoff(min_count)


def find_nearest_station(
    stations: Iterable[StationRecord],
    point: GeoPoint,
    *,
    require_bikes: bool,
    min_count: int = 1,
    max_distance_m: float | None = None,
) -> StationRecord | None:
    """Return the closest usable station to `point`, or None.

    `require_bikes=True` searches for a pickup (bikes), otherwise a dropoff
    (docks). Ties keep the station seen first, so results are stable for a
    stable feed ordering. Linear scan; feeds are a few thousand stations.
    """

    box = bounding_box(point, max_distance_m) if max_distance_m is not None else None

    best: StationRecord | None = None
    best_d = float("inf")
    for station in stations:
        if not is_usable(station, require_bikes=require_bikes, min_count=min_count):
            continue
        if box is not None and not box.contains(station.location):
            continue
        d = haversine_distance_m(point, station.location)
        if max_distance_m is not None and d > max_distance_m:
            continue
        if d < best_d:
            best_d = d
            best = station
    return best
