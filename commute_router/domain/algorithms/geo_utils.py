from __future__ import annotations

import math
from dataclasses import dataclass

from commute_router.domain.models import GeoPoint

EARTH_RADIUS_M = 6371000.0


def haversine_distance_m(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in meters."""

    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlat = lat2 - lat1
    dlon = math.radians(b.lon - a.lon)

    s = (
        math.sin(dlat / 2.0) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2.0) ** 2
    )
    # Rounding can push s just past 1 for antipodal points.
    return 2.0 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(s)))


@dataclass(frozen=True, slots=True)
class BoundingBox:
    min_lat: float
    max_lat: float
    min_lon: float | None = None
    max_lon: float | None = None

    def contains(self, p: GeoPoint) -> bool:
        if not (self.min_lat <= p.lat <= self.max_lat):
            return False
        if self.min_lon is None or self.max_lon is None:
            return True
        return self.min_lon <= p.lon <= self.max_lon


def bounding_box(center: GeoPoint, radius_m: float) -> BoundingBox:
    """A box that contains every point within `radius_m` of `center`.

    Used as a prefilter before the exact haversine check. Longitude is left
    unbounded near the poles and across the antimeridian.
    """

    # 1% slack covers the spherical approximation at city scale.
    dlat = math.degrees(radius_m / EARTH_RADIUS_M) * 1.01
    min_lat = max(-90.0, center.lat - dlat)
    max_lat = min(90.0, center.lat + dlat)

    cos_lat = math.cos(math.radians(max(abs(min_lat), abs(max_lat))))
    if cos_lat < 1e-6:
        return BoundingBox(min_lat=min_lat, max_lat=max_lat)
    dlon = dlat / cos_lat
    if dlon >= 180.0 or not (-180.0 <= center.lon - dlon and center.lon + dlon <= 180.0):
        return BoundingBox(min_lat=min_lat, max_lat=max_lat)
    return BoundingBox(
        min_lat=min_lat,
        max_lat=max_lat,
        min_lon=center.lon - dlon,
        max_lon=center.lon + dlon,
    )
