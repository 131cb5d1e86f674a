from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """WGS84 coordinate in decimal degrees."""

    lat: float
    lon: float

    def __post_init__(self) -> None:
        if not (-90.0 <= self.lat <= 90.0):
            raise ValueError(f"Invalid latitude: {self.lat}")
        if not (-180.0 <= self.lon <= 180.0):
            raise ValueError(f"Invalid longitude: {self.lon}")

    @classmethod
    def from_lat_lng(cls, raw: Mapping[str, Any]) -> "GeoPoint":
        """Build from a provider `{"lat": .., "lng": ..}` object."""

        return cls(lat=float(raw["lat"]), lon=float(raw["lng"]))

    def as_query(self) -> str:
        return f"{self.lat},{self.lon}"

    def rounded(self, ndigits: int = 5) -> tuple[float, float]:
        """Cache key for an origin/destination; 5 decimals is about 1m."""

        return (round(self.lat, ndigits), round(self.lon, ndigits))
