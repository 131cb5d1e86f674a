from __future__ import annotations

from dataclasses import dataclass

from .geo import GeoPoint


@dataclass(frozen=True, slots=True)
class StationInformation:
    """Static inventory row (subset of GBFS station_information.json)."""

    station_id: str
    name: str
    location: GeoPoint
    capacity: int = 0


@dataclass(frozen=True, slots=True)
class StationStatus:
    """Live availability row (subset of GBFS station_status.json)."""

    station_id: str
    bikes_available: int = 0
    docks_available: int = 0
    is_installed: bool = False
    is_renting: bool = False
    is_returning: bool = False

    @classmethod
    def unavailable(cls, station_id: str) -> "StationStatus":
        return cls(station_id=station_id)


@dataclass(frozen=True, slots=True)
class StationRecord:
    """One physical bike-share dock: inventory joined with live status."""

    station_id: str
    name: str
    location: GeoPoint
    capacity: int
    bikes_available: int
    docks_available: int
    is_installed: bool
    is_renting: bool
    is_returning: bool

    def __post_init__(self) -> None:
        if self.bikes_available < 0:
            raise ValueError(f"Negative bikes_available for {self.station_id}")
        if self.docks_available < 0:
            raise ValueError(f"Negative docks_available for {self.station_id}")

    @classmethod
    def from_feeds(
        cls, info: StationInformation, status: StationStatus
    ) -> "StationRecord":
        return cls(
            station_id=info.station_id,
            name=info.name,
            location=info.location,
            capacity=info.capacity,
            bikes_available=status.bikes_available,
            docks_available=status.docks_available,
            is_installed=status.is_installed,
            is_renting=status.is_renting,
            is_returning=status.is_returning,
        )

    def can_pickup(self, min_bikes: int = 1) -> bool:
        return self.is_installed and self.is_renting and self.bikes_available >= min_bikes

    def can_dropoff(self, min_docks: int = 1) -> bool:
        return (
            self.is_installed
            and self.is_returning
            and self.docks_available >= min_docks
        )
