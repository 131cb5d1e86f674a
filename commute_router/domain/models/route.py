from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .directions import TravelMode
from .geo import GeoPoint
from .station import StationRecord


class VariantKind(str, Enum):
    STANDARD = "standard"
    ENHANCED = "enhanced"
    NO_BUS = "no-bus"
    NO_BUS_BIKE = "no-bus-bike"


@dataclass(frozen=True, slots=True)
class TransitDetail:
    line_name: str = ""
    line_short_name: str = ""
    vehicle_type: str | None = None
    departure_stop_name: str = ""
    arrival_stop_name: str = ""


@dataclass(frozen=True, slots=True)
class DirectionLeg:
    mode: TravelMode
    instruction_text: str
    distance_text: str
    duration_text: str
    duration_s: float = 0.0
    start_location: GeoPoint | None = None
    end_location: GeoPoint | None = None
    transit: TransitDetail | None = None


@dataclass(frozen=True, slots=True)
class LegGroups:
    walking: tuple[DirectionLeg, ...] = ()
    cycling: tuple[DirectionLeg, ...] = ()
    transit: tuple[DirectionLeg, ...] = ()

    @classmethod
    def from_steps(cls, steps: tuple[DirectionLeg, ...]) -> "LegGroups":
        return cls(
            walking=tuple(s for s in steps if s.mode == TravelMode.WALKING),
            cycling=tuple(s for s in steps if s.mode == TravelMode.BICYCLING),
            transit=tuple(s for s in steps if s.mode == TravelMode.TRANSIT),
        )


@dataclass(frozen=True, slots=True)
class RouteVariant:
    kind: VariantKind
    walk_minutes: int
    bike_minutes: int
    transit_minutes: int
    legs: LegGroups
    steps: tuple[DirectionLeg, ...] = field(default_factory=tuple)
    pickup_station: StationRecord | None = None
    dropoff_station: StationRecord | None = None
    final_pickup_station: StationRecord | None = None
    final_dropoff_station: StationRecord | None = None

    @property
    def total_minutes(self) -> int:
        return self.walk_minutes + self.bike_minutes + self.transit_minutes

    @property
    def uses_bike_share(self) -> bool:
        return self.pickup_station is not None or self.final_pickup_station is not None
