from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .geo import GeoPoint


class TravelMode(str, Enum):
    WALKING = "walking"
    BICYCLING = "bicycling"
    TRANSIT = "transit"


@dataclass(frozen=True, slots=True)
class ProviderStep:
    """A single step as returned by a directions provider, before formatting.

    Adapters map their vendor payloads onto this shape so that nothing past
    the adapter sees vendor field names.
    """

    mode: TravelMode
    duration_s: float
    instructions_html: str = ""
    distance_text: str = ""
    duration_text: str = ""
    start_location: GeoPoint | None = None
    end_location: GeoPoint | None = None

    # Transit metadata (only for mode == TRANSIT)
    line_name: str | None = None
    line_short_name: str | None = None
    vehicle_type: str | None = None  # e.g. BUS, SUBWAY, TRAM (upper-case)
    departure_stop_name: str | None = None
    departure_stop_location: GeoPoint | None = None
    arrival_stop_name: str | None = None
    arrival_stop_location: GeoPoint | None = None

    @property
    def is_transit(self) -> bool:
        return self.mode == TravelMode.TRANSIT

    @property
    def is_bus(self) -> bool:
        return self.is_transit and (self.vehicle_type or "").upper() in {
            "BUS",
            "INTERCITY_BUS",
            "TROLLEYBUS",
        }


@dataclass(frozen=True, slots=True)
class Itinerary:
    """Ordered steps for one provider response (first route, first leg)."""

    legs: tuple[ProviderStep, ...] = field(default_factory=tuple)
    duration_s: float | None = None

    @property
    def has_bus(self) -> bool:
        return any(step.is_bus for step in self.legs)

    def first_transit_leg(self) -> ProviderStep | None:
        return next((step for step in self.legs if step.is_transit), None)

    def last_transit_leg(self) -> ProviderStep | None:
        return next((step for step in reversed(self.legs) if step.is_transit), None)
