from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from commute_router.domain.models import GeoPoint, Itinerary, TravelMode


class IDirectionsProvider(ABC):
    """Port for single-mode directions between two points."""

    @abstractmethod
    async def route(
        self,
        origin: GeoPoint,
        destination: GeoPoint,
        mode: TravelMode,
        *,
        transit_modes: Sequence[str] | None = None,
    ) -> Itinerary:
        """Return the provider's best itinerary.

        `transit_modes` restricts vehicle types for TRANSIT requests
        (e.g. ("subway", "train")). Raises DirectionsUnavailable on failure.
        """
