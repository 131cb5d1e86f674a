from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Sequence

from commute_router.app.ports.output import IDirectionsProvider
from commute_router.domain.algorithms.durations import sum_minutes
from commute_router.domain.algorithms.station_locator import find_nearest_station
from commute_router.domain.exceptions import (
    DirectionsUnavailable,
    StationFeedUnavailable,
)
from commute_router.domain.models import (
    DirectionLeg,
    GeoPoint,
    Itinerary,
    LegGroups,
    RouteVariant,
    StationRecord,
    TravelMode,
    VariantKind,
)

from .cancellation import CancellationToken
from .segment_formatter import StationContext, format_legs
from .station_cache import StationCache
from .variant_cache import RouteVariantCache

logger = logging.getLogger(__name__)

DEFAULT_NO_BUS_TRANSIT_MODES = ("subway", "train", "tram", "rail")


async def gather_or_cancel(*aws: Awaitable[Any]) -> list[Any]:
    """Like asyncio.gather, but cancels the remaining awaitables on failure.

    Plain gather leaves siblings running after the first exception, which
    would keep issuing provider calls for a search that already failed.
    """

    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


@dataclass(frozen=True, slots=True)
class _BikeSegment:
    """Walk to a pickup station, ride to a dropoff station, optionally walk on."""

    pickup: StationRecord
    dropoff: StationRecord
    steps: tuple[DirectionLeg, ...]


@dataclass(frozen=True, slots=True)
class _Tail:
    steps: tuple[DirectionLeg, ...]
    pickup: StationRecord | None = None
    dropoff: StationRecord | None = None


def build_variant(
    kind: VariantKind,
    steps: tuple[DirectionLeg, ...],
    *,
    pickup: StationRecord | None = None,
    dropoff: StationRecord | None = None,
    final_pickup: StationRecord | None = None,
    final_dropoff: StationRecord | None = None,
) -> RouteVariant:
    substituted = pickup is not None or final_pickup is not None
    bike_minutes = 0
    if substituted:
        # A ride shorter than 30s still counts as a bike-share trip.
        bike_minutes = max(1, sum_minutes(steps, TravelMode.BICYCLING))

    return RouteVariant(
        kind=kind,
        walk_minutes=sum_minutes(steps, TravelMode.WALKING),
        bike_minutes=bike_minutes,
        transit_minutes=sum_minutes(steps, TravelMode.TRANSIT),
        legs=LegGroups.from_steps(steps),
        steps=steps,
        pickup_station=pickup,
        dropoff_station=dropoff,
        final_pickup_station=final_pickup,
        final_dropoff_station=final_dropoff,
    )


@dataclass(slots=True)
class RouteVariantSynthesizer:
    """Builds the standard / enhanced / no-bus / no-bus-bike variants.

    Only the base transit request is fatal. Every other step returns None
    when it cannot produce its variant, and that variant is left out.
    """

    directions: IDirectionsProvider
    station_cache: StationCache
    result_cache: RouteVariantCache | None = None

    # Tuning knobs
    long_walk_threshold_s: float = 300.0
    station_radius_m: float = 500.0
    min_bikes: int = 1
    min_docks: int = 1
    no_bus_transit_modes: tuple[str, ...] = DEFAULT_NO_BUS_TRANSIT_MODES
    final_mile_substitution: bool = True

    async def synthesize(
        self,
        origin: GeoPoint,
        destination: GeoPoint,
        *,
        cancel_token: CancellationToken | None = None,
    ) -> tuple[RouteVariant, ...]:
        token = cancel_token or CancellationToken()

        if self.result_cache is not None:
            cached = self.result_cache.get(origin, destination)
            if cached is not None:
                return cached

        base = await self._route(origin, destination, TravelMode.TRANSIT, token=token)
        if not base.legs:
            raise DirectionsUnavailable("Provider returned an empty transit itinerary")

        standard = build_variant(VariantKind.STANDARD, format_legs(base.legs))

        enhanced, (no_bus, no_bus_bike) = await gather_or_cancel(
            self._hybrid_variant(
                VariantKind.ENHANCED, base, origin, destination, token=token
            ),
            self._no_bus_variants(origin, destination, token=token),
        )
        token.raise_if_cancelled()

        variants = tuple(
            v for v in (standard, enhanced, no_bus, no_bus_bike) if v is not None
        )
        if self.result_cache is not None:
            self.result_cache.put(origin, destination, variants)
        return variants

    def transit_join_point(self, itinerary: Itinerary) -> GeoPoint | None:
        """Where the bike leg should hand over to transit, if at all.

        Only a long opening walk in a multi-leg itinerary qualifies.
        """

        legs = itinerary.legs
        if len(legs) <= 1:
            return None
        first = legs[0]
        if first.mode != TravelMode.WALKING:
            return None
        if first.duration_s <= self.long_walk_threshold_s:
            return None
        transit = itinerary.first_transit_leg()
        if transit is None:
            return None
        return transit.departure_stop_location or transit.start_location

    def transit_alight_point(self, itinerary: Itinerary) -> GeoPoint | None:
        legs = itinerary.legs
        if len(legs) <= 1:
            return None
        last = legs[-1]
        if last.mode != TravelMode.WALKING:
            return None
        if last.duration_s <= self.long_walk_threshold_s:
            return None
        transit = itinerary.last_transit_leg()
        if transit is None:
            return None
        return transit.arrival_stop_location or transit.end_location

    async def _hybrid_variant(
        self,
        kind: VariantKind,
        itinerary: Itinerary,
        origin: GeoPoint,
        destination: GeoPoint,
        *,
        token: CancellationToken,
        transit_modes: Sequence[str] | None = None,
    ) -> RouteVariant | None:
        join = self.transit_join_point(itinerary)
        if join is None:
            return None

        stations = await self._stations(token)
        if stations is None:
            return None

        segment_task = self._bike_segment(
            stations, start=origin, handover=join, token=token
        )
        remaining_task = self._try_route(
            join, destination, TravelMode.TRANSIT, token=token, transit_modes=transit_modes
        )
        segment, remaining = await gather_or_cancel(segment_task, remaining_task)

        if segment is None:
            logger.debug("%s omitted: no viable first-mile substitution", kind.value)
            return None
        if remaining is None:
            logger.debug("%s omitted: no remaining transit from join point", kind.value)
            return None
        if transit_modes and remaining.has_bus:
            logger.debug("%s omitted: remaining transit uses a bus", kind.value)
            return None

        tail = await self._final_mile(remaining, destination, stations, token=token)

        return build_variant(
            kind,
            segment.steps + tail.steps,
            pickup=segment.pickup,
            dropoff=segment.dropoff,
            final_pickup=tail.pickup,
            final_dropoff=tail.dropoff,
        )

    async def _bike_segment(
        self,
        stations: tuple[StationRecord, ...],
        *,
        start: GeoPoint,
        handover: GeoPoint,
        token: CancellationToken,
        finish: GeoPoint | None = None,
    ) -> _BikeSegment | None:
        """Walk to the pickup nearest `start` and ride to the dock nearest `handover`.

        With `finish`, a walk from that dock to `finish` is appended.
        """

        pickup = find_nearest_station(
            stations,
            start,
            require_bikes=True,
            min_count=self.min_bikes,
            max_distance_m=self.station_radius_m,
        )
        if pickup is None:
            logger.debug("No pickup station within %.0fm", self.station_radius_m)
            return None
        dropoff = find_nearest_station(
            stations,
            handover,
            require_bikes=False,
            min_count=self.min_docks,
            max_distance_m=self.station_radius_m,
        )
        if dropoff is None:
            logger.debug("No dropoff station within %.0fm", self.station_radius_m)
            return None
        if dropoff.station_id == pickup.station_id:
            return None

        requests = [
            self._try_route(start, pickup.location, TravelMode.WALKING, token=token),
            self._try_route(
                pickup.location, dropoff.location, TravelMode.BICYCLING, token=token
            ),
        ]
        if finish is not None:
            requests.append(
                self._try_route(dropoff.location, finish, TravelMode.WALKING, token=token)
            )
        results = await gather_or_cancel(*requests)
        if any(r is None for r in results):
            return None

        walk, ride = results[0], results[1]
        steps = format_legs(
            walk.legs, last_step_context=StationContext(pickup, "pickup")
        ) + format_legs(ride.legs, last_step_context=StationContext(dropoff, "dropoff"))
        if finish is not None:
            steps += format_legs(results[2].legs)
        return _BikeSegment(pickup=pickup, dropoff=dropoff, steps=steps)

    async def _final_mile(
        self,
        itinerary: Itinerary,
        destination: GeoPoint,
        stations: tuple[StationRecord, ...],
        *,
        token: CancellationToken,
    ) -> _Tail:
        unchanged = _Tail(steps=format_legs(itinerary.legs))
        if not self.final_mile_substitution:
            return unchanged

        alight = self.transit_alight_point(itinerary)
        if alight is None:
            return unchanged

        segment = await self._bike_segment(
            stations,
            start=alight,
            handover=destination,
            token=token,
            finish=destination,
        )
        if segment is None:
            return unchanged

        steps = format_legs(itinerary.legs[:-1]) + segment.steps
        return _Tail(steps=steps, pickup=segment.pickup, dropoff=segment.dropoff)

    async def _no_bus_variants(
        self, origin: GeoPoint, destination: GeoPoint, *, token: CancellationToken
    ) -> tuple[RouteVariant | None, RouteVariant | None]:
        itinerary = await self._try_route(
            origin,
            destination,
            TravelMode.TRANSIT,
            token=token,
            transit_modes=self.no_bus_transit_modes,
        )
        if itinerary is None or itinerary.first_transit_leg() is None:
            logger.debug("no-bus omitted: no rail itinerary")
            return None, None
        if itinerary.has_bus:
            logger.debug("no-bus omitted: provider ignored the mode restriction")
            return None, None

        no_bus = build_variant(VariantKind.NO_BUS, format_legs(itinerary.legs))
        no_bus_bike = await self._hybrid_variant(
            VariantKind.NO_BUS_BIKE,
            itinerary,
            origin,
            destination,
            token=token,
            transit_modes=self.no_bus_transit_modes,
        )
        return no_bus, no_bus_bike

    async def _stations(
        self, token: CancellationToken
    ) -> tuple[StationRecord, ...] | None:
        token.raise_if_cancelled()
        try:
            stations = await self.station_cache.get_stations()
        except StationFeedUnavailable as exc:
            logger.debug("Bike variants skipped, station feed unavailable: %s", exc)
            return None
        token.raise_if_cancelled()
        return stations

    async def _route(
        self,
        origin: GeoPoint,
        destination: GeoPoint,
        mode: TravelMode,
        *,
        token: CancellationToken,
        transit_modes: Sequence[str] | None = None,
    ) -> Itinerary:
        token.raise_if_cancelled()
        itinerary = await self.directions.route(
            origin, destination, mode, transit_modes=transit_modes
        )
        token.raise_if_cancelled()
        return itinerary

    async def _try_route(
        self,
        origin: GeoPoint,
        destination: GeoPoint,
        mode: TravelMode,
        *,
        token: CancellationToken,
        transit_modes: Sequence[str] | None = None,
    ) -> Itinerary | None:
        try:
            itinerary = await self._route(
                origin, destination, mode, token=token, transit_modes=transit_modes
            )
        except DirectionsUnavailable as exc:
            logger.debug("%s leg unavailable: %s", mode.value, exc)
            return None
        if not itinerary.legs:
            return None
        return itinerary
