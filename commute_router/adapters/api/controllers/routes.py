from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from commute_router.adapters.api.dependencies import get_route_synthesizer
from commute_router.adapters.api.schemas.routes import (
    DirectionLegSchema,
    GeoPointSchema,
    LegGroupsSchema,
    RouteVariantSchema,
    TransitDetailSchema,
    VariantsRequestSchema,
    VariantsResponseSchema,
)
from commute_router.adapters.api.schemas.stations import StationSchema
from commute_router.app.services.route_synthesizer import RouteVariantSynthesizer
from commute_router.domain.exceptions import DirectionsUnavailable
from commute_router.domain.models import (
    DirectionLeg,
    GeoPoint,
    RouteVariant,
    StationRecord,
)

router = APIRouter(tags=["routes"])


def _point(p: GeoPoint | None) -> GeoPointSchema | None:
    if p is None:
        return None
    return GeoPointSchema(lat=p.lat, lon=p.lon)


def station_to_schema(station: StationRecord | None) -> StationSchema | None:
    if station is None:
        return None
    return StationSchema(
        station_id=station.station_id,
        name=station.name,
        lat=station.location.lat,
        lon=station.location.lon,
        capacity=station.capacity,
        bikes_available=station.bikes_available,
        docks_available=station.docks_available,
        is_installed=station.is_installed,
        is_renting=station.is_renting,
        is_returning=station.is_returning,
    )


def _leg_to_schema(leg: DirectionLeg) -> DirectionLegSchema:
    return DirectionLegSchema(
        mode=leg.mode.value,
        instruction_text=leg.instruction_text,
        distance_text=leg.distance_text,
        duration_text=leg.duration_text,
        duration_s=leg.duration_s,
        start_location=_point(leg.start_location),
        end_location=_point(leg.end_location),
        transit=(
            TransitDetailSchema(
                line_name=leg.transit.line_name,
                line_short_name=leg.transit.line_short_name,
                vehicle_type=leg.transit.vehicle_type,
                departure_stop_name=leg.transit.departure_stop_name,
                arrival_stop_name=leg.transit.arrival_stop_name,
            )
            if leg.transit
            else None
        ),
    )


def _variant_to_schema(variant: RouteVariant) -> RouteVariantSchema:
    return RouteVariantSchema(
        kind=variant.kind.value,
        total_minutes=variant.total_minutes,
        walk_minutes=variant.walk_minutes,
        bike_minutes=variant.bike_minutes,
        transit_minutes=variant.transit_minutes,
        pickup_station=station_to_schema(variant.pickup_station),
        dropoff_station=station_to_schema(variant.dropoff_station),
        final_pickup_station=station_to_schema(variant.final_pickup_station),
        final_dropoff_station=station_to_schema(variant.final_dropoff_station),
        legs=LegGroupsSchema(
            walking=[_leg_to_schema(leg) for leg in variant.legs.walking],
            cycling=[_leg_to_schema(leg) for leg in variant.legs.cycling],
            transit=[_leg_to_schema(leg) for leg in variant.legs.transit],
        ),
        steps=[_leg_to_schema(leg) for leg in variant.steps],
    )


@router.post("/routes/variants", response_model=VariantsResponseSchema)
async def synthesize_variants(
    req: VariantsRequestSchema,
    service: RouteVariantSynthesizer = Depends(get_route_synthesizer),
) -> VariantsResponseSchema:
    origin = GeoPoint(lat=req.origin.lat, lon=req.origin.lon)
    destination = GeoPoint(lat=req.destination.lat, lon=req.destination.lon)
    try:
        variants = await service.synthesize(origin, destination)
    except DirectionsUnavailable as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return VariantsResponseSchema(variants=[_variant_to_schema(v) for v in variants])
