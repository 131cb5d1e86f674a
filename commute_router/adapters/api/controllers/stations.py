from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query

from commute_router.adapters.api.controllers.routes import station_to_schema
from commute_router.adapters.api.dependencies import get_station_cache
from commute_router.adapters.api.schemas.stations import NearestStationResponseSchema
from commute_router.app.services.station_cache import StationCache
from commute_router.domain.algorithms.geo_utils import haversine_distance_m
from commute_router.domain.algorithms.station_locator import find_nearest_station
from commute_router.domain.exceptions import StationFeedUnavailable
from commute_router.domain.models import GeoPoint

router = APIRouter(prefix="/stations", tags=["stations"])


@router.get("/nearest", response_model=NearestStationResponseSchema)
async def nearest_station(
    lat: float = Query(..., ge=-90.0, le=90.0),
    lon: float = Query(..., ge=-180.0, le=180.0),
    purpose: Literal["pickup", "dropoff"] = "pickup",
    min_count: int = Query(default=1, ge=0),
    max_distance_m: float | None = Query(default=None, gt=0),
    cache: StationCache = Depends(get_station_cache),
) -> NearestStationResponseSchema:
    try:
        stations = await cache.get_stations()
    except StationFeedUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    point = GeoPoint(lat=lat, lon=lon)
    station = find_nearest_station(
        stations,
        point,
        require_bikes=purpose == "pickup",
        min_count=min_count,
        max_distance_m=max_distance_m,
    )
    if station is None:
        raise HTTPException(status_code=404, detail="No usable station found")

    return NearestStationResponseSchema(
        station=station_to_schema(station),
        distance_m=haversine_distance_m(point, station.location),
    )
