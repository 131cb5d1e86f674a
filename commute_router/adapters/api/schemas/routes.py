from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from commute_router.adapters.api.schemas.stations import StationSchema


class GeoPointSchema(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)


class TransitDetailSchema(BaseModel):
    line_name: str = ""
    line_short_name: str = ""
    vehicle_type: str | None = None
    departure_stop_name: str = ""
    arrival_stop_name: str = ""


class DirectionLegSchema(BaseModel):
    mode: Literal["walking", "bicycling", "transit"]
    instruction_text: str
    distance_text: str
    duration_text: str
    duration_s: float
    start_location: GeoPointSchema | None = None
    end_location: GeoPointSchema | None = None
    transit: TransitDetailSchema | None = None


class LegGroupsSchema(BaseModel):
    walking: list[DirectionLegSchema] = []
    cycling: list[DirectionLegSchema] = []
    transit: list[DirectionLegSchema] = []


class RouteVariantSchema(BaseModel):
    kind: Literal["standard", "enhanced", "no-bus", "no-bus-bike"]
    total_minutes: int
    walk_minutes: int
    bike_minutes: int
    transit_minutes: int
    pickup_station: StationSchema | None = None
    dropoff_station: StationSchema | None = None
    final_pickup_station: StationSchema | None = None
    final_dropoff_station: StationSchema | None = None
    legs: LegGroupsSchema
    steps: list[DirectionLegSchema] = []


class VariantsRequestSchema(BaseModel):
    origin: GeoPointSchema
    destination: GeoPointSchema


class VariantsResponseSchema(BaseModel):
    variants: list[RouteVariantSchema]
