from __future__ import annotations

from pydantic import BaseModel


class StationSchema(BaseModel):
    station_id: str
    name: str
    lat: float
    lon: float
    capacity: int
    bikes_available: int
    docks_available: int
    is_installed: bool
    is_renting: bool
    is_returning: bool


class NearestStationResponseSchema(BaseModel):
    station: StationSchema
    distance_m: float
