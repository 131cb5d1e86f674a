from __future__ import annotations

import os
from functools import lru_cache

from commute_router.adapters.directions import GoogleDirectionsAdapter
from commute_router.adapters.gbfs import HttpGbfsStationFeed
from commute_router.app.services.route_synthesizer import RouteVariantSynthesizer
from commute_router.app.services.station_cache import StationCache
from commute_router.app.services.variant_cache import RouteVariantCache


def env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


@lru_cache(maxsize=1)
def get_station_cache() -> StationCache:
    """One station cache per process, shared by every request."""

    cache = StationCache(feed=HttpGbfsStationFeed())
    if os.getenv("STATION_CACHE_TTL_S"):
        cache.ttl_s = float(os.environ["STATION_CACHE_TTL_S"])
    return cache


@lru_cache(maxsize=1)
def get_result_cache() -> RouteVariantCache | None:
    cache = RouteVariantCache()
    if os.getenv("ROUTE_RESULT_CACHE_TTL_S"):
        cache.ttl_s = float(os.environ["ROUTE_RESULT_CACHE_TTL_S"])
    if cache.ttl_s <= 0:
        return None
    return cache


def get_route_synthesizer() -> RouteVariantSynthesizer:
    service = RouteVariantSynthesizer(
        directions=GoogleDirectionsAdapter(),
        station_cache=get_station_cache(),
        result_cache=get_result_cache(),
    )

    # Allow tuning via env without changing code.
    if os.getenv("LONG_WALK_THRESHOLD_S"):
        service.long_walk_threshold_s = float(os.environ["LONG_WALK_THRESHOLD_S"])
    if os.getenv("STATION_SEARCH_RADIUS_M"):
        service.station_radius_m = float(os.environ["STATION_SEARCH_RADIUS_M"])
    if os.getenv("MIN_BIKES"):
        service.min_bikes = int(os.environ["MIN_BIKES"])
    if os.getenv("MIN_DOCKS"):
        service.min_docks = int(os.environ["MIN_DOCKS"])
    service.final_mile_substitution = env_bool("FINAL_MILE_SUBSTITUTION", True)

    return service
