from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

import httpx

from commute_router.app.ports.output import IDirectionsProvider
from commute_router.domain.exceptions import DirectionsUnavailable
from commute_router.domain.models import GeoPoint, Itinerary, ProviderStep, TravelMode

DEFAULT_DIRECTIONS_URL = "https://maps.googleapis.com/maps/api/directions/json"

_MODE_TO_GOOGLE = {
    TravelMode.WALKING: "walking",
    TravelMode.BICYCLING: "bicycling",
    TravelMode.TRANSIT: "transit",
}
_GOOGLE_TO_MODE = {
    "WALKING": TravelMode.WALKING,
    "BICYCLING": TravelMode.BICYCLING,
    "TRANSIT": TravelMode.TRANSIT,
}


@dataclass(slots=True)
class GoogleDirectionsAdapter(IDirectionsProvider):
    """Directions over the Google Maps Directions web service.

    Env vars:
      - GOOGLE_MAPS_API_KEY: API key (required for real requests)
      - DIRECTIONS_BASE_URL: override the endpoint (default: Google)
      - DIRECTIONS_TIMEOUT_S: request timeout (default 10)

    Only the first route's first leg is used (no waypoints are requested).
    """

    api_key: str | None = None
    base_url: str | None = None
    timeout_s: float = 10.0
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        if self.api_key is None:
            self.api_key = os.getenv("GOOGLE_MAPS_API_KEY")
        if self.base_url is None:
            self.base_url = os.getenv("DIRECTIONS_BASE_URL") or DEFAULT_DIRECTIONS_URL
        if os.getenv("DIRECTIONS_TIMEOUT_S"):
            self.timeout_s = float(os.environ["DIRECTIONS_TIMEOUT_S"])

    def _params(
        self,
        origin: GeoPoint,
        destination: GeoPoint,
        mode: TravelMode,
        transit_modes: Sequence[str] | None,
    ) -> dict[str, str]:
        params = {
            "origin": origin.as_query(),
            "destination": destination.as_query(),
            "mode": _MODE_TO_GOOGLE[mode],
        }
        if mode == TravelMode.TRANSIT:
            params["departure_time"] = "now"
            if transit_modes:
                params["transit_mode"] = "|".join(transit_modes)
        if self.api_key:
            params["key"] = self.api_key
        return params

    async def route(
        self,
        origin: GeoPoint,
        destination: GeoPoint,
        mode: TravelMode,
        *,
        transit_modes: Sequence[str] | None = None,
    ) -> Itinerary:
        params = self._params(origin, destination, mode, transit_modes)
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_s, transport=self.transport
            ) as client:
                resp = await client.get(str(self.base_url), params=params)
                resp.raise_for_status()
                payload = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise DirectionsUnavailable(
                f"{mode.value} directions request failed: {exc}"
            ) from exc

        try:
            return parse_directions_response(payload)
        except (TypeError, ValueError, AttributeError, KeyError) as exc:
            raise DirectionsUnavailable(
                f"Malformed {mode.value} directions payload: {exc}"
            ) from exc


def parse_directions_response(payload: Mapping[str, Any]) -> Itinerary:
    if not isinstance(payload, Mapping):
        raise DirectionsUnavailable("Directions response is not a JSON object")
    status = payload.get("status")
    if status != "OK":
        detail = payload.get("error_message") or f"status {status}"
        raise DirectionsUnavailable(f"Directions provider error: {detail}")

    routes = payload.get("routes") or []
    if not routes:
        raise DirectionsUnavailable("Directions provider returned no routes")
    legs = routes[0].get("legs") or []
    if not legs:
        raise DirectionsUnavailable("Directions provider returned no legs")

    leg = legs[0]
    steps = tuple(_parse_step(s) for s in leg.get("steps") or [])
    duration = (leg.get("duration") or {}).get("value")
    return Itinerary(
        legs=steps,
        duration_s=float(duration) if duration is not None else None,
    )


def _point(raw: Any) -> GeoPoint | None:
    if not isinstance(raw, Mapping):
        return None
    try:
        return GeoPoint.from_lat_lng(raw)
    except (KeyError, TypeError, ValueError):
        return None


def _parse_step(step: Mapping[str, Any]) -> ProviderStep:
    travel_mode = str(step.get("travel_mode") or "WALKING").upper()
    mode = _GOOGLE_TO_MODE.get(travel_mode, TravelMode.WALKING)
    duration = step.get("duration") or {}
    distance = step.get("distance") or {}

    fields: dict[str, Any] = {}
    transit = step.get("transit_details")
    if mode == TravelMode.TRANSIT and isinstance(transit, Mapping):
        line = transit.get("line") or {}
        vehicle = line.get("vehicle") or {}
        dep = transit.get("departure_stop") or {}
        arr = transit.get("arrival_stop") or {}
        fields = {
            "line_name": line.get("name") or None,
            "line_short_name": line.get("short_name") or None,
            "vehicle_type": (vehicle.get("type") or None),
            "departure_stop_name": dep.get("name") or None,
            "departure_stop_location": _point(dep.get("location")),
            "arrival_stop_name": arr.get("name") or None,
            "arrival_stop_location": _point(arr.get("location")),
        }

    return ProviderStep(
        mode=mode,
        duration_s=float(duration.get("value") or 0.0),
        instructions_html=str(step.get("html_instructions") or ""),
        distance_text=str(distance.get("text") or ""),
        duration_text=str(duration.get("text") or ""),
        start_location=_point(step.get("start_location")),
        end_location=_point(step.get("end_location")),
        **fields,
    )
