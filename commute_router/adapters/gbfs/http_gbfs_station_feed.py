from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping

import httpx

from commute_router.app.ports.output import IStationFeed
from commute_router.domain.models import GeoPoint, StationInformation, StationStatus

DEFAULT_INFORMATION_URL = (
    "https://gbfs.citibikenyc.com/gbfs/en/station_information.json"
)
DEFAULT_STATUS_URL = "https://gbfs.citibikenyc.com/gbfs/en/station_status.json"


@dataclass(slots=True)
class HttpGbfsStationFeed(IStationFeed):
    """Fetches GBFS station_information / station_status over HTTP.

    Env vars:
      - GBFS_DISCOVERY_URL: optional gbfs.json; when set, both feed URLs are
        resolved from it (explicit feed URLs still win)
      - GBFS_LANGUAGE: discovery language key (default en)
      - GBFS_STATION_INFORMATION_URL / GBFS_STATION_STATUS_URL
      - GBFS_TIMEOUT_S: request timeout (default 10)

    Defaults point at Citi Bike NYC. Errors (transport, non-2xx, bad JSON)
    propagate; the station cache decides how to degrade.
    """

    information_url: str | None = None
    status_url: str | None = None
    discovery_url: str | None = None
    language: str | None = None
    timeout_s: float = 10.0
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        if self.information_url is None:
            self.information_url = os.getenv("GBFS_STATION_INFORMATION_URL")
        if self.status_url is None:
            self.status_url = os.getenv("GBFS_STATION_STATUS_URL")
        if self.discovery_url is None:
            self.discovery_url = os.getenv("GBFS_DISCOVERY_URL")
        if self.language is None:
            self.language = os.getenv("GBFS_LANGUAGE") or "en"
        if os.getenv("GBFS_TIMEOUT_S"):
            self.timeout_s = float(os.environ["GBFS_TIMEOUT_S"])

    async def _get_json(self, url: str) -> Mapping[str, Any]:
        async with httpx.AsyncClient(
            timeout=self.timeout_s, transport=self.transport
        ) as client:
            resp = await client.get(url)
            resp.raise_for_status()
            return resp.json()

    async def _feed_url(self, name: str) -> str:
        explicit = self.information_url if name == "station_information" else self.status_url
        if explicit:
            return explicit

        if self.discovery_url:
            doc = await self._get_json(self.discovery_url)
            feeds = discovered_feeds(doc, language=str(self.language))
            if name not in feeds:
                raise RuntimeError(f"GBFS discovery has no '{name}' feed")
            url = feeds[name]
            # Remember it; discovery documents rarely change within a process.
            if name == "station_information":
                self.information_url = url
            else:
                self.status_url = url
            return url

        if name == "station_information":
            return DEFAULT_INFORMATION_URL
        return DEFAULT_STATUS_URL

    async def fetch_information(self) -> tuple[StationInformation, ...]:
        doc = await self._get_json(await self._feed_url("station_information"))
        return parse_station_information(doc)

    async def fetch_status(self) -> tuple[StationStatus, ...]:
        doc = await self._get_json(await self._feed_url("station_status"))
        return parse_station_status(doc)


def discovered_feeds(doc: Mapping[str, Any], *, language: str) -> dict[str, str]:
    data = doc.get("data") or {}
    # GBFS 1.x/2.x nest feeds per language; 3.x lists them directly.
    if "feeds" in data:
        section = data
    else:
        section = data.get(language) or next(iter(data.values()), {})
    out: dict[str, str] = {}
    for feed in section.get("feeds") or []:
        name = feed.get("name")
        url = feed.get("url")
        if name and url:
            out[str(name)] = str(url)
    return out


def _stations(doc: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    data = doc.get("data")
    if not isinstance(data, Mapping):
        raise ValueError("GBFS document has no 'data' object")
    stations = data.get("stations")
    if not isinstance(stations, list):
        raise ValueError("GBFS document has no 'data.stations' list")
    return stations


def _flag(raw: Any) -> bool:
    # GBFS 1.x uses 0/1, later versions use booleans.
    if isinstance(raw, str):
        return raw.strip().lower() in {"1", "true"}
    return bool(raw)


def _count(raw: Any) -> int:
    try:
        return max(0, int(raw))
    except (TypeError, ValueError):
        return 0


def parse_station_information(doc: Mapping[str, Any]) -> tuple[StationInformation, ...]:
    out: list[StationInformation] = []
    for row in _stations(doc):
        station_id = str(row.get("station_id") or "").strip()
        if not station_id:
            continue
        try:
            location = GeoPoint(lat=float(row["lat"]), lon=float(row["lon"]))
        except (KeyError, TypeError, ValueError):
            continue
        name = row.get("name")
        if isinstance(name, list):
            # GBFS 3.x localized strings
            name = next((n.get("text") for n in name if isinstance(n, Mapping)), None)
        out.append(
            StationInformation(
                station_id=station_id,
                name=str(name or station_id),
                location=location,
                capacity=_count(row.get("capacity")),
            )
        )
    return tuple(out)


def parse_station_status(doc: Mapping[str, Any]) -> tuple[StationStatus, ...]:
    out: list[StationStatus] = []
    for row in _stations(doc):
        station_id = str(row.get("station_id") or "").strip()
        if not station_id:
            continue
        out.append(
            StationStatus(
                station_id=station_id,
                bikes_available=_count(row.get("num_bikes_available")),
                docks_available=_count(row.get("num_docks_available")),
                is_installed=_flag(row.get("is_installed")),
                is_renting=_flag(row.get("is_renting")),
                is_returning=_flag(row.get("is_returning")),
            )
        )
    return tuple(out)
