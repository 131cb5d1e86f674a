from __future__ import annotations

import asyncio

import httpx
import pytest

from commute_router.adapters.gbfs import HttpGbfsStationFeed
from commute_router.adapters.gbfs.http_gbfs_station_feed import (
    DEFAULT_INFORMATION_URL,
    discovered_feeds,
    parse_station_information,
    parse_station_status,
)
from commute_router.domain.models import GeoPoint

INFORMATION_DOC = {
    "last_updated": 1700000000,
    "ttl": 5,
    "data": {
        "stations": [
            {
                "station_id": "66db237e-0aca-11e7-82f6-3863bb44ef7c",
                "name": "W 21 St & 6 Ave",
                "lat": 40.74173969,
                "lon": -73.99415556,
                "capacity": 55,
            },
            {"station_id": "no-coords", "name": "Broken"},
            {"name": "No id", "lat": 40.7, "lon": -73.9},
            {
                "station_id": "v3",
                "name": [{"text": "Broadway & W 60 St", "language": "en"}],
                "lat": 40.7691,
                "lon": -73.9819,
            },
        ]
    },
}

STATUS_DOC = {
    "data": {
        "stations": [
            {
                "station_id": "66db237e-0aca-11e7-82f6-3863bb44ef7c",
                "num_bikes_available": 7,
                "num_docks_available": 48,
                "is_installed": 1,
                "is_renting": 1,
                "is_returning": 0,
            },
            {
                "station_id": "v3",
                "num_bikes_available": -2,
                "num_docks_available": "4",
                "is_installed": True,
                "is_renting": False,
                "is_returning": "true",
            },
        ]
    }
}


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "GBFS_DISCOVERY_URL",
        "GBFS_STATION_INFORMATION_URL",
        "GBFS_STATION_STATUS_URL",
        "GBFS_LANGUAGE",
        "GBFS_TIMEOUT_S",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.mark.unit
def test_parse_station_information_skips_incomplete_rows() -> None:
    stations = parse_station_information(INFORMATION_DOC)

    assert [s.station_id for s in stations] == [
        "66db237e-0aca-11e7-82f6-3863bb44ef7c",
        "v3",
    ]
    first = stations[0]
    assert first.name == "W 21 St & 6 Ave"
    assert first.location == GeoPoint(lat=40.74173969, lon=-73.99415556)
    assert first.capacity == 55
    assert stations[1].name == "Broadway & W 60 St"
    assert stations[1].capacity == 0


@pytest.mark.unit
def test_parse_station_status_normalises_flags_and_counts() -> None:
    legacy, current = parse_station_status(STATUS_DOC)

    assert legacy.bikes_available == 7
    assert legacy.docks_available == 48
    assert (legacy.is_installed, legacy.is_renting, legacy.is_returning) == (
        True,
        True,
        False,
    )

    assert current.bikes_available == 0
    assert current.docks_available == 4
    assert (current.is_installed, current.is_renting, current.is_returning) == (
        True,
        False,
        True,
    )


@pytest.mark.unit
def test_document_without_stations_is_rejected() -> None:
    with pytest.raises(ValueError):
        parse_station_status({"data": {}})
    with pytest.raises(ValueError):
        parse_station_information({"last_updated": 0})


@pytest.mark.unit
def test_discovered_feeds_handles_language_nesting_and_flat_layout() -> None:
    nested = {
        "data": {
            "en": {
                "feeds": [
                    {"name": "station_information", "url": "https://x.test/en/si.json"},
                    {"name": "station_status", "url": "https://x.test/en/ss.json"},
                ]
            },
            "fr": {"feeds": [{"name": "station_status", "url": "https://x.test/fr/ss.json"}]},
        }
    }
    flat = {
        "data": {
            "feeds": [{"name": "station_status", "url": "https://x.test/v3/ss.json"}]
        }
    }

    assert discovered_feeds(nested, language="en")["station_status"] == (
        "https://x.test/en/ss.json"
    )
    assert discovered_feeds(nested, language="fr") == {
        "station_status": "https://x.test/fr/ss.json"
    }
    assert discovered_feeds(flat, language="en") == {
        "station_status": "https://x.test/v3/ss.json"
    }


@pytest.mark.unit
def test_fetches_feeds_via_discovery_once() -> None:
    hits: list[str] = []
    discovery = {
        "data": {
            "en": {
                "feeds": [
                    {"name": "station_information", "url": "https://x.test/si.json"},
                    {"name": "station_status", "url": "https://x.test/ss.json"},
                ]
            }
        }
    }

    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        hits.append(url)
        if url.endswith("gbfs.json"):
            return httpx.Response(200, json=discovery)
        if url.endswith("si.json"):
            return httpx.Response(200, json=INFORMATION_DOC)
        return httpx.Response(200, json=STATUS_DOC)

    feed = HttpGbfsStationFeed(
        discovery_url="https://x.test/gbfs.json",
        transport=httpx.MockTransport(handler),
    )

    async def run():
        info = await feed.fetch_information()
        status = await feed.fetch_status()
        await feed.fetch_status()
        return info, status

    info, status = asyncio.run(run())

    assert len(info) == 2
    assert len(status) == 2
    assert hits.count("https://x.test/gbfs.json") == 2
    assert feed.information_url == "https://x.test/si.json"
    assert feed.status_url == "https://x.test/ss.json"


@pytest.mark.unit
def test_http_failure_propagates() -> None:
    feed = HttpGbfsStationFeed(
        transport=httpx.MockTransport(lambda request: httpx.Response(503)),
    )

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(feed.fetch_status())


@pytest.mark.unit
def test_defaults_point_at_citi_bike() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, json=INFORMATION_DOC)

    feed = HttpGbfsStationFeed(transport=httpx.MockTransport(handler))
    asyncio.run(feed.fetch_information())

    assert seen == [DEFAULT_INFORMATION_URL]
