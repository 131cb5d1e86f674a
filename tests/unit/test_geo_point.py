import pytest

from commute_router.domain.models.geo import GeoPoint


def test_geo_point_accepts_valid_coordinates() -> None:
    p = GeoPoint(lat=40.7411, lon=-73.9897)
    assert p.lat == 40.7411
    assert p.lon == -73.9897


@pytest.mark.parametrize(
    ("lat", "lon"),
    [
        (-90.0001, 0.0),
        (90.0001, 0.0),
        (0.0, -180.0001),
        (0.0, 180.0001),
    ],
)
def test_geo_point_rejects_out_of_range_coordinates(lat: float, lon: float) -> None:
    with pytest.raises(ValueError):
        GeoPoint(lat=lat, lon=lon)


def test_rounded_uses_five_decimals_by_default() -> None:
    p = GeoPoint(lat=40.7411234, lon=-73.9897651)
    assert p.rounded() == (40.74112, -73.98977)


def test_as_query_and_from_lat_lng() -> None:
    p = GeoPoint.from_lat_lng({"lat": 40.7411, "lng": -73.9897})
    assert p == GeoPoint(lat=40.7411, lon=-73.9897)
    assert p.as_query() == "40.7411,-73.9897"


def test_from_lat_lng_rejects_missing_keys() -> None:
    with pytest.raises(KeyError):
        GeoPoint.from_lat_lng({"lat": 40.0, "lon": -73.0})
