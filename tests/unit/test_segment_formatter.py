from __future__ import annotations

import itertools

import pytest

from commute_router.app.services.segment_formatter import (
    StationContext,
    format_leg,
    format_legs,
    sanitize_instructions,
)
from commute_router.domain.algorithms.durations import sum_minutes
from commute_router.domain.models import (
    DirectionLeg,
    GeoPoint,
    ProviderStep,
    StationRecord,
    TravelMode,
)


def _station(bikes: int = 7, docks: int = 1) -> StationRecord:
    return StationRecord(
        station_id="6140.05",
        name="W 21 St & 6 Ave",
        location=GeoPoint(lat=40.7417, lon=-73.9942),
        capacity=bikes + docks,
        bikes_available=bikes,
        docks_available=docks,
        is_installed=True,
        is_renting=True,
        is_returning=True,
    )


def _leg(mode: TravelMode, seconds: float) -> DirectionLeg:
    return DirectionLeg(
        mode=mode,
        instruction_text="",
        distance_text="",
        duration_text="",
        duration_s=seconds,
    )


@pytest.mark.unit
@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Head <b>north</b> on <b>6th Ave</b>", "Head <b>north</b> on <b>6th Ave</b>"),
        (
            'Turn left<script>alert("x")</script> onto Broadway',
            "Turn left onto Broadway",
        ),
        (
            '<a href="javascript:steal()">W 4 St</a> station',
            "W 4 St station",
        ),
        (
            '<b onclick="evil()">Walk</b> to <img src=x onerror=alert(1)>Union Sq',
            "<b>Walk</b> to Union Sq",
        ),
        (
            'Turn right<div style="font-size:0.9em">Destination will be on the left</div>',
            "Turn right Destination will be on the left",
        ),
        ("Tom &amp; Jerry St", "Tom &amp; Jerry St"),
        ("1 &lt; 2 but <b>bold", "1 &lt; 2 but <b>bold</b>"),
        ("<style>b{color:red}</style>Plain", "Plain"),
        ("", ""),
    ],
)
def test_sanitize_instructions(raw: str, expected: str) -> None:
    assert sanitize_instructions(raw) == expected


@pytest.mark.unit
def test_format_leg_is_lossless_on_mode_distance_and_duration() -> None:
    step = ProviderStep(
        mode=TravelMode.WALKING,
        duration_s=420.0,
        instructions_html="Walk to <b>14 St</b>",
        distance_text="0.3 mi",
        duration_text="7 mins",
        start_location=GeoPoint(lat=40.74, lon=-73.99),
        end_location=GeoPoint(lat=40.7438, lon=-73.99),
    )

    leg = format_leg(step)

    assert leg.mode == step.mode
    assert leg.distance_text == step.distance_text
    assert leg.duration_text == step.duration_text
    assert leg.duration_s == step.duration_s
    assert leg.start_location == step.start_location
    assert leg.end_location == step.end_location
    assert leg.transit is None


@pytest.mark.unit
def test_format_leg_copies_transit_detail() -> None:
    step = ProviderStep(
        mode=TravelMode.TRANSIT,
        duration_s=900.0,
        instructions_html="Subway towards Coney Island",
        distance_text="5.1 mi",
        duration_text="15 mins",
        line_name="Broadway Local",
        line_short_name="1",
        vehicle_type="SUBWAY",
        departure_stop_name="14 St",
        arrival_stop_name="96 St",
    )

    leg = format_leg(step)

    assert leg.transit is not None
    assert leg.transit.line_short_name == "1"
    assert leg.transit.departure_stop_name == "14 St"
    assert leg.transit.arrival_stop_name == "96 St"
    assert leg.transit.vehicle_type == "SUBWAY"


@pytest.mark.unit
def test_pickup_annotation_reports_bike_count() -> None:
    step = ProviderStep(mode=TravelMode.WALKING, duration_s=60.0, instructions_html="Walk")

    leg = format_leg(step, StationContext(_station(bikes=7), "pickup"))

    assert leg.instruction_text == "Walk (Pick up at W 21 St &amp; 6 Ave: 7 bikes available)"


@pytest.mark.unit
def test_dropoff_annotation_uses_singular_and_works_without_text() -> None:
    step = ProviderStep(mode=TravelMode.BICYCLING, duration_s=60.0)

    leg = format_leg(step, StationContext(_station(docks=1), "dropoff"))

    assert leg.instruction_text == "(Drop off at W 21 St &amp; 6 Ave: 1 dock available)"


@pytest.mark.unit
def test_format_legs_annotates_only_the_last_step() -> None:
    steps = [
        ProviderStep(mode=TravelMode.WALKING, duration_s=30.0, instructions_html="Head east"),
        ProviderStep(mode=TravelMode.WALKING, duration_s=30.0, instructions_html="Turn left"),
    ]

    legs = format_legs(steps, last_step_context=StationContext(_station(), "pickup"))

    assert legs[0].instruction_text == "Head east"
    assert legs[1].instruction_text.startswith("Turn left (Pick up at")


@pytest.mark.unit
def test_sum_minutes_rounds_once_over_the_total() -> None:
    # Three 20s legs: per-leg rounding would give 0, the total is 1 minute.
    legs = [_leg(TravelMode.WALKING, 20.0) for _ in range(3)]
    assert sum_minutes(legs, TravelMode.WALKING) == 1


@pytest.mark.unit
def test_sum_minutes_filters_by_mode_and_rounds_half_up() -> None:
    legs = [
        _leg(TravelMode.WALKING, 60.0),
        _leg(TravelMode.TRANSIT, 900.0),
        _leg(TravelMode.WALKING, 30.0),
    ]
    assert sum_minutes(legs, TravelMode.WALKING) == 2
    assert sum_minutes(legs, TravelMode.TRANSIT) == 15
    assert sum_minutes(legs, TravelMode.BICYCLING) == 0


@pytest.mark.unit
def test_sum_minutes_is_independent_of_leg_order() -> None:
    legs = [
        _leg(TravelMode.WALKING, 0.1),
        _leg(TravelMode.WALKING, 89.95),
        _leg(TravelMode.TRANSIT, 700.0),
        _leg(TravelMode.WALKING, 1e-9),
        _leg(TravelMode.WALKING, 0.2),
    ]
    expected = sum_minutes(legs, TravelMode.WALKING)
    for perm in itertools.permutations(legs):
        assert sum_minutes(perm, TravelMode.WALKING) == expected
