from __future__ import annotations

import math
from typing import Iterable

from commute_router.domain.models import DirectionLeg, TravelMode


def round_minutes(seconds: float) -> int:
    # Half-up, so 90s is 2 minutes rather than banker's-rounded.
    return int(math.floor(seconds / 60.0 + 0.5))


def sum_seconds(legs: Iterable[DirectionLeg], mode: TravelMode) -> float:
    # fsum keeps the total independent of leg order.
    return math.fsum(leg.duration_s for leg in legs if leg.mode == mode)


def sum_minutes(legs: Iterable[DirectionLeg], mode: TravelMode) -> int:
    """Total minutes spent in `mode`.

    Rounds once over the summed seconds, never per leg.
    """

    return round_minutes(sum_seconds(legs, mode))
