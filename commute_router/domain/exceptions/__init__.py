from .routing import (
    DirectionsUnavailable,
    RoutingError,
    SearchCancelled,
    StationFeedUnavailable,
)

__all__ = [
    "DirectionsUnavailable",
    "RoutingError",
    "SearchCancelled",
    "StationFeedUnavailable",
]
