from .directions_provider import IDirectionsProvider
from .station_feed import IStationFeed

__all__ = [
    "IDirectionsProvider",
    "IStationFeed",
]
