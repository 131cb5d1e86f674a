from .http_gbfs_station_feed import HttpGbfsStationFeed

__all__ = [
    "HttpGbfsStationFeed",
]
