class RoutingError(Exception):
    """Base exception for route synthesis failures."""


class DirectionsUnavailable(RoutingError):
    """Raised when the directions provider cannot return an itinerary."""


class StationFeedUnavailable(RoutingError):
    """Raised when the bike-share feed fails and no snapshot is cached."""


class SearchCancelled(RoutingError):
    """Raised when the caller cancelled an in-flight search."""
