from .google_directions_adapter import GoogleDirectionsAdapter

__all__ = [
    "GoogleDirectionsAdapter",
]
