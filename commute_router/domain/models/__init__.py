from .directions import Itinerary, ProviderStep, TravelMode
from .geo import GeoPoint
from .route import DirectionLeg, LegGroups, RouteVariant, TransitDetail, VariantKind
from .station import StationInformation, StationRecord, StationStatus

__all__ = [
    "DirectionLeg",
    "GeoPoint",
    "Itinerary",
    "LegGroups",
    "ProviderStep",
    "RouteVariant",
    "StationInformation",
    "StationRecord",
    "StationStatus",
    "TransitDetail",
    "TravelMode",
    "VariantKind",
]
