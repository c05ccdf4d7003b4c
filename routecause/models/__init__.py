"""
Data models for the routing core.
"""

from routecause.models.trip import (
    AddressCoordinates,
    Coordinates,
    RateLimitStatus,
    ReverseGeocodeResult,
    RouteResult,
    TimeHM,
    TripRequest,
    TripResult,
    VehicleData,
    WayCategory,
    WayCategorySummary,
)

__all__ = [
    "AddressCoordinates",
    "Coordinates",
    "RateLimitStatus",
    "ReverseGeocodeResult",
    "RouteResult",
    "TimeHM",
    "TripRequest",
    "TripResult",
    "VehicleData",
    "WayCategory",
    "WayCategorySummary",
]
