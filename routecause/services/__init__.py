"""
Routing services: quota, snapping, way categories, legs, trips and geocoding.
"""

from routecause.services.geocode_service import GeocodeService, get_geocode_service
from routecause.services.rate_limiter import RateLimiter
from routecause.services.route_service import (
    ORSRouteClient,
    OSRMRouteClient,
    RouteClient,
    build_route_client,
)
from routecause.services.snap_service import CoordinateSnapper
from routecause.services.trip_service import (
    TripAggregator,
    close_trip_aggregator,
    get_route_rate_limiter,
    get_trip_aggregator,
)
from routecause.services.way_category import decode_way_category_summary

__all__ = [
    "CoordinateSnapper",
    "GeocodeService",
    "ORSRouteClient",
    "OSRMRouteClient",
    "RateLimiter",
    "RouteClient",
    "TripAggregator",
    "build_route_client",
    "close_trip_aggregator",
    "decode_way_category_summary",
    "get_geocode_service",
    "get_route_rate_limiter",
    "get_trip_aggregator",
]
