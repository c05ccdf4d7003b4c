"""
Multi-leg trip aggregation.

Legs are routed one after the other in waypoint order and folded into a single
TripResult. Any failing leg aborts the whole trip.
"""

import logging
import math
import threading
import time
from typing import Dict, List, Optional, Sequence

import httpx

from routecause.config.routing import routing_config
from routecause.errors import InvalidWaypointsError
from routecause.models.trip import (
    Coordinates,
    TimeHM,
    TripResult,
    VehicleData,
    WayCategory,
    WayCategorySummary,
)
from routecause.services.rate_limiter import RateLimiter
from routecause.services.route_service import RouteClient, build_route_client

logger = logging.getLogger(__name__)


def convert_minutes(total_minutes: float) -> TimeHM:
    """Whole hours and minutes of a duration (fractional minutes are dropped)."""
    if total_minutes < 0:
        raise ValueError("total_minutes cannot be negative")
    hours, minutes = divmod(int(math.floor(total_minutes)), 60)
    return TimeHM(hours=hours, minutes=minutes)


def estimate_fuel_l(distance_km: float, vehicle: VehicleData) -> float:
    return distance_km / 100.0 * vehicle.fuel_consumption_comb


def estimate_co2_kg(distance_km: float, vehicle: VehicleData) -> float:
    return distance_km * vehicle.co2_emissions / 1000.0


class TripAggregator:
    """Routes every consecutive waypoint pair and merges the legs."""

    def __init__(self, route_client: RouteClient, default_snap_radius_m: Optional[float] = None):
        self.route_client = route_client
        if default_snap_radius_m is None:
            default_snap_radius_m = routing_config.SNAP_RADIUS_METERS
        self.default_snap_radius_m = default_snap_radius_m

    async def aggregate(
        self,
        waypoints: Sequence[Coordinates],
        snap_radius_m: Optional[float] = None,
        vehicle: Optional[VehicleData] = None,
    ) -> TripResult:
        if len(waypoints) < 2:
            raise InvalidWaypointsError(len(waypoints))

        radius = self.default_snap_radius_m if snap_radius_m is None else snap_radius_m
        started = time.time()

        total_distance = 0.0
        total_minutes = 0.0
        full_route: List[Coordinates] = []
        category_distance: Dict[str, float] = {}
        category_values: List[List[int]] = []
        has_way_category = False

        # Sequential on purpose: geometry is appended in leg order
        for i in range(len(waypoints) - 1):
            leg = await self.route_client.route(waypoints[i], waypoints[i + 1], radius)

            total_distance += leg.distance_km
            total_minutes += leg.duration_min
            if leg.route:
                full_route.extend(leg.route)

            if leg.way_category is not None:
                has_way_category = True
                category_values.extend(leg.way_category.values)
                for name, entry in leg.way_category.summary.items():
                    category_distance[name] = category_distance.get(name, 0.0) + entry.distance_km

            logger.debug(
                f"[Trip] Leg {i + 1}/{len(waypoints) - 1}: "
                f"{leg.distance_km:.2f}km, {leg.duration_min:.1f}min"
            )

        duration = convert_minutes(total_minutes)

        way_category = None
        if has_way_category:
            way_category = WayCategory(
                summary={
                    name: WayCategorySummary(
                        distance_km=distance,
                        percentage=(distance / total_distance * 100) if total_distance > 0 else 0.0,
                    )
                    for name, distance in category_distance.items()
                },
                values=category_values,
            )

        result = TripResult(
            distance_km=total_distance,
            hours=duration.hours,
            minutes=duration.minutes,
            route=full_route if full_route else None,
            way_category=way_category,
            fuel_used_l=estimate_fuel_l(total_distance, vehicle) if vehicle else None,
            co2_kg=estimate_co2_kg(total_distance, vehicle) if vehicle else None,
        )

        logger.info(
            f"[Trip] {len(waypoints) - 1} legs, {total_distance:.2f}km, "
            f"{duration.hours}h{duration.minutes:02d}m in {(time.time() - started) * 1000:.1f}ms"
        )
        return result


_services_lock = threading.Lock()
_http_client: Optional[httpx.AsyncClient] = None
_route_limiter: Optional[RateLimiter] = None
_trip_aggregator: Optional[TripAggregator] = None


def get_http_client() -> httpx.AsyncClient:
    """Process-wide HTTP client shared by every provider call."""
    global _http_client
    with _services_lock:
        if _http_client is None or _http_client.is_closed:
            _http_client = httpx.AsyncClient(
                timeout=routing_config.TIMEOUT_SECONDS,
                limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
            )
        return _http_client


def get_route_rate_limiter() -> RateLimiter:
    global _route_limiter
    with _services_lock:
        if _route_limiter is None:
            _route_limiter = RateLimiter(
                routing_config.ROUTE_RATE_LIMIT_MINUTE,
                routing_config.ROUTE_RATE_LIMIT_DAILY,
                name="route",
            )
        return _route_limiter


def get_trip_aggregator() -> TripAggregator:
    """Build the aggregator once; called at application startup."""
    global _trip_aggregator
    if _trip_aggregator is not None:
        return _trip_aggregator

    http_client = get_http_client()
    route_limiter = get_route_rate_limiter()
    with _services_lock:
        if _trip_aggregator is None:
            snap_limiter = RateLimiter(
                routing_config.SNAP_RATE_LIMIT_MINUTE,
                routing_config.SNAP_RATE_LIMIT_DAILY,
                name="snap",
            )
            route_client = build_route_client(http_client, route_limiter, snap_limiter)
            _trip_aggregator = TripAggregator(route_client)
            logger.info(f"[Trip] Using routing provider '{routing_config.PROVIDER}'")
        return _trip_aggregator


async def close_trip_aggregator() -> None:
    global _http_client, _trip_aggregator
    if _http_client is not None and not _http_client.is_closed:
        await _http_client.aclose()
    _http_client = None
    _trip_aggregator = None
