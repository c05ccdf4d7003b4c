"""
Single-leg route queries against the routing provider.

Two interchangeable clients share the RouteClient interface:

- ORSRouteClient: metered hosted API. Rate limited, requests way category
  extras, and recovers from "unroutable point" errors by snapping the
  offending coordinate and retrying once.
- OSRMRouteClient: self-hosted OSRM instance for local development.

``build_route_client`` picks one from configuration at process start.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

import httpx
import polyline

from routecause.config.routing import RoutingConfig, routing_config
from routecause.errors import (
    NoSnappablePointError,
    ProviderError,
    RateLimitExceededError,
    RouteQueryError,
    RoutingError,
    UnroutablePointError,
)
from routecause.models.trip import Coordinates, RouteResult, WayCategory
from routecause.services.rate_limiter import RateLimiter
from routecause.services.snap_service import CoordinateSnapper
from routecause.services.way_category import decode_way_category_summary

logger = logging.getLogger(__name__)

# Provider error code for "could not find routable point within radius"
UNROUTABLE_POINT_CODE = 2010

_COORDINATE_RE = re.compile(r"coordinate (\d+): (-?\d+(?:\.\d+)?) (-?\d+(?:\.\d+)?)")


def to_lon_lat(coords: Sequence[Coordinates]) -> List[List[float]]:
    return [[c.longitude, c.latitude] for c in coords]


def from_lon_lat(point: Sequence[float]) -> Coordinates:
    return Coordinates(longitude=point[0], latitude=point[1])


def parse_unroutable_points(message: str):
    """Extract ``(index, lon, lat)`` tuples from an unroutable point message."""
    return [
        (int(m.group(1)), float(m.group(2)), float(m.group(3)))
        for m in _COORDINATE_RE.finditer(message or "")
    ]


def decode_geometry(geometry: Optional[str]) -> List[Coordinates]:
    if not geometry:
        return []
    return [Coordinates(latitude=lat, longitude=lon) for lat, lon in polyline.decode(geometry)]


class RouteClient(ABC):
    """Routes one leg between two coordinates."""

    @abstractmethod
    async def route(
        self,
        start: Coordinates,
        end: Coordinates,
        snap_radius_m: Optional[float] = None,
    ) -> RouteResult:
        ...


class ORSRouteClient(RouteClient):
    """Client for the metered hosted directions API."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        rate_limiter: RateLimiter,
        snapper: CoordinateSnapper,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self._http_client = http_client
        self.rate_limiter = rate_limiter
        self.snapper = snapper
        self.url = url or routing_config.get_directions_url()
        self.api_key = api_key if api_key is not None else routing_config.API_KEY
        self.timeout = timeout or routing_config.TIMEOUT_SECONDS

        if not self.api_key:
            raise ValueError("ORS_API_KEY not set. It is required by the hosted routing provider.")

    def _headers(self) -> dict:
        return {
            "User-Agent": routing_config.USER_AGENT,
            "Accept": "application/json, application/geo+json; charset=utf-8",
            "Content-Type": "application/json; charset=utf-8",
            "Authorization": self.api_key,
        }

    async def _request(self, coordinates: List[List[float]]) -> Dict[str, Any]:
        self.rate_limiter.consume()

        body = {"coordinates": coordinates, "extra_info": ["waycategory"]}
        try:
            response = await self._http_client.post(
                self.url, json=body, headers=self._headers(), timeout=self.timeout
            )
        except httpx.TimeoutException as e:
            logger.warning(f"[ORS] Timeout after {self.timeout}s")
            raise ProviderError(f"Route request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise ProviderError(f"Route request failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(
                f"Route request returned invalid JSON (HTTP {response.status_code})",
                http_status=response.status_code,
            ) from e

        error = data.get("error") if isinstance(data, dict) else None
        if response.status_code != 200 or error is not None:
            if isinstance(error, dict):
                code = error.get("code")
                message = error.get("message") or "Unknown error"
            else:
                code = None
                message = str(error) if error else f"HTTP {response.status_code}"

            if code == UNROUTABLE_POINT_CODE:
                raise UnroutablePointError(message, code, parse_unroutable_points(message))
            logger.error(f"[ORS] Provider error: {message} (code {code})")
            raise ProviderError(message, code=code, http_status=response.status_code)

        return data

    async def _snap_endpoints(
        self,
        coordinates: List[List[float]],
        error: UnroutablePointError,
        snap_radius_m: float,
    ) -> List[List[float]]:
        indices = sorted({i for i, _, _ in error.points if 0 <= i < len(coordinates)})
        if not indices:
            indices = list(range(len(coordinates)))

        snapped = await self.snapper.snap([coordinates[i] for i in indices], snap_radius_m)

        retried = [list(c) for c in coordinates]
        for i, point in zip(indices, snapped):
            retried[i] = point
        return retried

    @staticmethod
    def _parse(data: Dict[str, Any]) -> RouteResult:
        try:
            route = data["routes"][0]
            summary = route.get("summary", {})
            distance_m = float(summary.get("distance", 0))
            duration_s = float(summary.get("duration", 0))
            geometry = decode_geometry(route.get("geometry"))

            way_category = None
            extras = (route.get("extras") or {}).get("waycategory")
            if extras:
                way_category = WayCategory(
                    summary=decode_way_category_summary(extras.get("summary", [])),
                    values=extras.get("values", []),
                )

            return RouteResult(
                distance_km=distance_m / 1000,
                duration_min=duration_s / 60,
                route=geometry,
                way_category=way_category,
            )
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise ProviderError(f"Unexpected route response: {e}") from e

    async def route(
        self,
        start: Coordinates,
        end: Coordinates,
        snap_radius_m: Optional[float] = None,
    ) -> RouteResult:
        radius = routing_config.SNAP_RADIUS_METERS if snap_radius_m is None else snap_radius_m
        coordinates = to_lon_lat([start, end])

        try:
            try:
                data = await self._request(coordinates)
            except UnroutablePointError as e:
                logger.warning(f"[ORS] Unroutable point, snapping within {radius}m: {e}")
                coordinates = await self._snap_endpoints(coordinates, e, radius)
                data = await self._request(coordinates)
            result = self._parse(data)
        except (RateLimitExceededError, NoSnappablePointError):
            raise
        except RoutingError as e:
            logger.error(f"[ORS] Route query failed: {e}")
            raise RouteQueryError(
                start, end, str(e),
                code=getattr(e, "code", None),
                http_status=getattr(e, "http_status", None),
            ) from e

        logger.debug(f"[ORS] {result.distance_km:.2f}km, {result.duration_min:.1f}min")
        return result


class OSRMRouteClient(RouteClient):
    """Client for a self-hosted OSRM instance (no quota, no snapping)."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self._http_client = http_client
        self.url = url or routing_config.get_osrm_route_url()
        self.timeout = timeout or routing_config.TIMEOUT_SECONDS

    async def route(
        self,
        start: Coordinates,
        end: Coordinates,
        snap_radius_m: Optional[float] = None,
    ) -> RouteResult:
        url = f"{self.url}/{start.longitude},{start.latitude};{end.longitude},{end.latitude}"
        params = {"overview": "full", "geometries": "polyline"}

        try:
            response = await self._http_client.get(url, params=params, timeout=self.timeout)
            data = response.json()
        except httpx.TimeoutException as e:
            logger.warning(f"[OSRM] Timeout after {self.timeout}s")
            raise RouteQueryError(start, end, f"Route request timed out: {e}") from e
        except (httpx.HTTPError, ValueError) as e:
            raise RouteQueryError(start, end, f"Route request failed: {e}") from e

        if not isinstance(data, dict):
            data = {}
        if response.status_code != 200 or data.get("code") != "Ok" or not data.get("routes"):
            message = data.get("message") or data.get("code") or f"HTTP {response.status_code}"
            logger.error(f"[OSRM] Error: {message}")
            raise RouteQueryError(
                start, end, f"OSRM request failed: {message}", http_status=response.status_code
            )

        try:
            route = data["routes"][0]
            return RouteResult(
                distance_km=route.get("distance", 0) / 1000,
                duration_min=route.get("duration", 0) / 60,
                route=decode_geometry(route.get("geometry")),
            )
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise RouteQueryError(start, end, f"Unexpected route response: {e}") from e


def build_route_client(
    http_client: httpx.AsyncClient,
    route_limiter: RateLimiter,
    snap_limiter: RateLimiter,
    config: RoutingConfig = routing_config,
) -> RouteClient:
    """Select the route client for the configured provider."""
    if config.PROVIDER == "ors":
        snapper = CoordinateSnapper(
            http_client,
            snap_limiter,
            url=config.SNAP_URL,
            api_key=config.API_KEY,
            timeout=config.SNAP_TIMEOUT_SECONDS,
        )
        return ORSRouteClient(
            http_client,
            route_limiter,
            snapper,
            url=config.get_directions_url(),
            api_key=config.API_KEY,
            timeout=config.TIMEOUT_SECONDS,
        )
    if config.PROVIDER == "osrm":
        return OSRMRouteClient(
            http_client,
            url=config.get_osrm_route_url(),
            timeout=config.TIMEOUT_SECONDS,
        )
    raise ValueError(f"Unknown routing provider: {config.PROVIDER!r}")
