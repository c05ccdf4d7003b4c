"""
Forward and reverse geocoding against the provider's geocoder.

Search, autocomplete and reverse lookups are metered separately, so each
one consumes from its own limiter before any request goes out.
"""

import logging
import threading
from typing import Any, Dict, List, Optional

import httpx

from routecause.config.routing import routing_config
from routecause.errors import AddressNotFoundError, ProviderError
from routecause.models.trip import AddressCoordinates, Coordinates
from routecause.services.rate_limiter import RateLimiter
from routecause.services.route_service import from_lon_lat
from routecause.services.trip_service import get_http_client

logger = logging.getLogger(__name__)


class GeocodeService:
    """Client for the geocoder's /search, /autocomplete and /reverse endpoints."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        search_limiter: RateLimiter,
        autocomplete_limiter: RateLimiter,
        reverse_limiter: RateLimiter,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self._http_client = http_client
        self.search_limiter = search_limiter
        self.autocomplete_limiter = autocomplete_limiter
        self.reverse_limiter = reverse_limiter
        self.url = (url or routing_config.GEOCODE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else routing_config.API_KEY
        self.timeout = timeout or routing_config.TIMEOUT_SECONDS

    async def _get(self, endpoint: str, params: Dict[str, Any], limiter: RateLimiter) -> Dict[str, Any]:
        limiter.consume()

        query = {"api_key": self.api_key, **params}
        try:
            response = await self._http_client.get(
                f"{self.url}/{endpoint}",
                params=query,
                headers={"User-Agent": routing_config.USER_AGENT},
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            logger.warning(f"[Geocode] /{endpoint} timeout after {self.timeout}s")
            raise ProviderError(f"Geocode request timed out: {e}") from e
        except httpx.HTTPError as e:
            logger.error(f"[Geocode] /{endpoint} request failed: {e}")
            raise ProviderError(f"Geocode request failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"[Geocode] /{endpoint} returned HTTP {response.status_code}")
            raise ProviderError(
                f"Geocode request failed: HTTP {response.status_code}",
                http_status=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError("Geocode request returned invalid JSON") from e
        if not isinstance(data, dict):
            raise ProviderError("Unexpected geocode response")
        return data

    async def geocode(self, address: str) -> Coordinates:
        """Best match for ``address``."""
        if not address or not address.strip():
            raise ValueError("address must not be empty")

        data = await self._get("search", {"text": address, "size": 1}, self.search_limiter)
        features = data.get("features")
        if not features:
            raise AddressNotFoundError(address)

        try:
            return from_lon_lat(features[0]["geometry"]["coordinates"])
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise ProviderError(f"Unexpected geocode response: {e}") from e

    async def geocode_multi(self, address: str, limit: int = 5) -> List[AddressCoordinates]:
        """Up to ``limit`` autocomplete candidates for ``address``."""
        if not address or not address.strip():
            raise ValueError("address must not be empty")
        if limit < 1:
            raise ValueError("limit must be at least 1")

        data = await self._get(
            "autocomplete", {"text": address, "size": limit}, self.autocomplete_limiter
        )
        features = data.get("features")
        if not isinstance(features, list) or not features:
            raise AddressNotFoundError(address)

        try:
            return [
                AddressCoordinates(
                    address=f["properties"]["name"],
                    coordinates=from_lon_lat(f["geometry"]["coordinates"]),
                )
                for f in features
            ]
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise ProviderError(f"Unexpected geocode response: {e}") from e

    async def reverse_geocode(self, latitude: float, longitude: float) -> str:
        """Display label of the place nearest to a point."""
        data = await self._get(
            "reverse", {"point.lon": longitude, "point.lat": latitude}, self.reverse_limiter
        )

        features = data.get("features") or []
        label = None
        if features and isinstance(features[0], dict):
            label = (features[0].get("properties") or {}).get("label")
        if not label:
            raise AddressNotFoundError(f"{latitude},{longitude}")
        return label


_geocode_lock = threading.Lock()
_geocode_service: Optional[GeocodeService] = None


def _geocode_limiter(name: str) -> RateLimiter:
    return RateLimiter(
        routing_config.GEOCODE_RATE_LIMIT_MINUTE,
        routing_config.GEOCODE_RATE_LIMIT_DAILY,
        name=name,
    )


def get_geocode_service() -> GeocodeService:
    """Process-wide geocoder bound to the shared HTTP client."""
    global _geocode_service
    http_client = get_http_client()
    with _geocode_lock:
        if _geocode_service is None or _geocode_service._http_client is not http_client:
            if _geocode_service is None:
                limiters = (
                    _geocode_limiter("geocode"),
                    _geocode_limiter("geocode-multi"),
                    _geocode_limiter("reverse-geocode"),
                )
            else:
                # Client was recreated after a close; keep the quota already spent
                limiters = (
                    _geocode_service.search_limiter,
                    _geocode_service.autocomplete_limiter,
                    _geocode_service.reverse_limiter,
                )
            _geocode_service = GeocodeService(http_client, *limiters)
        return _geocode_service


def reset_geocode_service() -> None:
    global _geocode_service
    with _geocode_lock:
        _geocode_service = None
