"""
Snap-to-road: move coordinates off the road network onto the nearest routable point.
"""

import logging
from typing import List, Optional, Sequence

import httpx

from routecause.config.routing import routing_config
from routecause.errors import NoSnappablePointError, ProviderError
from routecause.services.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

LonLat = List[float]


class CoordinateSnapper:
    """Batch client for the provider's snap endpoint."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        rate_limiter: RateLimiter,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self._http_client = http_client
        self.rate_limiter = rate_limiter
        self.url = url or routing_config.SNAP_URL
        self.api_key = api_key if api_key is not None else routing_config.API_KEY
        self.timeout = timeout or routing_config.SNAP_TIMEOUT_SECONDS

    def _headers(self) -> dict:
        return {
            "User-Agent": routing_config.USER_AGENT,
            "Accept": "application/json, application/geo+json; charset=utf-8",
            "Content-Type": "application/json; charset=utf-8",
            "Authorization": self.api_key,
        }

    async def snap(self, points: Sequence[Sequence[float]], radius_m: float) -> List[LonLat]:
        """Snap every ``[lon, lat]`` point within ``radius_m`` meters, in one call."""
        self.rate_limiter.consume()

        body = {"locations": [list(p) for p in points], "radius": radius_m}
        try:
            response = await self._http_client.post(
                self.url, json=body, headers=self._headers(), timeout=self.timeout
            )
        except httpx.TimeoutException as e:
            logger.error(f"[Snap] Timeout after {self.timeout}s")
            raise ProviderError(f"Snap request timed out: {e}") from e
        except httpx.HTTPError as e:
            logger.error(f"[Snap] Transport error: {e}")
            raise ProviderError(f"Snap request failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(
                f"Snap request returned invalid JSON (HTTP {response.status_code})",
                http_status=response.status_code,
            ) from e

        if response.status_code != 200:
            error = data.get("error") if isinstance(data, dict) else None
            if isinstance(error, dict):
                logger.error(
                    f"[Snap] Provider error: {error.get('message')} (code {error.get('code')})"
                )

        locations = data.get("locations") if isinstance(data, dict) else None
        if not isinstance(locations, list) or len(locations) != len(points):
            raise ProviderError(
                f"Failed to snap coordinates (HTTP {response.status_code})",
                http_status=response.status_code,
            )

        if any(loc is None for loc in locations):
            logger.warning(f"[Snap] No snappable point within {radius_m}m for {list(points)}")
            raise NoSnappablePointError(radius_m)

        try:
            snapped = [[float(loc["location"][0]), float(loc["location"][1])] for loc in locations]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError("Snap response has malformed locations") from e

        logger.info(f"[Snap] {len(snapped)} point(s) snapped within {radius_m}m")
        return snapped
