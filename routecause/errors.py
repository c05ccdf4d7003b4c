"""
Error types raised by the routing core.

Each class carries only the fields its handler needs, plus the HTTP status
the API layer maps it to.
"""

from typing import List, Optional, Tuple


class RoutingError(Exception):
    """Base class for every failure surfaced by the routing core."""

    status_code: int = 500


class RateLimitExceededError(RoutingError):
    """Raised when a provider quota window is exhausted."""

    status_code = 429

    def __init__(
        self,
        window: str,
        minute_remaining: int,
        daily_remaining: int,
        minute_reset_ms: int,
        daily_reset_ms: int,
    ):
        self.window = window
        self.minute_remaining = minute_remaining
        self.daily_remaining = daily_remaining
        self.minute_reset_ms = minute_reset_ms
        self.daily_reset_ms = daily_reset_ms
        reset_ms = minute_reset_ms if window == "minute" else daily_reset_ms
        super().__init__(
            f"RATE_LIMIT_EXCEEDED_{window.upper()}: retry in {reset_ms / 1000:.1f}s"
        )

    def to_dict(self) -> dict:
        return {
            "error": str(self),
            "window": self.window,
            "minute_remaining": self.minute_remaining,
            "daily_remaining": self.daily_remaining,
            "minute_reset_ms": self.minute_reset_ms,
            "daily_reset_ms": self.daily_reset_ms,
        }


class UnroutablePointError(RoutingError):
    """Provider could not find a routable point near one or more coordinates.

    ``points`` holds ``(index, lon, lat)`` tuples parsed from the provider
    message; it is empty when the message names no coordinate.
    """

    status_code = 404

    def __init__(self, message: str, code: int, points: Optional[List[Tuple[int, float, float]]] = None):
        self.code = code
        self.points = points or []
        super().__init__(message)


class NoSnappablePointError(RoutingError):
    status_code = 520

    def __init__(self, radius_m: float):
        self.radius_m = radius_m
        super().__init__(
            f"ORS snap request failed: Could not find snappable point in {radius_m / 1000:g}km radius"
        )


class ProviderError(RoutingError):
    """Transport failure, timeout or malformed provider response."""

    status_code = 502

    def __init__(self, message: str, code: Optional[int] = None, http_status: Optional[int] = None):
        self.code = code
        self.http_status = http_status
        super().__init__(message)


class RouteQueryError(ProviderError):
    """A leg query failed; the message names both leg endpoints."""

    def __init__(self, start, end, message: str, code: Optional[int] = None, http_status: Optional[int] = None):
        self.start = start
        self.end = end
        super().__init__(
            f"Error querying route: Start=({start.latitude},{start.longitude}), "
            f"End=({end.latitude},{end.longitude}) {message}",
            code=code,
            http_status=http_status,
        )


class InvalidWaypointsError(RoutingError):
    status_code = 400

    def __init__(self, count: int):
        self.count = count
        super().__init__(
            f"At least two locations (start and end) are required, got {count}"
        )


class AddressNotFoundError(ProviderError):
    """The geocoder answered but had no match for the query."""

    status_code = 404

    def __init__(self, query: str):
        self.query = query
        super().__init__(f"Address not found: {query!r}")
