"""
Pytest configuration and shared fixtures for RouteCause tests.
"""
import json
import os
import sys
from datetime import datetime, timezone
from typing import Callable, List

import httpx
import polyline
import pytest
import pytest_asyncio

# Add repo root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from routecause.models.trip import Coordinates


# ============================================================
# FAKE CLOCK
# ============================================================

class FakeClock:
    """Controllable epoch-seconds clock for the rate limiter."""

    def __init__(self, start: float):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def utc_midnight() -> float:
    return datetime(2025, 11, 2, tzinfo=timezone.utc).timestamp()


@pytest.fixture
def clock(utc_midnight) -> FakeClock:
    return FakeClock(utc_midnight)


# ============================================================
# FIXTURES FOR COORDINATES
# ============================================================

@pytest.fixture
def start() -> Coordinates:
    return Coordinates(latitude=-43.531, longitude=172.655)


@pytest.fixture
def end() -> Coordinates:
    return Coordinates(latitude=-45.021, longitude=168.738)


@pytest.fixture
def waypoints() -> List[Coordinates]:
    return [
        Coordinates(latitude=-43.531, longitude=172.655),
        Coordinates(latitude=-44.100, longitude=171.200),
        Coordinates(latitude=-45.021, longitude=168.738),
        Coordinates(latitude=-45.870, longitude=170.500),
    ]


# ============================================================
# FIXTURES FOR PROVIDER RESPONSES
# ============================================================

def ors_route_body(
    points=((-43.531, 172.655), (-45.021, 168.738)),
    distance: float = 1000,
    duration: float = 60,
    waycategory=None,
) -> dict:
    """Directions response in the hosted provider's JSON format."""
    route = {
        "geometry": polyline.encode(list(points)),
        "summary": {"distance": distance, "duration": duration},
    }
    if waycategory is not None:
        route["extras"] = {"waycategory": waycategory}
    return {"routes": [route]}


def ors_error_body(code: int, message: str) -> dict:
    return {"error": {"code": code, "message": message}}


def unroutable_message(index: int, lon: float, lat: float) -> str:
    return (
        "Could not find routable point within a radius of 350.0 meters of "
        f"specified coordinate {index}: {lon:.7f} {lat:.7f}."
    )


class RecordingTransport:
    """Serves queued responses per URL substring and records every request."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._responses = {}

    def add(self, url_part: str, *responses: Callable[[httpx.Request], httpx.Response]):
        self._responses.setdefault(url_part, []).extend(responses)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for url_part, queue in self._responses.items():
            if url_part in str(request.url):
                if not queue:
                    raise AssertionError(f"Unexpected extra request to {request.url}")
                return queue.pop(0)(request)
        raise AssertionError(f"No response configured for {request.url}")

    def calls_to(self, url_part: str) -> List[httpx.Request]:
        return [r for r in self.requests if url_part in str(r.url)]

    @staticmethod
    def body(request: httpx.Request) -> dict:
        return json.loads(request.content)


def respond(status: int, body) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(status, json=body)


def raise_error(exc: Exception) -> Callable[[httpx.Request], httpx.Response]:
    def _raise(request):
        raise exc
    return _raise


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest_asyncio.fixture
async def http_client(transport):
    client = httpx.AsyncClient(transport=httpx.MockTransport(transport.handler))
    yield client
    await client.aclose()


# ============================================================
# TEST CONFIGURATION
# ============================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "integration: marks tests that wire several services together")
