"""
Tests for the snap-to-road client.
Uses httpx.MockTransport instead of the real provider.
"""
import httpx
import pytest

from conftest import RecordingTransport, raise_error, respond
from routecause.errors import NoSnappablePointError, ProviderError, RateLimitExceededError
from routecause.services.rate_limiter import RateLimiter
from routecause.services.snap_service import CoordinateSnapper

SNAP_URL = "https://ors.test/v2/snap/driving-car"


@pytest.fixture
def limiter(clock) -> RateLimiter:
    return RateLimiter(10, 100, name="snap", clock=clock)


@pytest.fixture
def snapper(http_client, limiter) -> CoordinateSnapper:
    return CoordinateSnapper(http_client, limiter, url=SNAP_URL, api_key="test-key", timeout=10)


class TestSnap:

    @pytest.mark.asyncio
    async def test_snaps_batch_in_one_call(self, snapper, transport: RecordingTransport, limiter):
        transport.add("/snap/", respond(200, {
            "locations": [
                {"location": [170.0012, -40.0003], "snapped_distance": 35.1},
                {"location": [171.0, -41.0], "snapped_distance": 2.0},
            ]
        }))

        result = await snapper.snap([[170.0, -40.0], [171.0, -41.0]], 350)

        assert result == [[170.0012, -40.0003], [171.0, -41.0]]
        assert len(transport.requests) == 1
        body = transport.body(transport.requests[0])
        assert body == {"locations": [[170.0, -40.0], [171.0, -41.0]], "radius": 350}
        assert transport.requests[0].headers["Authorization"] == "test-key"
        assert limiter.get_status().minute_remaining == 9

    @pytest.mark.asyncio
    async def test_null_location_raises_no_snappable_point(self, snapper, transport):
        transport.add("/snap/", respond(200, {"locations": [None]}))

        with pytest.raises(NoSnappablePointError) as exc_info:
            await snapper.snap([[170.0, -40.0]], 2000)

        assert exc_info.value.radius_m == 2000
        assert exc_info.value.status_code == 520
        assert "2km radius" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_partial_null_raises_no_snappable_point(self, snapper, transport):
        transport.add("/snap/", respond(200, {
            "locations": [{"location": [170.0, -40.0], "snapped_distance": 1.0}, None]
        }))

        with pytest.raises(NoSnappablePointError) as exc_info:
            await snapper.snap([[170.0, -40.0], [171.0, -41.0]], 350)

        assert "0.35km" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_missing_locations_is_generic_error(self, snapper, transport):
        transport.add("/snap/", respond(500, {"error": {"code": 8099, "message": "Internal"}}))

        with pytest.raises(ProviderError) as exc_info:
            await snapper.snap([[170.0, -40.0]], 350)

        assert not isinstance(exc_info.value, NoSnappablePointError)
        assert exc_info.value.http_status == 500

    @pytest.mark.asyncio
    async def test_transport_failure(self, snapper, transport):
        transport.add("/snap/", raise_error(httpx.ConnectError("connection refused")))

        with pytest.raises(ProviderError):
            await snapper.snap([[170.0, -40.0]], 350)

    @pytest.mark.asyncio
    async def test_timeout_is_provider_error(self, snapper, transport):
        transport.add("/snap/", raise_error(httpx.ReadTimeout("timed out")))

        with pytest.raises(ProviderError) as exc_info:
            await snapper.snap([[170.0, -40.0]], 350)

        assert "timed out" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_quota_failure_sends_no_request(self, http_client, transport, clock):
        limiter = RateLimiter(0, 100, clock=clock)
        snapper = CoordinateSnapper(http_client, limiter, url=SNAP_URL, api_key="k")

        with pytest.raises(RateLimitExceededError):
            await snapper.snap([[170.0, -40.0]], 350)

        assert transport.requests == []
