"""
API endpoints for multi-stop trips.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from routecause.errors import RateLimitExceededError, RoutingError
from routecause.models.trip import RateLimitStatus, TripRequest, TripResult
from routecause.services.rate_limiter import RateLimiter
from routecause.services.trip_service import (
    TripAggregator,
    get_route_rate_limiter,
    get_trip_aggregator,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["trip"])


@router.post("/trip", response_model=TripResult, response_model_exclude_none=True)
async def calculate_trip(
    request: TripRequest,
    aggregator: TripAggregator = Depends(get_trip_aggregator),
) -> TripResult:
    """Route every leg of the trip and return the merged summary."""
    try:
        return await aggregator.aggregate(
            request.locations,
            snap_radius_m=request.snap_radius_m,
            vehicle=request.vehicle,
        )
    except RateLimitExceededError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_dict())
    except RoutingError as e:
        logger.warning(f"[API] Trip failed ({e.status_code}): {e}")
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/rate-limit", response_model=RateLimitStatus)
async def rate_limit_status(
    limiter: RateLimiter = Depends(get_route_rate_limiter),
) -> RateLimitStatus:
    return limiter.get_status()
