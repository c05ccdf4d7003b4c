"""
API endpoints for forward and reverse geocoding.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from routecause.errors import RateLimitExceededError, RoutingError
from routecause.models.trip import AddressCoordinates, Coordinates, ReverseGeocodeResult
from routecause.services.geocode_service import GeocodeService, get_geocode_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["geocode"])


def _to_http_error(e: RoutingError) -> HTTPException:
    if isinstance(e, RateLimitExceededError):
        return HTTPException(status_code=e.status_code, detail=e.to_dict())
    logger.warning(f"[API] Geocode failed ({e.status_code}): {e}")
    return HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/geocode", response_model=Coordinates)
async def geocode(
    address: str = Query(..., min_length=1),
    service: GeocodeService = Depends(get_geocode_service),
) -> Coordinates:
    try:
        return await service.geocode(address)
    except RoutingError as e:
        raise _to_http_error(e)


@router.get("/geocode/search", response_model=List[AddressCoordinates])
async def geocode_search(
    address: str = Query(..., min_length=1),
    limit: int = Query(5, ge=1, le=20),
    service: GeocodeService = Depends(get_geocode_service),
) -> List[AddressCoordinates]:
    """Autocomplete candidates for a partial address."""
    try:
        return await service.geocode_multi(address, limit)
    except RoutingError as e:
        raise _to_http_error(e)


@router.get("/reverse-geocode", response_model=ReverseGeocodeResult)
async def reverse_geocode(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    service: GeocodeService = Depends(get_geocode_service),
) -> ReverseGeocodeResult:
    try:
        address = await service.reverse_geocode(lat, lon)
    except RoutingError as e:
        raise _to_http_error(e)
    return ReverseGeocodeResult(address=address)
