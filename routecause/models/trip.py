"""
Pydantic models for routes, trips and rate-limit status.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Coordinates(BaseModel):
    """Geographic point in decimal degrees."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={"example": {"latitude": -43.531, "longitude": 172.655}},
    )

    latitude: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees")


class TimeHM(BaseModel):
    hours: int = Field(..., ge=0)
    minutes: int = Field(..., ge=0, lt=60)


class WayCategorySummary(BaseModel):
    distance_km: float = Field(..., ge=0)
    percentage: float = Field(..., ge=0)


class WayCategory(BaseModel):
    """Road categories of a route: named summary plus the provider's raw rows."""

    summary: Dict[str, WayCategorySummary] = Field(default_factory=dict)
    values: List[List[int]] = Field(default_factory=list)


class AddressCoordinates(BaseModel):
    """One geocoder candidate: display name plus position."""

    address: str
    coordinates: Coordinates


class ReverseGeocodeResult(BaseModel):
    address: str


class RouteResult(BaseModel):
    """Result of one provider query for a single leg."""

    distance_km: float = Field(..., ge=0)
    duration_min: float = Field(..., ge=0)
    route: List[Coordinates] = Field(default_factory=list)
    way_category: Optional[WayCategory] = None


class VehicleData(BaseModel):
    """Fuel economy record of a vehicle (L/100 km and g/km)."""

    model_config = ConfigDict(protected_namespaces=())

    make: str = ""
    model: str = ""
    model_year: str = ""
    vehicle_class: Optional[str] = None
    fuel_type: Optional[str] = None
    fuel_consumption_comb: float = Field(..., ge=0, description="Combined consumption in L/100km")
    co2_emissions: float = Field(..., ge=0, description="CO2 emissions in g/km")


class TripResult(BaseModel):
    """Aggregate of every leg of one trip."""

    distance_km: float = Field(..., ge=0)
    hours: int = Field(..., ge=0)
    minutes: int = Field(..., ge=0, lt=60)
    route: Optional[List[Coordinates]] = None
    way_category: Optional[WayCategory] = None
    fuel_used_l: Optional[float] = None
    co2_kg: Optional[float] = None

    def to_json(self) -> dict:
        return self.model_dump(exclude_none=True)


class RateLimitStatus(BaseModel):
    minute_remaining: int
    daily_remaining: int
    minute_reset_ms: int
    daily_reset_ms: int


class TripRequest(BaseModel):
    """Body of POST /api/v1/trip."""

    locations: List[Coordinates] = Field(..., min_length=2)
    snap_radius_m: Optional[float] = Field(None, gt=0, description="Snap radius in meters")
    vehicle: Optional[VehicleData] = None
