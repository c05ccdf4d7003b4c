"""
Configuracion del proveedor de rutas (ORS hospedado u OSRM local).
"""

import os


class RoutingConfig:
    """Configuration class for the routing provider integration."""

    # "ors" uses the metered hosted API, "osrm" a self-hosted OSRM instance
    PROVIDER: str = os.getenv("ROUTING_PROVIDER", "osrm").strip().lower() or "osrm"

    BASE_URL: str = os.getenv("ROUTING_BASE_URL", "https://api.openrouteservice.org")
    PROFILE: str = os.getenv("ROUTING_PROFILE", "driving-car")
    SNAP_URL: str = os.getenv("ROUTING_SNAP_URL", f"{BASE_URL}/v2/snap/{PROFILE}")
    API_KEY: str = os.getenv("ORS_API_KEY", "")

    GEOCODE_URL: str = os.getenv("GEOCODE_URL", f"{BASE_URL}/geocode")

    OSRM_BASE_URL: str = os.getenv("OSRM_BASE_URL", "http://localhost:5000")
    OSRM_PROFILE: str = os.getenv("OSRM_PROFILE", "driving")

    TIMEOUT_SECONDS: float = float(os.getenv("ROUTING_TIMEOUT", "10.0"))
    SNAP_TIMEOUT_SECONDS: float = float(os.getenv("SNAP_TIMEOUT", "10.0"))
    SNAP_RADIUS_METERS: float = float(os.getenv("SNAP_RADIUS_METERS", "350"))

    ROUTE_RATE_LIMIT_MINUTE: int = int(os.getenv("ROUTE_RATE_LIMIT_MINUTE", "40"))
    ROUTE_RATE_LIMIT_DAILY: int = int(os.getenv("ROUTE_RATE_LIMIT_DAILY", "2000"))
    SNAP_RATE_LIMIT_MINUTE: int = int(os.getenv("SNAP_RATE_LIMIT_MINUTE", "100"))
    SNAP_RATE_LIMIT_DAILY: int = int(os.getenv("SNAP_RATE_LIMIT_DAILY", "2000"))
    GEOCODE_RATE_LIMIT_MINUTE: int = int(os.getenv("GEOCODE_RATE_LIMIT_MINUTE", "100"))
    GEOCODE_RATE_LIMIT_DAILY: int = int(os.getenv("GEOCODE_RATE_LIMIT_DAILY", "1000"))

    USER_AGENT: str = os.getenv("USER_AGENT", "RouteCause/1.0")

    @classmethod
    def get_directions_url(cls) -> str:
        return f"{cls.BASE_URL}/v2/directions/{cls.PROFILE}"

    @classmethod
    def get_osrm_route_url(cls) -> str:
        return f"{cls.OSRM_BASE_URL}/route/v1/{cls.OSRM_PROFILE}"

    @classmethod
    def is_metered(cls) -> bool:
        return cls.PROVIDER == "ors"

    @classmethod
    def get_config_dict(cls) -> dict:
        return {
            "PROVIDER": cls.PROVIDER,
            "BASE_URL": cls.BASE_URL,
            "SNAP_URL": cls.SNAP_URL,
            "GEOCODE_URL": cls.GEOCODE_URL,
            "PROFILE": cls.PROFILE,
            "API_KEY": "***" if cls.API_KEY else "",
            "OSRM_BASE_URL": cls.OSRM_BASE_URL,
            "TIMEOUT_SECONDS": cls.TIMEOUT_SECONDS,
            "SNAP_RADIUS_METERS": cls.SNAP_RADIUS_METERS,
            "ROUTE_RATE_LIMIT_MINUTE": cls.ROUTE_RATE_LIMIT_MINUTE,
            "ROUTE_RATE_LIMIT_DAILY": cls.ROUTE_RATE_LIMIT_DAILY,
            "IS_METERED": cls.is_metered(),
        }


routing_config = RoutingConfig()
