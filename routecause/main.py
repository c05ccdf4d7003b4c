"""
FastAPI application for the RouteCause routing API.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from routecause.api.geocode import router as geocode_router
from routecause.api.trip import router as trip_router
from routecause.config.routing import routing_config
from routecause.services.geocode_service import get_geocode_service, reset_geocode_service
from routecause.services.trip_service import close_trip_aggregator, get_trip_aggregator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"[App] Routing config: {routing_config.get_config_dict()}")
    # Build services now so a bad provider config stops startup
    try:
        get_trip_aggregator()
        get_geocode_service()
    except Exception:
        logger.exception("[App] Service initialisation failed")
        reset_geocode_service()
        await close_trip_aggregator()
        raise
    yield
    reset_geocode_service()
    await close_trip_aggregator()


app = FastAPI(title="RouteCause API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(trip_router)
app.include_router(geocode_router)


@app.get("/")
def read_root():
    return {"message": "Welcome to RouteCause API"}


@app.get("/health")
def health():
    return {"status": "ok", "provider": routing_config.PROVIDER}


def run() -> None:
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host="127.0.0.1", port=8000, log_level="info")


if __name__ == "__main__":
    run()
