"""
Main FastAPI application.

Broadband coverage service over the FCC BDC hex tiles and Form 477 data.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hotrod.api.v1 import coverage, geo, providers, technologies, tiles
from hotrod.core.config import get_settings
from hotrod.services.container import ServiceContainer

# Configure logging
logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Builds the service container on startup and closes its HTTP clients on
    shutdown.
    """
    settings = get_settings()
    logger.info("Starting HOTROD coverage service")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Max concurrency: {settings.max_concurrency}")
    logger.info(f"BDC filing: {settings.bdc_process_uuid} ({settings.bdc_data_date})")
    if not settings.get_fcc_app_token():
        logger.warning("FCC_APP_TOKEN not set; Socrata requests are throttled as anonymous")

    app.state.services = ServiceContainer(settings=settings)

    yield

    logger.info("Shutting down")
    await app.state.services.close()


app = FastAPI(
    title="HOTROD Broadband Coverage Service",
    description="Provider coverage from FCC BDC hex tiles with Form 477 fallback",
    version="0.1.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(providers.router, prefix="/api/v1")
app.include_router(coverage.router, prefix="/api/v1")
app.include_router(tiles.router, prefix="/api/v1")
app.include_router(geo.router, prefix="/api/v1")
app.include_router(technologies.router, prefix="/api/v1")


@app.get("/")
def root():
    """Root endpoint with service info."""
    return {
        "service": "HOTROD Broadband Coverage Service",
        "version": "0.1.0",
        "sources": ["fcc_bdc", "fcc_form477"],
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint with cache statistics."""
    services = getattr(app.state, "services", None)
    if services is None:
        return {"status": "starting"}
    return {"status": "healthy", "cache": await services.cache.get_stats()}
