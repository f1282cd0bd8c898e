"""
FastAPI application entry point.

Run with:
    uvicorn groundwater.main:app --reload --port 8000
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# ── Core infrastructure ──
from groundwater.core.config import settings
from groundwater.core.errors import register_error_handlers
from groundwater.core.health import HealthStatus, run_health_check
from groundwater.core.logging_config import get_logger, setup_logging
from groundwater.core.middleware import RequestLoggingMiddleware
from groundwater.service import MonitoringService
from groundwater.timeseries.sample_data import seed_sample_data

# ── API routers ──
from groundwater.api.v1.dashboard import router as dashboard_router
from groundwater.api.v1.ingest import router as ingest_router
from groundwater.api.v1.prediction import router as prediction_router
from groundwater.api.v1.stations import router as stations_router

setup_logging()
logger = get_logger(__name__)


def create_app(
    service: Optional[MonitoringService] = None,
    *,
    seed: bool = settings.SEED_SAMPLE_DATA,
) -> FastAPI:
    """
    Build the application around ``service`` (a fresh in-memory one by
    default), optionally provisioning demo stations at startup.
    """
    service = service if service is not None else MonitoringService()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Starting %s v%s [%s]",
            settings.APP_NAME, settings.APP_VERSION, settings.ENVIRONMENT,
        )
        if seed and not service.directory.list():
            seed_sample_data(service.directory, service.store, service.clock())
        yield
        logger.info("Shutting down %s", settings.APP_NAME)

    app = FastAPI(
        title=settings.APP_NAME,
        description=(
            "Groundwater level monitoring: reading ingestion with "
            "upsert-by-timestamp, daily/weekly aggregation, threshold "
            "status classification, cross-station dashboard, linear-trend "
            "forecasting and policy scenario simulation."
        ),
        version=settings.APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.service = service

    # ── Middleware stack (outermost first) ──
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS if not settings.CORS_ALLOW_ALL else ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    register_error_handlers(app)

    app.include_router(ingest_router)
    app.include_router(stations_router)
    app.include_router(dashboard_router)
    app.include_router(prediction_router)

    @app.get("/", tags=["root"])
    async def root():
        return {
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
            "modules": [
                "ingestion",
                "time-series",
                "dashboard",
                "forecast",
                "scenario-simulation",
            ],
            "docs": "/docs",
        }

    @app.get("/health", tags=["health"])
    async def health_check():
        """Deep health probe — checks all subsystems."""
        return run_health_check(service.directory, service.store).to_dict()

    @app.get("/health/live", tags=["health"])
    async def liveness():
        return {"status": "alive"}

    @app.get("/health/ready", tags=["health"])
    async def readiness():
        report = run_health_check(service.directory, service.store)
        if report.status is HealthStatus.UNHEALTHY:
            return JSONResponse(status_code=503, content=report.to_dict())
        return report.to_dict()

    return app


app = create_app()
