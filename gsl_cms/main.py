"""
FastAPI application entry point.

Configures middleware, lifespan events, error handling and mounts all routers.
Run locally: uvicorn gsl_cms.main:app --reload
Production:  gunicorn gsl_cms.main:app -w 4 -k uvicorn.workers.UvicornWorker
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from gsl_cms.api.v1.routes import banners, clients, health, services
from gsl_cms.core.config import get_settings
from gsl_cms.core.exceptions import (
    CatalogError,
    catalog_error_handler,
    request_validation_handler,
    unhandled_error_handler,
)
from gsl_cms.core.logging import get_logger, setup_logging
from gsl_cms.models.database import create_tables, get_engine

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown events."""
    setup_logging()
    logger.info(
        "app_starting",
        environment=settings.app_env,
        record_backend=settings.record_backend,
        bucket=settings.storage_bucket,
    )

    if settings.record_backend == "sql":
        await create_tables(get_engine())

    yield

    if settings.record_backend == "sql":
        await get_engine().dispose()
    logger.info("app_shutting_down")


app = FastAPI(
    title="GSL Content API",
    description="Banners, clients and services with WebP images in Supabase Storage",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.app_env != "production" else None,
    redoc_url="/redoc" if settings.app_env != "production" else None,
)

# ── Middleware ──────────────────────────────────────────────
app.add_middleware(CorrelationIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Errors ─────────────────────────────────────────────────
app.add_exception_handler(CatalogError, catalog_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

# ── Routes ─────────────────────────────────────────────────
app.include_router(health.router)
app.include_router(banners.router, prefix=settings.api_prefix)
app.include_router(clients.router, prefix=settings.api_prefix)
app.include_router(services.router, prefix=settings.api_prefix)


@app.get("/")
async def root():
    return {
        "service": "GSL Content API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/healthz/",
    }
