# src/dopelist/main.py
"""Main entry point for the Dopelist application."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from dopelist.api.errors import register_exception_handlers
from dopelist.api.v1 import (
    auth_router,
    catalog_router,
    comments_router,
    identities_router,
    listings_router,
    payments_router,
    reactions_router,
    votes_router,
)
from dopelist.core.settings import settings
from dopelist.services.payments import get_payment_provider

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=f"{settings.app_name} API",
    description="Paid, time-boxed classified listings",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

register_exception_handlers(app)

# Include API routers
app.include_router(auth_router, prefix="/api/v1")
app.include_router(identities_router, prefix="/api/v1")
app.include_router(catalog_router, prefix="/api/v1")
app.include_router(listings_router, prefix="/api/v1")
app.include_router(payments_router, prefix="/api/v1")
app.include_router(comments_router, prefix="/api/v1")
app.include_router(votes_router, prefix="/api/v1")
app.include_router(reactions_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    mode = "live" if settings.payments_live else "demo"
    logger.info("%s %s starting (payments: %s)", settings.app_name, settings.app_version, mode)


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await get_payment_provider().close()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": f"{settings.app_name} API",
        "version": settings.app_version,
        "description": "Paid, time-boxed classified listings",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("dopelist.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
