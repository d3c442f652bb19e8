# src/dopelist/api/v1/endpoints/__init__.py
"""API v1 endpoints."""

from .auth import router as auth_router
from .catalog import router as catalog_router
from .comments import router as comments_router
from .identities import router as identities_router
from .listings import router as listings_router
from .payments import router as payments_router
from .reactions import router as reactions_router
from .votes import router as votes_router

__all__ = [
    "auth_router",
    "catalog_router",
    "comments_router",
    "identities_router",
    "listings_router",
    "payments_router",
    "reactions_router",
    "votes_router",
]
