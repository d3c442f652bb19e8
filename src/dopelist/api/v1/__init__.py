# src/dopelist/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    auth_router,
    catalog_router,
    comments_router,
    identities_router,
    listings_router,
    payments_router,
    reactions_router,
    votes_router,
)

__all__ = [
    "auth_router",
    "identities_router",
    "catalog_router",
    "listings_router",
    "payments_router",
    "comments_router",
    "votes_router",
    "reactions_router",
]
