# src/dopelist/api/v1/endpoints/listings.py
"""Listing endpoints: browse, detail, owner management and contact reveal."""

from typing import Annotated

from fastapi import APIRouter, Query

from dopelist.db.time import utcnow
from dopelist.models import Section
from dopelist.schemas import (
    ContactReveal,
    ListingEnvelope,
    ListingPage,
    ListingResponse,
    ListingUpdate,
    OwnedListings,
    SuccessResponse,
)
from dopelist.services import listings
from dopelist.services.listings import BrowseSort

from ..dependencies import CurrentIdentityDep, OptionalIdentityDep, SessionDep

router = APIRouter(prefix="/listings", tags=["listings"])


@router.get("")
async def browse_listings(
    db: SessionDep,
    viewer: OptionalIdentityDep,
    city: str | None = None,
    section: Section | None = None,
    category: str | None = None,
    sort: BrowseSort = BrowseSort.NEW,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> ListingPage:
    """Browse visible listings; expired and deactivated listings never appear."""
    now = utcnow()
    rows = listings.browse(
        db,
        city=city,
        section=section,
        category=category,
        sort=sort,
        limit=limit,
        offset=offset,
        now=now,
    )
    viewer_id = viewer.id if viewer else None
    return ListingPage(
        posts=[ListingResponse.from_listing(row, viewer_id, now) for row in rows],
        limit=limit,
        offset=offset,
    )


@router.get("/mine")
async def my_listings(db: SessionDep, current_identity: CurrentIdentityDep) -> OwnedListings:
    """Return the caller's listings, including expired ones, newest first."""
    now = utcnow()
    rows = listings.list_owned(db, current_identity)
    return OwnedListings(
        posts=[ListingResponse.from_listing(row, current_identity.id, now) for row in rows],
        expiring_count=listings.expiring_count(db, current_identity, now),
    )


@router.get("/{listing_id}")
async def get_listing(
    listing_id: int,
    db: SessionDep,
    viewer: OptionalIdentityDep,
) -> ListingEnvelope:
    listing = listings.get_listing(db, listing_id)
    viewer_id = viewer.id if viewer else None
    return ListingEnvelope(post=ListingResponse.from_listing(listing, viewer_id))


@router.patch("/{listing_id}")
async def update_listing(
    listing_id: int,
    changes: ListingUpdate,
    db: SessionDep,
    current_identity: CurrentIdentityDep,
) -> ListingEnvelope:
    """Edit a listing the caller owns while it is still visible."""
    listing = listings.edit(db, listing_id, current_identity, changes.to_changes())
    return ListingEnvelope(post=ListingResponse.from_listing(listing, current_identity.id))


@router.delete("/{listing_id}")
async def delete_listing(
    listing_id: int,
    db: SessionDep,
    current_identity: CurrentIdentityDep,
) -> SuccessResponse:
    """Deactivate a listing; the row and its engagement history are kept."""
    listings.deactivate(db, listing_id, current_identity)
    return SuccessResponse(message="Post deleted")


@router.post("/{listing_id}/contact")
async def reveal_contact(
    listing_id: int,
    db: SessionDep,
    current_identity: CurrentIdentityDep,
) -> ContactReveal:
    """Reveal every contact entry, hidden ones included."""
    contact = listings.reveal_contact(db, listing_id, current_identity)
    return ContactReveal(post_id=listing_id, contact_info=contact)
