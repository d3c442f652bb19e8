# src/dopelist/schemas/listing.py
"""Listing-related Pydantic schemas."""
from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field

from dopelist.db.time import utcnow
from dopelist.models import Listing
from dopelist.services import expiry
from dopelist.services.expiry import VisibilityState
from dopelist.services.listings import ListingChanges, ListingDraft, public_contact_info

from .common import CamelModel, UtcDateTime


class ContactEntry(CamelModel):
    """One way to reach the poster; hidden entries need an explicit reveal."""

    value: str
    visible: bool = True


class ListingCreate(CamelModel):
    """Listing fields submitted with a payment (``postData``).

    Fields are loosely typed here so the service layer can report missing or
    oversized values with its own messages.
    """

    title: str | None = None
    description: str | None = None
    city_id: int | None = None
    category_id: int | None = None
    price: str | None = None
    location: str | None = None
    images: list[str] = Field(default_factory=list)
    contact_info: dict[str, ContactEntry | None] = Field(default_factory=dict)

    def to_draft(self) -> ListingDraft:
        return ListingDraft(
            title=self.title,
            description=self.description,
            city_id=self.city_id,
            category_id=self.category_id,
            price=self.price,
            location=self.location,
            images=list(self.images),
            contact_info=_contact_payload(self.contact_info),
        )


class ListingUpdate(CamelModel):
    """Partial owner edit; omitted fields are left unchanged."""

    title: str | None = None
    description: str | None = None
    city_id: int | None = None
    category_id: int | None = None
    price: str | None = None
    location: str | None = None
    images: list[str] | None = None
    contact_info: dict[str, ContactEntry | None] | None = None

    def to_changes(self) -> ListingChanges:
        changes = ListingChanges(
            title=self.title,
            description=self.description,
            city_id=self.city_id,
            category_id=self.category_id,
            images=self.images,
            contact_info=(
                _contact_payload(self.contact_info) if self.contact_info is not None else None
            ),
        )
        # price and location may be cleared with an explicit null.
        if "price" in self.model_fields_set:
            changes.price = self.price
        if "location" in self.model_fields_set:
            changes.location = self.location
        return changes


def _contact_payload(raw: dict[str, ContactEntry | None]) -> dict[str, dict[str, Any] | None]:
    return {
        channel: entry.model_dump() if entry is not None else None
        for channel, entry in raw.items()
    }


class ListingResponse(CamelModel):
    """Listing as returned by the API, with lifecycle fields computed at read time."""

    id: int
    owner_id: str
    city_id: int
    category_id: int
    title: str
    description: str
    price: str | None
    location: str | None
    images: list[str]
    contact_info: dict[str, ContactEntry]
    votes: int
    reactions: dict[str, int]
    created_at: UtcDateTime
    expires_at: UtcDateTime
    comments_close_at: UtcDateTime
    active: bool
    visibility: VisibilityState
    time_left: str
    comments_time_left: str
    editable: bool
    comments_open: bool
    is_owner: bool = False

    @classmethod
    def from_listing(
        cls,
        listing: Listing,
        viewer_id: str | None = None,
        now: datetime | None = None,
    ) -> ListingResponse:
        now = now or utcnow()
        is_owner = viewer_id is not None and viewer_id == listing.owner_id
        return cls(
            id=listing.id,
            owner_id=listing.owner_id,
            city_id=listing.city_id,
            category_id=listing.category_id,
            title=listing.title,
            description=listing.description,
            price=listing.price,
            location=listing.location,
            images=list(listing.images or []),
            contact_info=public_contact_info(listing, viewer_id),
            votes=listing.votes,
            reactions=dict(listing.reactions or {}),
            created_at=listing.created_at,
            expires_at=listing.expires_at,
            comments_close_at=listing.comments_close_at,
            active=listing.active,
            visibility=expiry.visibility_state(listing, now),
            time_left=expiry.format_time_left(listing.expires_at, now),
            comments_time_left=expiry.comments_time_left(listing.comments_close_at, now),
            editable=is_owner and expiry.is_editable(listing, now),
            comments_open=listing.active and expiry.comments_open(listing, now),
            is_owner=is_owner,
        )


class ListingEnvelope(CamelModel):
    post: ListingResponse


class ListingPage(CamelModel):
    posts: list[ListingResponse]
    limit: int
    offset: int


class OwnedListings(CamelModel):
    posts: list[ListingResponse]
    expiring_count: int


class ContactReveal(CamelModel):
    post_id: int
    contact_info: dict[str, ContactEntry]
