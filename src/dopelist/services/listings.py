"""Service-level helpers for browsing, editing and revealing listings."""
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from dopelist.core.settings import settings
from dopelist.db.time import ensure_utc, utcnow
from dopelist.models import Category, City, ContactChannel, ContactView, Identity, Listing, Section
from dopelist.models.catalog import SECTION_NAMES
from dopelist.services import expiry
from dopelist.services.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class BrowseSort(StrEnum):
    NEW = "new"
    TOP = "top"


@dataclass
class ListingDraft:
    """Fields submitted alongside a payment to create a listing."""

    title: str | None = None
    description: str | None = None
    city_id: int | None = None
    category_id: int | None = None
    price: str | None = None
    location: str | None = None
    images: Sequence[str] = field(default_factory=list)
    contact_info: Mapping[str, Any] = field(default_factory=dict)


@dataclass
class ListingChanges:
    """Partial update; attributes left as ``None`` are not touched."""

    title: str | None = None
    description: str | None = None
    city_id: int | None = None
    category_id: int | None = None
    price: str | None = _UNSET
    location: str | None = _UNSET
    images: Sequence[str] | None = None
    contact_info: Mapping[str, Any] | None = None


def _clean_title(value: str | None) -> str:
    title = (value or "").strip()
    if not title:
        raise ValidationError("Title is required")
    if len(title) > settings.title_max_length:
        raise ValidationError(f"Title must be at most {settings.title_max_length} characters")
    return title


def _clean_description(value: str | None) -> str:
    description = (value or "").strip()
    if not description:
        raise ValidationError("Description is required")
    if len(description) > settings.description_max_length:
        raise ValidationError(
            f"Description must be at most {settings.description_max_length} characters"
        )
    return description


def _clean_optional_text(value: str | None) -> str | None:
    if value is None:
        return None
    text = value.strip()
    return text or None


def _clean_images(images: Sequence[str], limit: int) -> list[str]:
    cleaned = [ref.strip() for ref in images if ref and ref.strip()]
    if len(cleaned) > limit:
        raise ValidationError(f"At most {limit} images are allowed")
    return cleaned


def normalize_contact_info(raw: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
    """Validate a channel -> entry mapping; entries without a value are dropped."""
    contact: dict[str, dict[str, Any]] = {}
    for channel, entry in raw.items():
        try:
            key = ContactChannel(channel)
        except ValueError as err:
            raise ValidationError(f"Unknown contact channel: {channel}") from err
        if entry is None:
            continue
        if isinstance(entry, Mapping):
            value = entry.get("value")
            visible = entry.get("visible", True)
        else:
            value = getattr(entry, "value", None)
            visible = getattr(entry, "visible", True)
        value = (value or "").strip()
        if value:
            contact[str(key)] = {"value": value, "visible": bool(visible)}
    return contact


def _require_city(db: Session, city_id: int | None) -> int:
    if city_id is None:
        raise ValidationError("City is required")
    if db.get(City, city_id) is None:
        raise ValidationError("Unknown city")
    return city_id


def _require_category(db: Session, category_id: int | None) -> int:
    if category_id is None:
        raise ValidationError("Category is required")
    if db.get(Category, category_id) is None:
        raise ValidationError("Unknown category")
    return category_id


def validate_draft(db: Session, draft: ListingDraft) -> dict[str, Any]:
    """Return column values for a new listing, or raise ``ValidationError``."""
    return {
        "title": _clean_title(draft.title),
        "description": _clean_description(draft.description),
        "city_id": _require_city(db, draft.city_id),
        "category_id": _require_category(db, draft.category_id),
        "price": _clean_optional_text(draft.price),
        "location": _clean_optional_text(draft.location),
        "images": _clean_images(draft.images, settings.max_images_on_create),
        "contact_info": normalize_contact_info(draft.contact_info),
    }


def _visible_clause(now: datetime) -> tuple[Any, ...]:
    return (Listing.active.is_(True), Listing.expires_at > ensure_utc(now))


def browse(
    db: Session,
    *,
    city: str | None = None,
    section: Section | None = None,
    category: str | None = None,
    sort: BrowseSort = BrowseSort.NEW,
    limit: int = 50,
    offset: int = 0,
    now: datetime | None = None,
) -> list[Listing]:
    """Return visible listings filtered by city slug, section and category slug."""
    now = now or utcnow()
    query = select(Listing).where(*_visible_clause(now))
    if city:
        query = query.join(City, City.id == Listing.city_id).where(City.slug == city)
    if section or category:
        query = query.join(Category, Category.id == Listing.category_id)
        if section:
            query = query.where(Category.section == str(section))
        if category:
            query = query.where(Category.slug == category)

    if sort is BrowseSort.TOP:
        query = query.order_by(Listing.votes.desc(), Listing.created_at.desc(), Listing.id.desc())
    else:
        query = query.order_by(Listing.created_at.desc(), Listing.id.desc())

    return list(db.scalars(query.limit(limit).offset(offset)).all())


def get_listing(db: Session, listing_id: int) -> Listing:
    """Fetch any listing by id, expired or not."""
    listing = db.get(Listing, listing_id)
    if listing is None:
        raise NotFoundError("Post not found")
    return listing


def get_owned(db: Session, listing_id: int, owner: Identity) -> Listing:
    listing = db.get(Listing, listing_id)
    if listing is None or listing.owner_id != owner.id:
        raise NotFoundError()
    return listing


def list_owned(db: Session, owner: Identity) -> list[Listing]:
    query = (
        select(Listing)
        .where(Listing.owner_id == owner.id)
        .order_by(Listing.created_at.desc(), Listing.id.desc())
    )
    return list(db.scalars(query).all())


def expiring_count(db: Session, owner: Identity, now: datetime | None = None) -> int:
    """Count the owner's visible listings that expire within the warning threshold."""
    now = ensure_utc(now or utcnow())
    threshold = now + timedelta(hours=settings.expiring_soon_hours)
    query = select(func.count(Listing.id)).where(
        Listing.owner_id == owner.id,
        *_visible_clause(now),
        Listing.expires_at < threshold,
    )
    return int(db.scalar(query) or 0)


def edit(
    db: Session,
    listing_id: int,
    owner: Identity,
    changes: ListingChanges,
    now: datetime | None = None,
) -> Listing:
    """Apply owner edits to a listing that is still visible.

    Raises:
        NotFoundError: If the listing does not exist or belongs to someone else.
        ValidationError: If the listing expired or a field is invalid.
    """
    now = now or utcnow()
    listing = get_owned(db, listing_id, owner)
    if not expiry.is_editable(listing, now):
        raise ValidationError("Expired posts cannot be edited; renew the post first")

    if changes.title is not None:
        listing.title = _clean_title(changes.title)
    if changes.description is not None:
        listing.description = _clean_description(changes.description)
    if changes.city_id is not None:
        listing.city_id = _require_city(db, changes.city_id)
    if changes.category_id is not None:
        listing.category_id = _require_category(db, changes.category_id)
    if changes.price is not _UNSET:
        listing.price = _clean_optional_text(changes.price)
    if changes.location is not _UNSET:
        listing.location = _clean_optional_text(changes.location)
    if changes.images is not None:
        listing.images = _clean_images(changes.images, settings.max_images_on_edit)
    if changes.contact_info is not None:
        listing.contact_info = normalize_contact_info(changes.contact_info)

    db.commit()
    db.refresh(listing)
    logger.info("Listing %s edited by %s", listing.id, owner.id)
    return listing


def deactivate(db: Session, listing_id: int, owner: Identity) -> Listing:
    """Soft-delete a listing; it disappears from browse but keeps its history."""
    listing = get_owned(db, listing_id, owner)
    listing.active = False
    db.commit()
    db.refresh(listing)
    logger.info("Listing %s deactivated by %s", listing.id, owner.id)
    return listing


def public_contact_info(listing: Listing, viewer_id: str | None) -> dict[str, dict[str, Any]]:
    """Contact entries a viewer may see without revealing; owners see everything."""
    contact = listing.contact_info or {}
    if viewer_id is not None and viewer_id == listing.owner_id:
        return dict(contact)
    return {channel: entry for channel, entry in contact.items() if entry.get("visible")}


def reveal_contact(
    db: Session,
    listing_id: int,
    viewer: Identity,
    now: datetime | None = None,
) -> dict[str, dict[str, Any]]:
    """Return every contact entry, recording the reveal when the viewer is not the owner."""
    now = now or utcnow()
    listing = db.get(Listing, listing_id)
    if listing is None:
        raise NotFoundError("Post not found")
    if listing.owner_id == viewer.id:
        return dict(listing.contact_info or {})
    if not expiry.is_visible(listing, now):
        raise NotFoundError("Post not found")

    db.add(ContactView(listing_id=listing.id, viewer_id=viewer.id))
    db.commit()
    return dict(listing.contact_info or {})


def list_cities(db: Session) -> list[City]:
    return list(db.scalars(select(City).order_by(City.name)).all())


def list_categories(db: Session, section: Section | None = None) -> list[Category]:
    query = select(Category).order_by(Category.section, Category.name)
    if section is not None:
        query = query.where(Category.section == str(section))
    return list(db.scalars(query).all())


def list_sections() -> list[tuple[Section, str]]:
    return [(section, SECTION_NAMES[section]) for section in Section]
