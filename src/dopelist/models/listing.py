# src/dopelist/models/listing.py
"""SQLAlchemy models for paid, time-boxed classified listings."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any, Final

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from dopelist.db.session import Base
from dopelist.db.time import utcnow

REACTION_KEYS: Final[tuple[str, ...]] = ("hot", "interested", "watching", "question", "deal")


def empty_reactions() -> dict[str, int]:
    """Return a zeroed reaction tally."""
    return {key: 0 for key in REACTION_KEYS}


class ContactChannel(StrEnum):
    """Closed set of ways a buyer can reach the poster."""

    PHONE = "phone"
    EMAIL = "email"
    WHATSAPP = "whatsapp"
    TELEGRAM = "telegram"
    OTHER = "other"


class Listing(Base):
    """Classified advertisement authorised by exactly one payment at a time.

    ``payment_token`` holds the checkout session that paid for the creation or
    the latest renewal; the unique constraint is the store-level replay guard.
    """

    __tablename__ = "listing"
    __table_args__ = (
        Index("ix_listing_browse", "city_id", "category_id", "active", "expires_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("identity.id"),
        nullable=False,
        index=True,
    )
    city_id: Mapped[int] = mapped_column(Integer, ForeignKey("city.id"), nullable=False)
    category_id: Mapped[int] = mapped_column(Integer, ForeignKey("category.id"), nullable=False)

    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[str | None] = mapped_column(Text, nullable=True)
    location: Mapped[str | None] = mapped_column(Text, nullable=True)
    images: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    # channel -> {"value": str, "visible": bool}
    contact_info: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    # Denormalised engagement counters; may drift under concurrent writers.
    votes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    reactions: Mapped[dict[str, int]] = mapped_column(
        JSON,
        nullable=False,
        default=empty_reactions,
    )

    payment_token: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    provider_payment_id: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    comments_close_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    active: Mapped[bool] = mapped_column(default=True, nullable=False)


class ContactView(Base):
    """Record of a non-owner revealing a listing's hidden contact details."""

    __tablename__ = "contact_view"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    listing_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("listing.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    viewer_id: Mapped[str | None] = mapped_column(
        String(64),
        ForeignKey("identity.id"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
