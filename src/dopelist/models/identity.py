# src/dopelist/models/identity.py
"""SQLAlchemy models for anonymous and authenticated identities."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from dopelist.db.session import Base
from dopelist.db.time import utcnow


class IdentityKind(StrEnum):
    """Whether an identity was minted for a browser session or signed in."""

    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"


class Identity(Base):
    """Opaque actor reference that owns listings and engagement records.

    Anonymous identities are superseded, never deleted, once their content has
    been merged into an authenticated identity.
    """

    __tablename__ = "identity"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    kind: Mapped[str] = mapped_column(String(16), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    superseded_by: Mapped[str | None] = mapped_column(
        String(64),
        ForeignKey("identity.id"),
        nullable=True,
    )
    merged_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def is_anonymous(self) -> bool:
        return self.kind == IdentityKind.ANONYMOUS

    @property
    def is_superseded(self) -> bool:
        return self.superseded_by is not None


class BillingCustomer(Base):
    """Link between an identity and its customer record at the payment provider."""

    __tablename__ = "billing_customer"

    identity_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("identity.id", ondelete="CASCADE"),
        primary_key=True,
    )
    customer_id: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
