# src/dopelist/models/payment.py
"""Models supporting the two-phase checkout flow and payment replay protection."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from dopelist.db.session import Base
from dopelist.db.time import utcnow


class PaymentAction(StrEnum):
    """What a payment buys."""

    CREATE = "create"
    RENEW = "renew"


class IntentStatus(StrEnum):
    PENDING = "pending"
    CONSUMED = "consumed"


class CheckoutIntent(Base):
    """Intent reserved before redirecting to checkout; consumed on verification."""

    __tablename__ = "checkout_intent"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    identity_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("identity.id"),
        nullable=False,
        index=True,
    )
    action: Mapped[str] = mapped_column(String(16), nullable=False)
    listing_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("listing.id", ondelete="CASCADE"),
        nullable=True,
    )
    # Provider checkout-session id, or the demo token when payments are not live.
    token: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=IntentStatus.PENDING,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class PaymentRedemption(Base):
    """Ledger of every payment token that has been spent on a create or renew.

    (token) -> existence means "already used", even after a later renewal has
    replaced the token stored on the listing itself.
    """

    __tablename__ = "payment_redemption"

    token: Mapped[str] = mapped_column(String(255), primary_key=True)
    listing_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("listing.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    identity_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("identity.id"),
        nullable=False,
        index=True,
    )
    action: Mapped[str] = mapped_column(String(16), nullable=False)
    provider_payment_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    amount_cents: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
