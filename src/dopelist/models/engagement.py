# src/dopelist/models/engagement.py
"""Models capturing votes, reactions and comments on listings."""

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from dopelist.db.session import Base
from dopelist.db.time import utcnow


class ListingVote(Base):
    """Per-identity vote on a listing."""

    __tablename__ = "listing_vote"
    __table_args__ = (
        CheckConstraint("value IN (1, -1)", name="ck_listing_vote_value"),
        Index("ix_listing_vote_listing_id", "listing_id"),
    )

    # Composite primary key prevents duplicate votes from the same identity.
    listing_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("listing.id", ondelete="CASCADE"),
        primary_key=True,
    )
    identity_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("identity.id"),
        primary_key=True,
    )

    # 1 = upvote, -1 = downvote.
    value: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    session_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )


class ListingReaction(Base):
    """One reaction click; the listing keeps the aggregated tally."""

    __tablename__ = "listing_reaction"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    listing_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("listing.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    identity_id: Mapped[str | None] = mapped_column(
        String(64),
        ForeignKey("identity.id"),
        nullable=True,
    )
    reaction_key: Mapped[str] = mapped_column(String(32), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )


class Comment(Base):
    """Free-text comment left on a listing while its comment window is open."""

    __tablename__ = "comment"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    listing_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("listing.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_id: Mapped[str | None] = mapped_column(
        String(64),
        ForeignKey("identity.id"),
        nullable=True,
    )
    session_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
