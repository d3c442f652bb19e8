# src/dopelist/services/engagement.py
"""Votes, reactions and comments on listings.

Listing totals (``votes``, ``reactions``) are denormalised counters updated
with a read-modify-write in the same transaction as the ledger row. Concurrent
writers on one listing may lose an increment; the per-identity vote row stays
authoritative.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from dopelist.core.settings import settings
from dopelist.db.time import utcnow
from dopelist.models import REACTION_KEYS, Comment, Identity, Listing, ListingReaction, ListingVote
from dopelist.models.listing import empty_reactions
from dopelist.services import expiry
from dopelist.services.errors import CommentsClosedError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

VOTE_VALUES = (1, -1)


@dataclass(frozen=True)
class VoteOutcome:
    """Caller's vote after the change and the listing's new total."""

    value: int
    total: int


def _active_listing(db: Session, listing_id: int, message: str = "Post not found") -> Listing:
    listing = db.get(Listing, listing_id)
    if listing is None or not listing.active:
        raise NotFoundError(message)
    return listing


def cast_vote(
    db: Session,
    listing_id: int,
    identity: Identity,
    value: int,
    session_id: str | None = None,
) -> VoteOutcome:
    """Record or change the caller's vote; the total moves by ``new - old``."""
    if value not in VOTE_VALUES:
        raise ValidationError("postId and voteValue (1 or -1) required")
    listing = _active_listing(db, listing_id)

    vote = db.get(ListingVote, (listing_id, identity.id))
    if vote is None:
        db.add(
            ListingVote(
                listing_id=listing_id,
                identity_id=identity.id,
                value=value,
                session_id=session_id,
            )
        )
        listing.votes += value
    else:
        listing.votes += value - vote.value
        vote.value = value
        vote.session_id = session_id or vote.session_id

    db.commit()
    db.refresh(listing)
    return VoteOutcome(value=value, total=listing.votes)


def remove_vote(db: Session, listing_id: int, identity: Identity) -> VoteOutcome:
    """Withdraw the caller's vote; succeeds whether or not one existed."""
    vote = db.get(ListingVote, (listing_id, identity.id))
    listing = db.get(Listing, listing_id)
    if vote is not None:
        if listing is not None:
            listing.votes -= vote.value
        db.delete(vote)
        db.commit()
    total = listing.votes if listing is not None else 0
    return VoteOutcome(value=0, total=total)


def get_vote(db: Session, listing_id: int, identity: Identity) -> int:
    vote = db.get(ListingVote, (listing_id, identity.id))
    return vote.value if vote is not None else 0


def react(
    db: Session,
    listing_id: int,
    identity: Identity | None,
    key: str,
    now: datetime | None = None,
) -> dict[str, int]:
    """Add one reaction to a visible listing and return the new tally.

    Reactions are counted per click; the same identity may react repeatedly.
    """
    if key not in REACTION_KEYS:
        raise ValidationError(f"Unknown reaction: {key}")
    now = now or utcnow()
    listing = db.get(Listing, listing_id)
    if listing is None or not expiry.is_visible(listing, now):
        raise NotFoundError("Post not found")

    tally = empty_reactions()
    tally.update(listing.reactions or {})
    tally[key] += 1
    # Reassign so the JSON column is flagged dirty.
    listing.reactions = tally
    db.add(
        ListingReaction(
            listing_id=listing_id,
            identity_id=identity.id if identity is not None else None,
            reaction_key=key,
        )
    )
    db.commit()
    return dict(tally)


def post_comment(
    db: Session,
    listing_id: int,
    identity: Identity | None,
    text: str | None,
    session_id: str | None = None,
    now: datetime | None = None,
) -> Comment:
    """Append a comment while the listing's comment window is open.

    Raises:
        ValidationError: If the text is empty or too long.
        NotFoundError: If the listing is absent or inactive.
        CommentsClosedError: If the comment window has closed.
    """
    body = (text or "").strip()
    if not body:
        raise ValidationError("postId and text required")
    if len(body) > settings.comment_max_length:
        raise ValidationError(f"Comment must be at most {settings.comment_max_length} characters")

    now = now or utcnow()
    listing = _active_listing(db, listing_id, "Post not found or inactive")
    if not expiry.comments_open(listing, now):
        raise CommentsClosedError()

    comment = Comment(
        listing_id=listing_id,
        author_id=identity.id if identity is not None else None,
        session_id=session_id,
        text=body,
        created_at=now,
    )
    db.add(comment)
    db.commit()
    db.refresh(comment)
    logger.debug("Comment %s added to listing %s", comment.id, listing_id)
    return comment


def list_comments(db: Session, listing_id: int) -> list[Comment]:
    query = (
        select(Comment)
        .where(Comment.listing_id == listing_id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
    )
    return list(db.scalars(query).all())
