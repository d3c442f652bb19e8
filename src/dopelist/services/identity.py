# src/dopelist/services/identity.py
"""Identity resolution and anonymous-to-authenticated account merging."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dopelist.core.security import TokenClaims, create_access_token
from dopelist.db.time import utcnow
from dopelist.models import (
    BillingCustomer,
    CheckoutIntent,
    Comment,
    ContactView,
    Identity,
    IdentityKind,
    Listing,
    ListingReaction,
    ListingVote,
    PaymentRedemption,
)
from dopelist.services.errors import ForbiddenError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

MergeStep = Callable[[Session, str, str], None]


@dataclass(frozen=True)
class SessionContext:
    """Credential material presented by one browser session.

    ``claims`` is the verified bearer credential, if any. ``upgrading_from``
    is the previous anonymous credential, sent once right after the session
    signs up or signs in.
    """

    claims: TokenClaims | None = None
    upgrading_from: TokenClaims | None = None


@dataclass(frozen=True)
class ResolvedIdentity:
    """Outcome of resolving a session to its current identity."""

    identity: Identity
    access_token: str | None = None
    minted: bool = False
    merged: bool = False


@dataclass
class MergeResult:
    """Summary of a merge; ``failed_steps`` lists entity types left behind."""

    anonymous_id: str
    authenticated_id: str
    already_merged: bool = False
    failed_steps: list[str] = field(default_factory=list)


def mint_anonymous(db: Session) -> ResolvedIdentity:
    """Create a fresh anonymous identity and a token the client should keep."""
    identity = Identity(id=uuid.uuid4().hex, kind=IdentityKind.ANONYMOUS)
    db.add(identity)
    db.commit()
    db.refresh(identity)
    logger.info("Minted anonymous identity %s", identity.id)
    return ResolvedIdentity(
        identity=identity,
        access_token=create_access_token(identity.id, IdentityKind.ANONYMOUS),
        minted=True,
    )


def identity_for_claims(db: Session, claims: TokenClaims) -> Identity | None:
    """Return the live identity a credential refers to.

    Authenticated identities are provisioned on first sight because their
    credentials come from the external auth provider. Anonymous identities
    must already exist and must not have been merged away.
    """
    identity = db.get(Identity, claims.subject)
    if claims.kind is IdentityKind.AUTHENTICATED:
        if identity is None:
            identity = Identity(id=claims.subject, kind=IdentityKind.AUTHENTICATED)
            db.add(identity)
            db.commit()
            db.refresh(identity)
            logger.info("Provisioned authenticated identity %s", identity.id)
            return identity
        if identity.kind != IdentityKind.AUTHENTICATED:
            return None
        return identity

    if identity is None or identity.kind != IdentityKind.ANONYMOUS or identity.is_superseded:
        return None
    return identity


def resolve(db: Session, context: SessionContext) -> ResolvedIdentity:
    """Return the current identity for a session, minting or merging as needed."""
    if context.claims is None:
        return mint_anonymous(db)

    identity = identity_for_claims(db, context.claims)
    if identity is None:
        return mint_anonymous(db)

    upgrading = context.upgrading_from
    if (
        identity.kind == IdentityKind.AUTHENTICATED
        and upgrading is not None
        and upgrading.kind is IdentityKind.ANONYMOUS
        and upgrading.subject != identity.id
    ):
        try:
            merge(db, upgrading.subject, identity.id, caller=identity)
        except (NotFoundError, ForbiddenError, ValidationError) as exc:
            logger.warning(
                "Skipping merge of %s into %s: %s", upgrading.subject, identity.id, exc
            )
        else:
            return ResolvedIdentity(identity=identity, merged=True)

    return ResolvedIdentity(identity=identity)


def _reassign_listings(db: Session, source: str, target: str) -> None:
    db.execute(update(Listing).where(Listing.owner_id == source).values(owner_id=target))


def _reassign_comments(db: Session, source: str, target: str) -> None:
    db.execute(update(Comment).where(Comment.author_id == source).values(author_id=target))


def _reassign_votes(db: Session, source: str, target: str) -> None:
    # A listing keeps one vote per identity; the authenticated vote wins.
    already_voted = select(ListingVote.listing_id).where(ListingVote.identity_id == target)
    conflicts = db.scalars(
        select(ListingVote).where(
            ListingVote.identity_id == source,
            ListingVote.listing_id.in_(already_voted),
        )
    ).all()
    for vote in conflicts:
        listing = db.get(Listing, vote.listing_id)
        if listing is not None:
            listing.votes -= vote.value
        db.delete(vote)
    db.flush()
    db.execute(
        update(ListingVote)
        .where(ListingVote.identity_id == source)
        .values(identity_id=target)
        .execution_options(synchronize_session=False)
    )


def _reassign_reactions(db: Session, source: str, target: str) -> None:
    db.execute(
        update(ListingReaction)
        .where(ListingReaction.identity_id == source)
        .values(identity_id=target)
    )


def _reassign_contact_views(db: Session, source: str, target: str) -> None:
    db.execute(
        update(ContactView).where(ContactView.viewer_id == source).values(viewer_id=target)
    )


def _reassign_intents(db: Session, source: str, target: str) -> None:
    # Pending checkouts started before sign-in must verify for the new owner.
    db.execute(
        update(CheckoutIntent)
        .where(CheckoutIntent.identity_id == source)
        .values(identity_id=target)
    )


def _reassign_redemptions(db: Session, source: str, target: str) -> None:
    db.execute(
        update(PaymentRedemption)
        .where(PaymentRedemption.identity_id == source)
        .values(identity_id=target)
    )


def _reconcile_billing(db: Session, source: str, target: str) -> None:
    anonymous_link = db.get(BillingCustomer, source)
    if anonymous_link is None:
        return
    if db.get(BillingCustomer, target) is None:
        anonymous_link.identity_id = target
    else:
        db.delete(anonymous_link)


_MERGE_STEPS: tuple[tuple[str, MergeStep], ...] = (
    ("listings", _reassign_listings),
    ("comments", _reassign_comments),
    ("votes", _reassign_votes),
    ("reactions", _reassign_reactions),
    ("contact_views", _reassign_contact_views),
    ("intents", _reassign_intents),
    ("redemptions", _reassign_redemptions),
    ("billing", _reconcile_billing),
)


def _run_step(db: Session, name: str, step: MergeStep, source: str, target: str) -> bool:
    try:
        step(db, source, target)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error("Merge step %s failed for %s -> %s", name, source, target, exc_info=True)
        return False
    return True


def merge(
    db: Session,
    anonymous_id: str,
    authenticated_id: str,
    *,
    caller: Identity,
) -> MergeResult:
    """Move everything an anonymous identity owns onto an authenticated one.

    Every step commits on its own. A failing step is logged and skipped, and
    earlier steps stay applied; calling again with the same pair re-runs the
    steps, which only touch rows still owned by the anonymous identity.

    Raises:
        ForbiddenError: If the caller is not ``authenticated_id``, or the
            anonymous identity was already merged into someone else.
        ValidationError: If the ids are equal or the source is not anonymous.
        NotFoundError: If the anonymous identity does not exist.
    """
    if caller.id != authenticated_id or caller.kind != IdentityKind.AUTHENTICATED:
        raise ForbiddenError("Unauthorized")
    if anonymous_id == authenticated_id:
        raise ValidationError("Cannot merge an identity into itself")

    anonymous = db.get(Identity, anonymous_id)
    if anonymous is None:
        raise NotFoundError("Anonymous identity not found")
    if anonymous.kind != IdentityKind.ANONYMOUS:
        raise ValidationError("Only anonymous identities can be merged")
    if anonymous.superseded_by not in (None, authenticated_id):
        raise ForbiddenError("Anonymous identity was merged into another account")

    result = MergeResult(
        anonymous_id=anonymous_id,
        authenticated_id=authenticated_id,
        already_merged=anonymous.superseded_by == authenticated_id,
    )

    for name, step in _MERGE_STEPS:
        if not _run_step(db, name, step, anonymous_id, authenticated_id):
            result.failed_steps.append(name)

    anonymous = db.get(Identity, anonymous_id)
    if anonymous is not None and anonymous.superseded_by is None:
        anonymous.superseded_by = authenticated_id
        anonymous.merged_at = utcnow()
        db.commit()

    logger.info(
        "Merged identity %s into %s (already_merged=%s, failed=%s)",
        anonymous_id,
        authenticated_id,
        result.already_merged,
        result.failed_steps,
    )
    return result
