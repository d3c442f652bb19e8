"""Payment-gated creation and renewal of listings.

Checkout runs in two phases. ``start_checkout`` records a pending intent and
sends the caller to the provider; once the provider redirects back, the
``verify_and_*`` functions confirm the payment and commit the listing change
together with a redemption row in a single transaction. Unique constraints on
``payment_redemption.token`` and ``listing.payment_token`` make the second of
two concurrent redemptions fail on commit.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dopelist.core.settings import settings
from dopelist.db.time import ensure_utc, utcnow
from dopelist.models import (
    BillingCustomer,
    CheckoutIntent,
    Identity,
    IntentStatus,
    Listing,
    PaymentAction,
    PaymentRedemption,
)
from dopelist.models.listing import empty_reactions
from dopelist.services import expiry
from dopelist.services.errors import (
    CheckoutExpiredError,
    ForbiddenError,
    NotFoundError,
    PaymentAlreadyUsedError,
    PaymentNotCompletedError,
    PaymentProviderError,
    ValidationError,
)
from dopelist.services.listings import ListingDraft, validate_draft
from dopelist.services.payments import CheckoutRequest, StripeClient, Subscription

logger = logging.getLogger(__name__)

# Placeholder Stripe substitutes with the real session id on redirect.
_SESSION_ID_PLACEHOLDER = "{CHECKOUT_SESSION_ID}"


@dataclass(frozen=True)
class CheckoutStart:
    """Where to send the caller to pay, and the intent waiting for that payment."""

    url: str
    intent_id: int
    token: str | None
    demo: bool


def is_demo_token(token: str) -> bool:
    return token.startswith(settings.demo_token_prefix)


def price_for(action: PaymentAction) -> int:
    if action is PaymentAction.RENEW:
        return settings.renewal_price_cents
    return settings.listing_price_cents


def _default_return_url(action: PaymentAction) -> str:
    base = settings.public_base_url.rstrip("/")
    if action is PaymentAction.RENEW:
        return f"{base}/my-posts"
    return f"{base}/create"


def _with_session_id(url: str, session_id: str) -> str:
    # Built by hand so the Stripe placeholder braces stay unescaped.
    parts = urlsplit(url)
    query = urlencode([(k, v) for k, v in parse_qsl(parts.query) if k != "session_id"])
    query = f"{query}&session_id={session_id}" if query else f"session_id={session_id}"
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


async def _ensure_customer(db: Session, identity: Identity, provider: StripeClient) -> str:
    link = db.get(BillingCustomer, identity.id)
    if link is not None:
        return link.customer_id

    customer_id = await provider.create_customer(identity.id)
    db.add(BillingCustomer(identity_id=identity.id, customer_id=customer_id))
    try:
        db.commit()
    except IntegrityError:
        # Another request linked a customer first; use theirs.
        db.rollback()
        link = db.get(BillingCustomer, identity.id)
        if link is None:
            raise
        return link.customer_id
    logger.info("Linked identity %s to billing customer %s", identity.id, customer_id)
    return customer_id


async def start_checkout(
    db: Session,
    identity: Identity,
    action: PaymentAction,
    *,
    provider: StripeClient,
    listing_id: int | None = None,
    return_url: str | None = None,
    now: datetime | None = None,
) -> CheckoutStart:
    """Reserve a checkout intent and return the URL the caller should visit.

    Raises:
        ValidationError: If a renewal does not name a listing.
        NotFoundError: If the renewal target is absent or owned by someone else.
        PaymentProviderError: If the provider rejects the checkout session.
    """
    now = ensure_utc(now or utcnow())
    if action is PaymentAction.RENEW:
        if listing_id is None:
            raise ValidationError("postId required")
        listing = db.get(Listing, listing_id)
        if listing is None or listing.owner_id != identity.id:
            raise NotFoundError()
    else:
        listing_id = None

    return_url = return_url or _default_return_url(action)
    amount = price_for(action)
    customer_id = await _ensure_customer(db, identity, provider) if provider.enabled else None

    intent = CheckoutIntent(
        identity_id=identity.id,
        action=str(action),
        listing_id=listing_id,
        amount_cents=amount,
        status=IntentStatus.PENDING,
        created_at=now,
        expires_at=now + timedelta(minutes=settings.checkout_intent_ttl_minutes),
    )
    db.add(intent)
    db.flush()

    if not provider.enabled:
        intent.token = f"{settings.demo_token_prefix}{uuid.uuid4().hex}"
        db.commit()
        logger.info("Demo checkout %s for %s (%s)", intent.token, identity.id, action)
        return CheckoutStart(
            url=_with_session_id(return_url, intent.token),
            intent_id=intent.id,
            token=intent.token,
            demo=True,
        )

    try:
        session = await provider.create_checkout_session(
            CheckoutRequest(
                amount_cents=amount,
                product_name="Post renewal" if action is PaymentAction.RENEW else "New post",
                success_url=_with_session_id(return_url, _SESSION_ID_PLACEHOLDER),
                cancel_url=return_url,
                customer_id=customer_id,
                metadata={
                    "intent_id": str(intent.id),
                    "action": str(action),
                    "listing_id": "" if listing_id is None else str(listing_id),
                },
            ),
            idempotency_key=f"intent-{intent.id}",
        )
    except PaymentProviderError:
        db.rollback()
        raise

    intent.token = session.id
    db.commit()
    logger.info("Checkout session %s opened for %s (%s)", session.id, identity.id, action)
    return CheckoutStart(url=session.url or return_url, intent_id=intent.id, token=None, demo=False)


def _ensure_unused(db: Session, token: str) -> None:
    if db.get(PaymentRedemption, token) is not None:
        raise PaymentAlreadyUsedError()
    if db.scalar(select(Listing.id).where(Listing.payment_token == token)) is not None:
        raise PaymentAlreadyUsedError()


def _matching_intent(
    db: Session,
    token: str,
    identity: Identity,
    action: PaymentAction,
    listing_id: int | None,
    now: datetime,
) -> CheckoutIntent | None:
    """Return the pending intent recorded for ``token``, if checkout went through us."""
    intent = db.scalar(select(CheckoutIntent).where(CheckoutIntent.token == token))
    if intent is None:
        return None
    if intent.status == IntentStatus.CONSUMED:
        raise PaymentAlreadyUsedError()
    if intent.identity_id != identity.id:
        raise ForbiddenError()
    if intent.action != action:
        raise ValidationError("Payment was made for a different action")
    if action is PaymentAction.RENEW and intent.listing_id != listing_id:
        raise ValidationError("Payment was made for a different post")
    if ensure_utc(now) >= ensure_utc(intent.expires_at):
        raise CheckoutExpiredError()
    return intent


async def _confirm_paid(token: str, provider: StripeClient) -> str | None:
    """Return the provider payment id for a paid session.

    Demo tokens, and every token while no provider key is configured, are
    accepted without verification and carry no payment id.
    """
    if is_demo_token(token):
        logger.info("Accepting demo payment token %s", token)
        return None
    if not provider.enabled:
        logger.info("Payments not configured; accepting token %s unverified", token)
        return None

    session = await provider.retrieve_checkout_session(token)
    if not session.paid:
        logger.info("Checkout session %s not paid (status=%s)", token, session.payment_status)
        raise PaymentNotCompletedError()
    return session.payment_intent


def _commit_redemption(db: Session, token: str) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Payment token %s lost a concurrent redemption", token)
        raise PaymentAlreadyUsedError() from exc


async def verify_and_create(
    db: Session,
    identity: Identity,
    token: str,
    draft: ListingDraft,
    *,
    provider: StripeClient,
    now: datetime | None = None,
) -> Listing:
    """Create a listing paid for by ``token``.

    Raises:
        PaymentAlreadyUsedError: If ``token`` was redeemed before.
        CheckoutExpiredError: If the matching checkout intent expired.
        PaymentNotCompletedError: If the provider reports the session unpaid.
        ValidationError: If the listing fields are invalid.
    """
    now = ensure_utc(now or utcnow())
    if not token:
        raise ValidationError("sessionId required")

    _ensure_unused(db, token)
    intent = _matching_intent(db, token, identity, PaymentAction.CREATE, None, now)
    provider_payment_id = await _confirm_paid(token, provider)
    fields = validate_draft(db, draft)

    listing = Listing(
        owner_id=identity.id,
        **fields,
        votes=0,
        reactions=empty_reactions(),
        payment_token=token,
        provider_payment_id=provider_payment_id,
        created_at=now,
        expires_at=expiry.expires_at_from(now),
        comments_close_at=expiry.comments_close_at_from(now),
        active=True,
    )
    try:
        db.add(listing)
        db.flush()
        db.add(
            PaymentRedemption(
                token=token,
                listing_id=listing.id,
                identity_id=identity.id,
                action=str(PaymentAction.CREATE),
                provider_payment_id=provider_payment_id,
                amount_cents=intent.amount_cents if intent else price_for(PaymentAction.CREATE),
                created_at=now,
            )
        )
        if intent is not None:
            intent.status = IntentStatus.CONSUMED
    except IntegrityError as exc:
        db.rollback()
        raise PaymentAlreadyUsedError() from exc
    _commit_redemption(db, token)

    db.refresh(listing)
    logger.info("Listing %s created by %s with payment %s", listing.id, identity.id, token)
    return listing


async def verify_and_renew(
    db: Session,
    identity: Identity,
    token: str,
    listing_id: int,
    *,
    provider: StripeClient,
    now: datetime | None = None,
) -> Listing:
    """Extend a listing by one full duration from ``now``, paid for by ``token``.

    The listing keeps its id, engagement counters and comment window; it is
    reactivated if it had expired or been deactivated.
    """
    now = ensure_utc(now or utcnow())
    if not token:
        raise ValidationError("sessionId required")

    listing = db.get(Listing, listing_id)
    if listing is None or listing.owner_id != identity.id:
        raise NotFoundError()

    _ensure_unused(db, token)
    intent = _matching_intent(db, token, identity, PaymentAction.RENEW, listing_id, now)
    provider_payment_id = await _confirm_paid(token, provider)

    listing.expires_at = expiry.expires_at_from(now)
    listing.active = True
    listing.payment_token = token
    listing.provider_payment_id = provider_payment_id
    db.add(
        PaymentRedemption(
            token=token,
            listing_id=listing.id,
            identity_id=identity.id,
            action=str(PaymentAction.RENEW),
            provider_payment_id=provider_payment_id,
            amount_cents=intent.amount_cents if intent else price_for(PaymentAction.RENEW),
            created_at=now,
        )
    )
    if intent is not None:
        intent.status = IntentStatus.CONSUMED
    _commit_redemption(db, token)

    db.refresh(listing)
    logger.info("Listing %s renewed by %s with payment %s", listing.id, identity.id, token)
    return listing


def list_orders(db: Session, identity: Identity) -> list[PaymentRedemption]:
    """Return the caller's redeemed payments, newest first."""
    query = (
        select(PaymentRedemption)
        .where(PaymentRedemption.identity_id == identity.id)
        .order_by(PaymentRedemption.created_at.desc())
    )
    return list(db.scalars(query).all())


@dataclass(frozen=True)
class SubscriptionStatus:
    """Billing link and latest subscription for one identity."""

    customer_id: str | None
    subscription: Subscription | None = None


async def subscription_status(
    db: Session,
    identity: Identity,
    *,
    provider: StripeClient,
) -> SubscriptionStatus:
    """Read the caller's subscription from the provider; read-only.

    Identities that never reached checkout, or any identity while payments
    are not configured, report no subscription without calling the provider.
    """
    link = db.get(BillingCustomer, identity.id)
    if link is None or not provider.enabled:
        return SubscriptionStatus(customer_id=link.customer_id if link else None)
    subscription = await provider.latest_subscription(link.customer_id)
    return SubscriptionStatus(customer_id=link.customer_id, subscription=subscription)
