# src/dopelist/api/v1/endpoints/payments.py
"""Checkout and payment-gated create/renew endpoints."""

from fastapi import APIRouter, status

from dopelist.models import PaymentAction
from dopelist.schemas import (
    CheckoutStartRequest,
    CheckoutStartResponse,
    ListingEnvelope,
    ListingResponse,
    OrderList,
    OrderOut,
    RenewRequest,
    SubscriptionOut,
    VerifyCreateRequest,
)
from dopelist.services import payment_gate

from ..dependencies import CurrentIdentityDep, PaymentProviderDep, SessionDep

router = APIRouter(tags=["payments"])


@router.post("/checkout")
async def start_checkout(
    request: CheckoutStartRequest,
    db: SessionDep,
    current_identity: CurrentIdentityDep,
    provider: PaymentProviderDep,
) -> CheckoutStartResponse:
    """Open a checkout for a new listing or a renewal.

    When payments are not live the response carries a demo token and a
    return URL that already includes it.
    """
    started = await payment_gate.start_checkout(
        db,
        current_identity,
        request.action,
        provider=provider,
        listing_id=request.post_id if request.action is PaymentAction.RENEW else None,
        return_url=request.return_url,
    )
    return CheckoutStartResponse(
        url=started.url,
        token=started.token,
        intent_id=started.intent_id,
        demo=started.demo,
    )


@router.post("/payments/verify-create", status_code=status.HTTP_201_CREATED)
async def verify_payment_and_create(
    request: VerifyCreateRequest,
    db: SessionDep,
    current_identity: CurrentIdentityDep,
    provider: PaymentProviderDep,
) -> ListingEnvelope:
    """Confirm a paid checkout and create the listing it pays for."""
    listing = await payment_gate.verify_and_create(
        db,
        current_identity,
        request.session_id,
        request.post_data.to_draft(),
        provider=provider,
    )
    return ListingEnvelope(post=ListingResponse.from_listing(listing, current_identity.id))


@router.post("/listings/renew")
async def renew_listing(
    request: RenewRequest,
    db: SessionDep,
    current_identity: CurrentIdentityDep,
    provider: PaymentProviderDep,
) -> ListingEnvelope:
    """Confirm a paid checkout and extend the caller's listing."""
    listing = await payment_gate.verify_and_renew(
        db,
        current_identity,
        request.session_id,
        request.post_id,
        provider=provider,
    )
    return ListingEnvelope(post=ListingResponse.from_listing(listing, current_identity.id))


@router.get("/payments/orders")
async def list_orders(db: SessionDep, current_identity: CurrentIdentityDep) -> OrderList:
    """Return the caller's redeemed payments, newest first."""
    orders = payment_gate.list_orders(db, current_identity)
    return OrderList(orders=[OrderOut.from_redemption(order) for order in orders])


@router.get("/payments/subscription")
async def get_subscription(
    db: SessionDep,
    current_identity: CurrentIdentityDep,
    provider: PaymentProviderDep,
) -> SubscriptionOut:
    """Return the caller's subscription status; read-only."""
    billing = await payment_gate.subscription_status(db, current_identity, provider=provider)
    return SubscriptionOut.from_status(billing)
