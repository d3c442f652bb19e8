# src/dopelist/schemas/checkout.py
"""Checkout, payment verification and renewal schemas."""
from __future__ import annotations

from pydantic import Field

from dopelist.models import PaymentAction, PaymentRedemption
from dopelist.services.payment_gate import SubscriptionStatus
from dopelist.services.payments import SUBSCRIPTION_NOT_STARTED

from .common import CamelModel, UtcDateTime
from .listing import ListingCreate


class CheckoutStartRequest(CamelModel):
    action: PaymentAction
    post_id: int | None = Field(None, description="Listing to renew; required for renew.")
    return_url: str | None = Field(
        None,
        description="Where the provider redirects after payment; session_id is appended.",
    )


class CheckoutStartResponse(CamelModel):
    url: str
    token: str | None = Field(None, description="Demo token when payments are not live.")
    intent_id: int
    demo: bool


class VerifyCreateRequest(CamelModel):
    session_id: str
    post_data: ListingCreate


class RenewRequest(CamelModel):
    post_id: int
    session_id: str


class OrderOut(CamelModel):
    token: str
    post_id: int
    action: PaymentAction
    amount_cents: int | None
    provider_payment_id: str | None
    created_at: UtcDateTime

    @classmethod
    def from_redemption(cls, redemption: PaymentRedemption) -> OrderOut:
        return cls(
            token=redemption.token,
            post_id=redemption.listing_id,
            action=PaymentAction(redemption.action),
            amount_cents=redemption.amount_cents,
            provider_payment_id=redemption.provider_payment_id,
            created_at=redemption.created_at,
        )


class OrderList(CamelModel):
    orders: list[OrderOut]


class SubscriptionOut(CamelModel):
    """Read-only subscription state; ``not_started`` when there is none."""

    customer_id: str | None
    subscription_id: str | None = None
    subscription_status: str = SUBSCRIPTION_NOT_STARTED
    price_id: str | None = None
    current_period_start: int | None = None
    current_period_end: int | None = None
    cancel_at_period_end: bool = False
    is_active: bool = False

    @classmethod
    def from_status(cls, status: SubscriptionStatus) -> SubscriptionOut:
        subscription = status.subscription
        if subscription is None:
            return cls(customer_id=status.customer_id)
        return cls(
            customer_id=status.customer_id,
            subscription_id=subscription.id,
            subscription_status=subscription.status,
            price_id=subscription.price_id,
            current_period_start=subscription.current_period_start,
            current_period_end=subscription.current_period_end,
            cancel_at_period_end=subscription.cancel_at_period_end,
            is_active=subscription.active,
        )
