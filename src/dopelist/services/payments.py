"""Payment provider client for Stripe Checkout.

Talks to the Stripe REST API directly over ``httpx``: customers, checkout
sessions, session retrieval and a read of the customer's latest subscription.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from dopelist.core.settings import settings
from dopelist.services.errors import PaymentProviderError

logger = logging.getLogger(__name__)

PAYMENT_STATUS_PAID = "paid"
SUBSCRIPTION_NOT_STARTED = "not_started"


@dataclass(frozen=True)
class PaymentConfig:
    """Immutable configuration for provider calls."""

    secret_key: str | None
    api_base: str
    timeout_seconds: float
    listing_price_id: str | None
    currency: str

    @property
    def enabled(self) -> bool:
        return bool(self.secret_key)


@dataclass(frozen=True)
class CheckoutSession:
    """Subset of a provider checkout session used by the payment gate."""

    id: str
    url: str | None
    payment_status: str
    payment_intent: str | None = None
    customer: str | None = None
    metadata: Mapping[str, str] = field(default_factory=dict)

    @property
    def paid(self) -> bool:
        return self.payment_status == PAYMENT_STATUS_PAID


@dataclass(frozen=True)
class Subscription:
    """Latest subscription on a provider customer, as shown to its owner."""

    id: str
    status: str
    price_id: str | None = None
    current_period_start: int | None = None
    current_period_end: int | None = None
    cancel_at_period_end: bool = False

    @property
    def active(self) -> bool:
        return self.status == "active"


@dataclass(frozen=True)
class CheckoutRequest:
    """Parameters for opening a hosted checkout page."""

    amount_cents: int
    product_name: str
    success_url: str
    cancel_url: str
    customer_id: str | None = None
    metadata: Mapping[str, str] = field(default_factory=dict)


def load_payment_config() -> PaymentConfig:
    """Build configuration object from global settings."""
    return PaymentConfig(
        secret_key=settings.stripe_secret_key,
        api_base=settings.stripe_api_base,
        timeout_seconds=float(settings.stripe_http_timeout_seconds),
        listing_price_id=settings.stripe_listing_price_id,
        currency=settings.payment_currency,
    )


def _session_from_payload(payload: Mapping[str, Any]) -> CheckoutSession:
    payment_intent = payload.get("payment_intent")
    if isinstance(payment_intent, Mapping):
        payment_intent = payment_intent.get("id")
    customer = payload.get("customer")
    if isinstance(customer, Mapping):
        customer = customer.get("id")
    return CheckoutSession(
        id=str(payload["id"]),
        url=payload.get("url"),
        payment_status=str(payload.get("payment_status") or "unpaid"),
        payment_intent=payment_intent,
        customer=customer,
        metadata=dict(payload.get("metadata") or {}),
    )


def _subscription_from_payload(payload: Mapping[str, Any]) -> Subscription:
    items = (payload.get("items") or {}).get("data") or []
    first_item: Mapping[str, Any] = items[0] if items else {}
    price = first_item.get("price") or {}
    # Newer API versions report billing periods per item.
    period_start = payload.get("current_period_start", first_item.get("current_period_start"))
    period_end = payload.get("current_period_end", first_item.get("current_period_end"))
    return Subscription(
        id=str(payload["id"]),
        status=str(payload.get("status") or SUBSCRIPTION_NOT_STARTED),
        price_id=price.get("id") if isinstance(price, Mapping) else price,
        current_period_start=period_start,
        current_period_end=period_end,
        cancel_at_period_end=bool(payload.get("cancel_at_period_end")),
    )


class StripeClient:
    """HTTP client wrapper for Stripe interactions."""

    def __init__(
        self,
        config: PaymentConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or load_payment_config()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    async def _ensure_client(self) -> httpx.AsyncClient:
        if not self.enabled:
            raise PaymentProviderError("Payment provider is not configured")

        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self.config.api_base,
                    timeout=httpx.Timeout(self.config.timeout_seconds),
                    headers={"Authorization": f"Bearer {self.config.secret_key}"},
                    transport=self._transport,
                )
        return self._client

    async def _request(
        self,
        method: str,
        path: str,
        *,
        data: Mapping[str, Any] | None = None,
        params: Mapping[str, Any] | None = None,
        idempotency_key: str | None = None,
    ) -> dict[str, Any]:
        client = await self._ensure_client()
        headers = {"Idempotency-Key": idempotency_key} if idempotency_key else None
        try:
            response = await client.request(
                method, path, data=data, params=params, headers=headers
            )
        except httpx.HTTPError as exc:
            logger.warning("Stripe %s %s failed: %s", method, path, exc)
            raise PaymentProviderError(f"Payment provider request failed: {exc}") from exc

        if response.status_code >= httpx.codes.BAD_REQUEST:
            message = _error_message(response)
            logger.warning(
                "Stripe %s %s responded %s: %s", method, path, response.status_code, message
            )
            raise PaymentProviderError(f"Payment provider error: {message}")

        body: dict[str, Any] = response.json()
        return body

    async def create_customer(self, identity_id: str) -> str:
        """Create a provider customer tagged with our identity id."""
        body = await self._request(
            "POST",
            "/v1/customers",
            data={"metadata[identity_id]": identity_id},
            idempotency_key=f"customer-{identity_id}",
        )
        return str(body["id"])

    async def create_checkout_session(
        self,
        request: CheckoutRequest,
        *,
        idempotency_key: str | None = None,
    ) -> CheckoutSession:
        """Open a one-off payment checkout session."""
        data: dict[str, Any] = {
            "mode": "payment",
            "success_url": request.success_url,
            "cancel_url": request.cancel_url,
            "line_items[0][quantity]": 1,
        }
        if self.config.listing_price_id:
            data["line_items[0][price]"] = self.config.listing_price_id
        else:
            data["line_items[0][price_data][currency]"] = self.config.currency
            data["line_items[0][price_data][unit_amount]"] = request.amount_cents
            data["line_items[0][price_data][product_data][name]"] = request.product_name
        if request.customer_id:
            data["customer"] = request.customer_id
        for key, value in request.metadata.items():
            data[f"metadata[{key}]"] = value

        body = await self._request(
            "POST",
            "/v1/checkout/sessions",
            data=data,
            idempotency_key=idempotency_key,
        )
        return _session_from_payload(body)

    async def retrieve_checkout_session(self, session_id: str) -> CheckoutSession:
        """Fetch a checkout session to check whether it was paid."""
        body = await self._request("GET", f"/v1/checkout/sessions/{session_id}")
        return _session_from_payload(body)

    async def latest_subscription(self, customer_id: str) -> Subscription | None:
        """Return the customer's most recent subscription in any status, if one exists."""
        body = await self._request(
            "GET",
            "/v1/subscriptions",
            params={"customer": customer_id, "status": "all", "limit": 1},
        )
        rows = body.get("data") or []
        if not rows:
            return None
        return _subscription_from_payload(rows[0])

    async def close(self) -> None:
        """Clean up underlying HTTP client resources."""
        async with self._client_lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    error = payload.get("error") if isinstance(payload, Mapping) else None
    if isinstance(error, Mapping) and error.get("message"):
        return str(error["message"])
    return f"HTTP {response.status_code}"


class _StripeClientSingleton:
    """Singleton wrapper for StripeClient."""

    _instance: StripeClient | None = None

    @classmethod
    def get_instance(cls) -> StripeClient:
        if cls._instance is None:
            cls._instance = StripeClient()
        return cls._instance


def get_payment_provider() -> StripeClient:
    """Return a singleton payment provider client."""
    return _StripeClientSingleton.get_instance()
