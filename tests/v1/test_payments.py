# mypy: ignore-errors
# tests/v1/test_payments.py
"""Tests for checkout, verify-create, renewal and order endpoints."""

from datetime import timedelta

import httpx
from fastapi import status
from sqlalchemy import func, select

from dopelist.db.time import ensure_utc, utcnow
from dopelist.models import BillingCustomer, Listing


def _count(db) -> int:
    return db.scalar(select(func.count(Listing.id)))


def test_demo_checkout(client, anon_headers) -> None:
    response = client.post(
        "/api/v1/checkout",
        json={"action": "create", "returnUrl": "https://app.test/create"},
        headers=anon_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["demo"] is True
    assert body["token"].startswith("demo_")
    assert body["url"] == f"https://app.test/create?session_id={body['token']}"
    assert isinstance(body["intentId"], int)


def test_checkout_rejects_unknown_action(client, anon_headers) -> None:
    response = client.post("/api/v1/checkout", json={"action": "upgrade"}, headers=anon_headers)
    assert response.status_code == 422


def test_renew_checkout_requires_post_id(client, anon_headers) -> None:
    response = client.post("/api/v1/checkout", json={"action": "renew"}, headers=anon_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "postId required"}


def test_checkout_then_verify_create(client, db_session, anon_headers, post_data) -> None:
    token = client.post(
        "/api/v1/checkout", json={"action": "create"}, headers=anon_headers
    ).json()["token"]

    response = client.post(
        "/api/v1/payments/verify-create",
        json={"sessionId": token, "postData": post_data},
        headers=anon_headers,
    )

    assert response.status_code == status.HTTP_201_CREATED
    post = response.json()["post"]
    assert post["title"] == "Vintage road bike"
    assert post["votes"] == 0
    assert post["isOwner"] is True
    assert set(post["contactInfo"]) == {"email", "phone"}
    assert _count(db_session) == 1


def test_verify_create_validation_error(client, anon_headers, post_data) -> None:
    post_data["images"] = [f"{i}.jpg" for i in range(7)]
    response = client.post(
        "/api/v1/payments/verify-create",
        json={"sessionId": "demo_9", "postData": post_data},
        headers=anon_headers,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "At most 6 images are allowed"}


def test_verify_create_requires_token(client, post_data) -> None:
    response = client.post(
        "/api/v1/payments/verify-create",
        json={"sessionId": "demo_1", "postData": post_data},
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_renew_endpoint(client, anon_identity, make_listing, anon_headers) -> None:
    listing = make_listing(anon_identity, created_at=utcnow() - timedelta(days=6, hours=23))

    response = client.post(
        "/api/v1/listings/renew",
        json={"postId": listing.id, "sessionId": "demo_renew"},
        headers=anon_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    post = response.json()["post"]
    assert post["id"] == listing.id
    assert post["visibility"] == "active"
    assert post["timeLeft"].startswith("6d") or post["timeLeft"].startswith("7d")


def test_renew_foreign_listing(client, listing, other_headers) -> None:
    response = client.post(
        "/api/v1/listings/renew",
        json={"postId": listing.id, "sessionId": "demo_renew"},
        headers=other_headers,
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"error": "Post not found or unauthorized"}


def test_orders(client, anon_headers, post_data) -> None:
    client.post(
        "/api/v1/payments/verify-create",
        json={"sessionId": "demo_order", "postData": post_data},
        headers=anon_headers,
    )

    orders = client.get("/api/v1/payments/orders", headers=anon_headers).json()["orders"]

    assert [(o["token"], o["action"]) for o in orders] == [("demo_order", "create")]


def test_live_unpaid_session(client, db_session, anon_headers, post_data, make_live_provider, use_provider) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"id": "cs_live_9", "url": None, "payment_status": "unpaid"},
        )

    use_provider(make_live_provider(handler))

    response = client.post(
        "/api/v1/payments/verify-create",
        json={"sessionId": "cs_live_9", "postData": post_data},
        headers=anon_headers,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "Payment not completed"}
    assert _count(db_session) == 0


def test_provider_outage_is_bad_gateway(client, anon_headers, post_data, make_live_provider, use_provider) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="unavailable")

    use_provider(make_live_provider(handler))

    response = client.post(
        "/api/v1/payments/verify-create",
        json={"sessionId": "cs_live_9", "postData": post_data},
        headers=anon_headers,
    )

    assert response.status_code == status.HTTP_502_BAD_GATEWAY
    assert "error" in response.json()


def test_renewal_expiry_is_a_week_from_now(client, db_session, anon_identity, make_listing, anon_headers) -> None:
    listing = make_listing(anon_identity, created_at=utcnow() - timedelta(days=3))
    before = utcnow()

    client.post(
        "/api/v1/listings/renew",
        json={"postId": listing.id, "sessionId": "demo_week"},
        headers=anon_headers,
    )

    db_session.expire_all()
    expires_at = ensure_utc(db_session.get(Listing, listing.id).expires_at)
    assert before + timedelta(days=7) <= expires_at <= utcnow() + timedelta(days=7)


def test_subscription_not_started(client, anon_headers) -> None:
    response = client.get("/api/v1/payments/subscription", headers=anon_headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["subscriptionStatus"] == "not_started"
    assert response.json()["isActive"] is False


def test_subscription_active(
    client, db_session, anon_identity, anon_headers, make_live_provider, use_provider
) -> None:
    db_session.add(BillingCustomer(identity_id=anon_identity.id, customer_id="cus_live"))
    db_session.commit()

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "data": [
                    {
                        "id": "sub_1",
                        "status": "active",
                        "items": {"data": [{"price": {"id": "price_pro"}}]},
                    }
                ]
            },
        )

    use_provider(make_live_provider(handler))

    body = client.get("/api/v1/payments/subscription", headers=anon_headers).json()

    assert body["customerId"] == "cus_live"
    assert body["subscriptionId"] == "sub_1"
    assert body["priceId"] == "price_pro"
    assert body["isActive"] is True
