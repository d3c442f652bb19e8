# mypy: ignore-errors
# tests/v1/test_reactions.py
"""Tests for the reaction endpoint."""

from datetime import timedelta

from fastapi import status
from sqlalchemy import func, select

from dopelist.db.time import utcnow
from dopelist.models import ListingReaction


def test_anonymous_reaction(client, db_session, listing) -> None:
    response = client.post("/api/v1/reactions", json={"postId": listing.id, "reaction": "hot"})

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["success"] is True
    assert body["reactions"]["hot"] == 1
    assert body["reactions"]["deal"] == 0
    assert db_session.scalar(select(ListingReaction.identity_id)) is None


def test_reactions_accumulate(client, db_session, listing, other_headers) -> None:
    client.post("/api/v1/reactions", json={"postId": listing.id, "reaction": "deal"}, headers=other_headers)
    response = client.post(
        "/api/v1/reactions", json={"postId": listing.id, "reaction": "deal"}, headers=other_headers
    )

    assert response.json()["reactions"]["deal"] == 2
    assert db_session.scalar(select(func.count()).select_from(ListingReaction)) == 2


def test_unknown_reaction(client, listing) -> None:
    response = client.post("/api/v1/reactions", json={"postId": listing.id, "reaction": "angry"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_reaction_on_expired_listing(client, anon_identity, make_listing) -> None:
    expired = make_listing(anon_identity, created_at=utcnow() - timedelta(days=8))
    response = client.post("/api/v1/reactions", json={"postId": expired.id, "reaction": "hot"})
    assert response.status_code == status.HTTP_404_NOT_FOUND
