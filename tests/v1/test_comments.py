# mypy: ignore-errors
# tests/v1/test_comments.py
"""Tests for comment endpoints."""

from datetime import timedelta

from fastapi import status

from dopelist.db.time import utcnow


def test_post_and_list_comments(client, listing, other_headers) -> None:
    first = client.post(
        "/api/v1/comments",
        json={"postId": listing.id, "text": "  Is it still available?  "},
        headers=other_headers,
    )
    client.post(
        "/api/v1/comments",
        json={"postId": listing.id, "text": "Still there?"},
        headers=other_headers,
    )

    assert first.status_code == status.HTTP_201_CREATED
    assert first.json()["text"] == "Is it still available?"
    assert first.json()["authorId"] == "anon-other"

    body = client.get("/api/v1/comments", params={"postId": listing.id}).json()
    assert [c["text"] for c in body["comments"]] == ["Is it still available?", "Still there?"]
    assert body["commentsOpen"] is True
    assert body["commentsTimeLeft"].endswith("hours left")


def test_empty_comment(client, listing, other_headers) -> None:
    response = client.post(
        "/api/v1/comments",
        json={"postId": listing.id, "text": "   "},
        headers=other_headers,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "postId and text required"}


def test_comment_too_long(client, listing, other_headers) -> None:
    response = client.post(
        "/api/v1/comments",
        json={"postId": listing.id, "text": "x" * 2001},
        headers=other_headers,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_comments_closed(client, anon_identity, make_listing, other_headers) -> None:
    created = utcnow() - timedelta(days=3)
    closed = make_listing(
        anon_identity,
        created_at=created,
        comments_close_at=created + timedelta(days=2),
    )

    response = client.post(
        "/api/v1/comments",
        json={"postId": closed.id, "text": "Hello?"},
        headers=other_headers,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "Comments are closed for this post"}
    body = client.get("/api/v1/comments", params={"postId": closed.id}).json()
    assert body["commentsOpen"] is False
    assert body["commentsTimeLeft"] == "Closed"


def test_comment_on_inactive_listing(client, anon_identity, make_listing, other_headers) -> None:
    inactive = make_listing(anon_identity, active=False)
    response = client.post(
        "/api/v1/comments",
        json={"postId": inactive.id, "text": "Hello?"},
        headers=other_headers,
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"error": "Post not found or inactive"}


def test_list_comments_missing_listing(client) -> None:
    response = client.get("/api/v1/comments", params={"postId": 999})
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_list_comments_requires_post_id(client) -> None:
    assert client.get("/api/v1/comments").status_code == 422
