# mypy: ignore-errors
# tests/v1/test_catalog.py
"""Tests for catalog endpoints."""

from fastapi import status


def test_cities(client, city) -> None:
    response = client.get("/api/v1/cities")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == [{"id": city.id, "name": "Austin", "slug": "austin"}]


def test_categories_filtered_by_section(client, category) -> None:
    for_sale = client.get("/api/v1/categories", params={"section": "for_sale"})
    jobs = client.get("/api/v1/categories", params={"section": "jobs"})

    assert [c["slug"] for c in for_sale.json()] == ["bikes"]
    assert jobs.json() == []


def test_unknown_section_is_rejected(client) -> None:
    response = client.get("/api/v1/categories", params={"section": "spaceships"})
    assert response.status_code == 422


def test_sections(client) -> None:
    sections = client.get("/api/v1/sections").json()
    assert len(sections) == 9
    assert {"key": "for_sale", "name": "for sale"} in sections
