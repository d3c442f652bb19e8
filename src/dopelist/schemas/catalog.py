"""Catalog schemas: cities, sections and categories."""
from __future__ import annotations

from dopelist.models import Section

from .common import CamelModel


class CityOut(CamelModel):
    id: int
    name: str
    slug: str


class CategoryOut(CamelModel):
    id: int
    section: Section
    name: str
    slug: str
    icon: str | None = None


class SectionOut(CamelModel):
    key: Section
    name: str
