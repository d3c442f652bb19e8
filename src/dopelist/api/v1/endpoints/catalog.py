"""Catalog endpoints for cities, sections and categories."""

from fastapi import APIRouter

from dopelist.models import Section
from dopelist.schemas import CategoryOut, CityOut, SectionOut
from dopelist.services import listings

from ..dependencies import SessionDep

router = APIRouter(tags=["catalog"])


@router.get("/cities")
async def get_cities(db: SessionDep) -> list[CityOut]:
    return [CityOut.model_validate(city) for city in listings.list_cities(db)]


@router.get("/categories")
async def get_categories(db: SessionDep, section: Section | None = None) -> list[CategoryOut]:
    """List categories, optionally limited to one section."""
    return [CategoryOut.model_validate(cat) for cat in listings.list_categories(db, section)]


@router.get("/sections")
async def get_sections() -> list[SectionOut]:
    return [SectionOut(key=key, name=name) for key, name in listings.list_sections()]
