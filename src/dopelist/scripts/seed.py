"""Seed the catalog with a starter set of cities and categories.

Existing rows (matched by slug) are left untouched, so the script can be run
repeatedly.
"""

from __future__ import annotations

import argparse

from sqlalchemy import select
from sqlalchemy.orm import Session

from dopelist.db.session import SessionLocal, create_tables
from dopelist.models import Category, City, Section

DEFAULT_CITIES: tuple[tuple[str, str], ...] = (
    ("New York", "new-york"),
    ("Los Angeles", "los-angeles"),
    ("Chicago", "chicago"),
    ("San Francisco", "san-francisco"),
    ("Austin", "austin"),
)

DEFAULT_CATEGORIES: tuple[tuple[Section, str, str, str], ...] = (
    (Section.COMMUNITY, "Activities", "activities", "🎨"),
    (Section.COMMUNITY, "Lost & Found", "lost-found", "🔎"),
    (Section.FOR_SALE, "Electronics", "electronics", "💻"),
    (Section.FOR_SALE, "Furniture", "furniture", "🛋️"),
    (Section.FOR_SALE, "Bikes", "bikes", "🚲"),
    (Section.HOUSING, "Apartments", "apartments", "🏠"),
    (Section.HOUSING, "Rooms & Shares", "rooms-shares", "🛏️"),
    (Section.JOBS, "Software", "software-jobs", "💼"),
    (Section.JOBS, "Hospitality", "hospitality-jobs", "🍽️"),
    (Section.SERVICES, "Repairs", "repairs", "🔧"),
    (Section.SERVICES, "Lessons", "lessons", "📚"),
    (Section.GIGS, "Creative", "creative-gigs", "⚡"),
    (Section.GIGS, "Labor", "labor-gigs", "💪"),
    (Section.DISCUSSION, "General", "general", "💭"),
    (Section.EVENTS, "Music", "music-events", "🎉"),
    (Section.RESUMES, "Resumes", "resumes", "📄"),
)


def seed_catalog(db: Session) -> tuple[int, int]:
    """Insert missing default cities and categories; return how many were added."""
    existing_cities = set(db.scalars(select(City.slug)).all())
    existing_categories = set(db.scalars(select(Category.slug)).all())

    new_cities = [
        City(name=name, slug=slug) for name, slug in DEFAULT_CITIES if slug not in existing_cities
    ]
    new_categories = [
        Category(section=str(section), name=name, slug=slug, icon=icon)
        for section, name, slug, icon in DEFAULT_CATEGORIES
        if slug not in existing_categories
    ]
    db.add_all(new_cities)
    db.add_all(new_categories)
    db.commit()
    return len(new_cities), len(new_categories)


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed default cities and categories")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create tables from the ORM metadata first (local SQLite setups)",
    )
    args = parser.parse_args()

    if args.create_tables:
        create_tables()

    db = SessionLocal()
    try:
        cities, categories = seed_catalog(db)
    finally:
        db.close()
    print(f"[seed] added {cities} cities and {categories} categories")


if __name__ == "__main__":
    main()
