"""Cities, sections and categories used to browse listings."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from dopelist.db.session import Base
from dopelist.db.time import utcnow


class Section(StrEnum):
    """Top-level board sections; every category belongs to exactly one."""

    COMMUNITY = "community"
    FOR_SALE = "for_sale"
    HOUSING = "housing"
    JOBS = "jobs"
    SERVICES = "services"
    GIGS = "gigs"
    DISCUSSION = "discussion"
    EVENTS = "events"
    RESUMES = "resumes"


SECTION_NAMES: dict[Section, str] = {
    section: section.value.replace("_", " ") for section in Section
}


class City(Base):
    """City a listing is posted in."""

    __tablename__ = "city"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )


class Category(Base):
    """Category within a section (e.g. "bikes" under "for sale")."""

    __tablename__ = "category"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    section: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    icon: Mapped[str | None] = mapped_column(Text, nullable=True)
