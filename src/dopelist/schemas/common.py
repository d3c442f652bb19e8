"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from dopelist.db.time import ensure_utc

# Stores such as SQLite hand back naive values; always emit an explicit UTC offset.
UtcDateTime = Annotated[datetime, AfterValidator(ensure_utc)]


class CamelModel(BaseModel):
    """Base model exchanging camelCase JSON while keeping snake_case attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(BaseModel):
    """Flat error body returned for every failed request."""

    error: str = Field(..., description="Human-readable failure message.")


class SuccessResponse(CamelModel):
    success: bool = True
    message: str | None = None
