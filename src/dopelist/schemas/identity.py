"""Identity and session schemas."""
from __future__ import annotations

from pydantic import Field

from dopelist.models import IdentityKind

from .common import CamelModel, UtcDateTime


class IdentityOut(CamelModel):
    id: str
    kind: IdentityKind
    created_at: UtcDateTime


class SessionRequest(CamelModel):
    """Body of ``POST /auth/session``."""

    anonymous_token: str | None = Field(
        None,
        description="Previous anonymous token, sent once after signing up or in.",
    )


class SessionResponse(CamelModel):
    identity: IdentityOut
    access_token: str | None = Field(
        None,
        description="Token for a newly minted anonymous identity; keep it for later requests.",
    )
    minted: bool = False
    merged: bool = False


class MergeRequest(CamelModel):
    anonymous_user_id: str = Field(..., min_length=1)
    authenticated_user_id: str = Field(..., min_length=1)


class MergeResponse(CamelModel):
    success: bool = True
    message: str
    already_merged: bool = False
    failed_steps: list[str] = Field(default_factory=list)
