# src/dopelist/api/v1/endpoints/auth.py
"""Session endpoints: anonymous minting, sign-in upgrade and the current identity."""

import logging
from typing import Annotated

from fastapi import APIRouter, Body
from jose import JWTError

from dopelist.core.security import TokenClaims, decode_access_token
from dopelist.schemas import IdentityOut, SessionRequest, SessionResponse
from dopelist.services.identity import SessionContext, resolve

from ..dependencies import CurrentIdentityDep, SessionClaimsDep, SessionDep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


def _previous_anonymous_claims(token: str | None) -> TokenClaims | None:
    if not token:
        return None
    try:
        return decode_access_token(token)
    except JWTError as err:
        logger.info("Previous anonymous token rejected: %s", err)
        return None


@router.post("/session")
async def open_session(
    db: SessionDep,
    claims: SessionClaimsDep,
    request: Annotated[SessionRequest | None, Body()] = None,
) -> SessionResponse:
    """Resolve the caller's identity, minting an anonymous one when needed.

    Right after signing up or in, clients send their authenticated token as
    the bearer and the anonymous token in the body; the anonymous identity's
    listings and engagement are then merged into the authenticated one.
    """
    context = SessionContext(
        claims=claims,
        upgrading_from=_previous_anonymous_claims(request.anonymous_token if request else None),
    )
    resolved = resolve(db, context)
    return SessionResponse(
        identity=IdentityOut.model_validate(resolved.identity),
        access_token=resolved.access_token,
        minted=resolved.minted,
        merged=resolved.merged,
    )


@router.get("/me")
async def read_me(current_identity: CurrentIdentityDep) -> IdentityOut:
    """Return the identity behind the bearer token."""
    return IdentityOut.model_validate(current_identity)
