"""Shared API dependencies for authentication and common functionality."""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from dopelist.core.security import TokenClaims, decode_access_token
from dopelist.db.session import get_db
from dopelist.models import Identity
from dopelist.services.identity import identity_for_claims
from dopelist.services.payments import StripeClient, get_payment_provider

logger = logging.getLogger(__name__)

# HTTP Bearer scheme for JWT authentication; a missing header is a 401, not a 403.
optional_bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def _credentials_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_session_claims(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(optional_bearer_scheme)],
) -> TokenClaims | None:
    """Return verified claims, or None when no usable token was sent.

    Used where a stale or missing token simply means "start a new session".
    """
    if credentials is None:
        return None
    try:
        return decode_access_token(credentials.credentials)
    except JWTError as err:
        logger.info("Ignoring unusable bearer token: %s", err)
        return None


def get_current_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(optional_bearer_scheme)],
    db: SessionDep,
) -> Identity:
    """Get the identity behind the bearer token.

    Raises:
        HTTPException: If the token is missing or invalid, or names a merged or
            unknown anonymous identity.
    """
    if credentials is None:
        raise _credentials_error()
    try:
        claims = decode_access_token(credentials.credentials)
    except JWTError as err:
        raise _credentials_error() from err

    identity = identity_for_claims(db, claims)
    if identity is None:
        raise _credentials_error()
    return identity


def get_optional_identity(
    claims: Annotated[TokenClaims | None, Depends(get_session_claims)],
    db: SessionDep,
) -> Identity | None:
    """Identity for public endpoints that personalise output when a token is present."""
    if claims is None:
        return None
    return identity_for_claims(db, claims)


def get_payment_provider_dep() -> StripeClient:
    """Return the shared payment provider client."""
    return get_payment_provider()


# Type aliases for common dependencies
SessionClaimsDep = Annotated[TokenClaims | None, Depends(get_session_claims)]
CurrentIdentityDep = Annotated[Identity, Depends(get_current_identity)]
OptionalIdentityDep = Annotated[Identity | None, Depends(get_optional_identity)]
PaymentProviderDep = Annotated[StripeClient, Depends(get_payment_provider_dep)]
