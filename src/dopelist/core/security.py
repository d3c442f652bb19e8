"""Bearer-token helpers built on python-jose."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import jwt
from jose.exceptions import JWTClaimsError

from dopelist.core.settings import settings
from dopelist.models.identity import IdentityKind


@dataclass(frozen=True)
class TokenClaims:
    """Verified claims carried by an access token."""

    subject: str
    kind: IdentityKind


def create_access_token(
    identity_id: str,
    kind: IdentityKind = IdentityKind.ANONYMOUS,
    expires_minutes: int | None = None,
) -> str:
    """Create a signed JWT identifying ``identity_id``.

    Authenticated tokens are normally issued by the external auth provider
    sharing ``SECRET_KEY``; this helper mints the same shape for anonymous
    sessions, scripts and tests.
    """
    minutes = settings.access_token_expire_minutes if expires_minutes is None else expires_minutes
    to_encode: dict[str, object] = {
        "sub": identity_id,
        "kind": str(kind),
        "exp": datetime.now(UTC) + timedelta(minutes=minutes),
    }
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def decode_access_token(token: str) -> TokenClaims:
    """Verify ``token`` and return its claims.

    Raises:
        JWTError: If the signature, expiry or claim set is invalid.
    """
    payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    subject = payload.get("sub")
    kind = payload.get("kind", IdentityKind.AUTHENTICATED)
    if not isinstance(subject, str) or not subject:
        raise JWTClaimsError("Token has no subject")
    try:
        return TokenClaims(subject=subject, kind=IdentityKind(kind))
    except ValueError as err:
        raise JWTClaimsError(f"Unknown identity kind: {kind!r}") from err
