# src/dopelist/scripts/tokens.py
"""Mint bearer tokens for local development.

Authenticated tokens normally come from the external auth provider; this
script signs the same claims with ``SECRET_KEY`` so the API can be exercised
without one.
"""

from __future__ import annotations

import argparse
import sys

from dopelist.core.security import create_access_token
from dopelist.db.session import SessionLocal
from dopelist.models import IdentityKind
from dopelist.services.identity import mint_anonymous


def mint_token(identity_id: str | None, kind: IdentityKind, expires_minutes: int | None) -> str:
    """Return a token for ``identity_id``, creating an anonymous identity when omitted."""
    if identity_id is None:
        if kind is not IdentityKind.ANONYMOUS:
            raise ValueError("--identity is required for authenticated tokens")
        db = SessionLocal()
        try:
            resolved = mint_anonymous(db)
        finally:
            db.close()
        identity_id = resolved.identity.id
    return create_access_token(identity_id, kind, expires_minutes=expires_minutes)


def main() -> int:
    parser = argparse.ArgumentParser(description="Mint a Dopelist bearer token")
    parser.add_argument("--identity", help="Identity id (required for authenticated tokens)")
    parser.add_argument(
        "--kind",
        choices=[kind.value for kind in IdentityKind],
        default=IdentityKind.ANONYMOUS.value,
    )
    parser.add_argument("--expires-minutes", type=int, default=None)
    args = parser.parse_args()

    try:
        token = mint_token(args.identity, IdentityKind(args.kind), args.expires_minutes)
    except ValueError as exc:
        print(f"[tokens] ERROR: {exc}", file=sys.stderr)
        return 2
    print(token)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
