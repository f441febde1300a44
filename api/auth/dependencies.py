"""
Auth dependencies for admin-only FastAPI routes.
"""

from __future__ import annotations

from fastapi import Depends, Header

from core.errors import Forbidden, Unauthorized

from . import security


def _extract_bearer_token(authorization: str | None) -> str:
    raw = (authorization or "").strip()
    if not raw:
        raise Unauthorized("Missing Authorization header.")

    parts = raw.split(" ", 1)
    if len(parts) != 2:
        raise Unauthorized("Invalid Authorization header format.")

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        raise Unauthorized("Authorization must be: Bearer <token>.")
    return token


async def get_bearer_token(authorization: str | None = Header(default=None)) -> str:
    return _extract_bearer_token(authorization)


async def get_token_claims(access_token: str = Depends(get_bearer_token)) -> dict:
    try:
        return security.decode_access_token(access_token)
    except security.AuthSecurityError as exc:
        raise Unauthorized(str(exc)) from exc


async def require_admin(claims: dict = Depends(get_token_claims)) -> dict:
    role = str(claims.get("role") or "").strip().lower()
    if role != security.ADMIN_ROLE:
        raise Forbidden("Admin role required.")
    return claims
