"""
Admin access tokens (JWT).

The service stores no users. Tokens are minted offline (`python -m auth`)
and only need to verify here.
"""

from __future__ import annotations

import os
import time
from typing import Any

import jwt


class AuthSecurityError(RuntimeError):
    pass


ADMIN_ROLE = "admin"
DEFAULT_JWT_SECRET = "dev-change-this-secret-before-deploying"


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def jwt_secret() -> str:
    # Local default keeps development simple.
    # In production, set JWT_SECRET in environment.
    return os.environ.get("JWT_SECRET", DEFAULT_JWT_SECRET).strip() or DEFAULT_JWT_SECRET


def jwt_algorithm() -> str:
    return os.environ.get("JWT_ALG", "HS256").strip() or "HS256"


def access_token_expire_minutes() -> int:
    return _env_int("ACCESS_TOKEN_EXPIRE_MIN", 60)


def now_epoch_s() -> int:
    return int(time.time())


def build_access_token(*, subject: str, role: str, expire_minutes: int | None = None) -> str:
    issued_at = now_epoch_s()
    minutes = access_token_expire_minutes() if expire_minutes is None else expire_minutes
    payload = {
        "sub": str(subject),
        "role": role,
        "type": "access",
        "iat": issued_at,
        "exp": issued_at + (minutes * 60),
    }
    return jwt.encode(payload, jwt_secret(), algorithm=jwt_algorithm())


def decode_access_token(token: str) -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Access token is empty.")

    try:
        payload = jwt.decode(raw, jwt_secret(), algorithms=[jwt_algorithm()])
    except jwt.ExpiredSignatureError as exc:
        raise AuthSecurityError("Access token is expired.") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Invalid access token.") from exc

    token_type = str(payload.get("type") or "").strip().lower()
    if token_type != "access":
        raise AuthSecurityError("Token is not an access token.")

    return payload
