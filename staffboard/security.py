from __future__ import annotations

from typing import Any

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from staffboard.errors import ApiError

bearer_scheme = HTTPBearer(auto_error=False)


def read_unverified_claims(token: str) -> dict[str, Any]:
    """Claims of a token for request attribution only.

    Signatures are checked by the remote API, never here.
    """
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        return {}
    return claims if isinstance(claims, dict) else {}


def require_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise ApiError(status_code=401, code="INVALID_TOKEN", message="Missing bearer token.")

    token = credentials.credentials.strip()
    if not token:
        raise ApiError(status_code=401, code="INVALID_TOKEN", message="Missing bearer token.")

    claims = read_unverified_claims(token)
    request.state.actor = str(claims.get("role") or "admin")
    request.state.actor_id = str(claims.get("username") or claims.get("sub") or "unknown")
    return token
