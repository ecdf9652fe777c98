from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from core.config import settings
from core.security import decode_token


bearer_scheme = HTTPBearer(auto_error=False)


def _extract_token(request: Request, creds: HTTPAuthorizationCredentials | None) -> str | None:
    if creds is not None and creds.credentials:
        return creds.credentials
    cookie_token = request.cookies.get("access_token")
    return cookie_token or None


def require_admin(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> dict:
    """Gate for every non-auth route: a valid admin session token (bearer or cookie)."""

    if not settings.auth_enabled:
        return {"sub": "admin", "role": "admin"}

    cached = getattr(request.state, "auth_payload", None)
    if isinstance(cached, dict):
        return cached

    token = _extract_token(request, creds)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        payload = decode_token(token)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired session")

    if str(payload.get("role") or "").lower() != "admin":
        raise HTTPException(status_code=403, detail="Not authorized")

    request.state.auth_payload = payload
    return payload
