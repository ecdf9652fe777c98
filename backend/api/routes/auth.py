from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from api.deps import require_admin
from core.config import settings
from core.security import create_access_token, token_expiry, verify_admin_pin
from schemas.auth import LoginRequest, LoginResponse, MeResponse
from schemas.common import MessageOut


router = APIRouter()

logger = logging.getLogger(__name__)


# Simple in-memory rate limiting for login.
# NOTE: In multi-worker deployments this is per-worker.
_LOGIN_WINDOW_SECONDS = 60
_LOGIN_MAX_ATTEMPTS_PER_KEY = 12
_login_attempts: dict[str, list[float]] = {}


def _rate_limit_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _enforce_login_rate_limit(request: Request) -> None:
    key = _rate_limit_key(request)
    now = time.time()
    history = _login_attempts.get(key, [])
    history = [t for t in history if now - t < _LOGIN_WINDOW_SECONDS]
    history.append(now)
    _login_attempts[key] = history
    if len(history) > _LOGIN_MAX_ATTEMPTS_PER_KEY:
        raise HTTPException(status_code=429, detail="Too many login attempts, try again later")


def reset_login_rate_limit() -> None:
    _login_attempts.clear()


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    request: Request,
    response: Response,
) -> LoginResponse:
    _enforce_login_rate_limit(request)

    if not verify_admin_pin(payload.pin):
        logger.warning("Login failed (bad PIN) ip=%s", _rate_limit_key(request))
        raise HTTPException(status_code=401, detail="Invalid PIN")

    token = create_access_token()

    response.set_cookie(
        key="access_token",
        value=token,
        httponly=True,
        secure=settings.environment.lower() == "production",
        samesite=settings.cookie_samesite,
        max_age=settings.access_token_expire_minutes * 60,
        path="/",
    )
    logger.info("Admin login ip=%s", _rate_limit_key(request))
    return LoginResponse(ok=True, access_token=token)


@router.post("/logout", response_model=MessageOut)
def logout(response: Response) -> MessageOut:
    response.delete_cookie(key="access_token", path="/")
    return MessageOut(message="Logged out")


@router.get("/me", response_model=MeResponse)
def me(payload: dict = Depends(require_admin)) -> MeResponse:
    return MeResponse(role=str(payload.get("role") or "admin"), expires_at=token_expiry(payload))
