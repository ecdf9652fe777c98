from __future__ import annotations

import functools
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import jwt

from core.config import settings


ADMIN_SUBJECT = "admin"


def hash_password(password: str) -> str:
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=12))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


@functools.lru_cache(maxsize=1)
def _admin_pin_hash(pin: str) -> str:
    return hash_password(pin)


def verify_admin_pin(pin: str) -> bool:
    # The plaintext PIN only lives in settings; comparisons go through bcrypt.
    return verify_password(pin, _admin_pin_hash(settings.admin_pin))


def create_access_token(*, subject: str = ADMIN_SUBJECT, role: str = "admin") -> str:
    now = datetime.now(timezone.utc)
    expires_minutes = int(settings.access_token_expire_minutes)
    payload: dict[str, Any] = {
        "sub": subject,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=expires_minutes)).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict[str, Any]:
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])


def token_expiry(payload: dict[str, Any]) -> datetime | None:
    exp = payload.get("exp")
    return datetime.fromtimestamp(int(exp), tz=timezone.utc) if exp is not None else None
