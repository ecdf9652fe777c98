from __future__ import annotations

from datetime import datetime

from pydantic import Field

from schemas.common import CamelModel


class LoginRequest(CamelModel):
    pin: str = Field(pattern=r"^\d{4}$")


class LoginResponse(CamelModel):
    ok: bool = True
    access_token: str
    token_type: str = "bearer"


class MeResponse(CamelModel):
    role: str
    expires_at: datetime | None = None
