from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic.aliases import AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict


BACKEND_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=BACKEND_DIR / ".env", env_file_encoding="utf-8", extra="ignore")

    database_url: str = Field(
        default="sqlite:///./college_admin.db",
        validation_alias=AliasChoices("database_url", "DATABASE_URL"),
    )

    # - sql: SQLAlchemy-backed repository (production)
    # - memory: process-local dict repository (tests, demos)
    storage_backend: str = Field(
        default="sql",
        validation_alias=AliasChoices("storage_backend", "STORAGE_BACKEND"),
    )

    # Admin PIN gate
    admin_pin: str = Field(validation_alias=AliasChoices("admin_pin", "ADMIN_PIN"))
    auth_enabled: bool = Field(default=True, validation_alias=AliasChoices("auth_enabled", "AUTH_ENABLED"))
    jwt_secret_key: str = Field(
        validation_alias=AliasChoices("jwt_secret_key", "jwt_secret", "JWT_SECRET_KEY", "JWT_SECRET")
    )
    jwt_algorithm: str = Field(default="HS256", validation_alias=AliasChoices("jwt_algorithm", "JWT_ALGORITHM"))
    access_token_expire_minutes: int = Field(
        default=480,
        validation_alias=AliasChoices("access_token_expire_minutes", "ACCESS_TOKEN_EXPIRE_MINUTES"),
    )
    cookie_samesite: str = Field(
        default="lax",
        validation_alias=AliasChoices("cookie_samesite", "COOKIE_SAMESITE"),
    )

    # Spreadsheet uploads
    upload_dir: Path = Field(
        default=BACKEND_DIR / "uploads",
        validation_alias=AliasChoices("upload_dir", "UPLOAD_DIR"),
    )
    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024,
        validation_alias=AliasChoices("max_upload_bytes", "MAX_UPLOAD_BYTES"),
    )

    # Runtime
    environment: str = Field(default="development", validation_alias=AliasChoices("environment", "ENVIRONMENT"))
    frontend_origin: str = Field(
        default="http://localhost:5173",
        validation_alias=AliasChoices("frontend_origin", "FRONTEND_ORIGIN"),
    )
    seed_sample_data: bool = Field(
        default=False,
        validation_alias=AliasChoices("seed_sample_data", "SEED_SAMPLE_DATA"),
    )

    @field_validator("frontend_origin")
    @classmethod
    def _normalize_frontend_origin(cls, v: str) -> str:
        # Starlette CORS expects the Origin to match exactly (no trailing slash).
        return v.strip().rstrip("/")

    @field_validator("cookie_samesite")
    @classmethod
    def _normalize_cookie_samesite(cls, v: str) -> str:
        v = (v or "lax").strip().lower()
        if v not in {"lax", "strict", "none"}:
            raise ValueError("COOKIE_SAMESITE must be 'lax', 'strict', or 'none'")
        return v

    @field_validator("storage_backend")
    @classmethod
    def _normalize_storage_backend(cls, v: str) -> str:
        v = (v or "sql").strip().lower()
        if v not in {"sql", "memory"}:
            raise ValueError("STORAGE_BACKEND must be 'sql' or 'memory'")
        return v

    @field_validator("admin_pin")
    @classmethod
    def _validate_admin_pin(cls, v: str) -> str:
        v = (v or "").strip()
        if len(v) != 4 or not v.isdigit():
            raise ValueError("ADMIN_PIN must be exactly 4 digits")
        return v


settings = Settings()
