# app/core/config.py
from __future__ import annotations

import secrets
import warnings
from typing import Annotated, List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings, loaded from environment variables and/or .env file.
    """

    # Environment settings
    APP_NAME: str = "Compliance Profile API"
    APP_ENV: str = "development"

    # Security / auth
    SECRET_KEY: str = Field(default="", repr=False)
    SECRET_KEY_AUTO_GENERATED: bool = False
    CORS_ALLOW_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["http://localhost:5173"],
        description="Comma-delimited list of allowed origins",
    )

    # Database settings
    DATABASE_URL: str = "sqlite:///./compliance.db"

    # Observability settings
    SENTRY_DSN: Optional[str] = None

    # Security settings
    ENABLE_SECURITY_HEADERS: bool = True
    CSP_POLICY: str = "default-src 'self'"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_MINUTES: int = 7 * 24 * 60  # 7 days
    JWT_ISSUER: Optional[str] = None
    PASSWORD_HASH_ROUNDS: int = 12

    # 32 random bytes, base64-encoded
    FIELD_ENCRYPTION_KEY: Optional[str] = Field(default=None, repr=False)

    @property
    def is_development(self) -> bool:
        return self.APP_ENV.lower() in ("development", "dev", "local")

    @field_validator("CORS_ALLOW_ORIGINS", mode="before")
    @classmethod
    def _split_origins(cls, value: str | List[str]) -> List[str]:
        """Allow comma-separated strings for origins env var."""
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("FIELD_ENCRYPTION_KEY", mode="before")
    @classmethod
    def _blank_key_is_unset(cls, value: Optional[str]) -> Optional[str]:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def _ensure_secret_key(self) -> "Settings":
        """Guarantee SECRET_KEY is present in non-development environments."""
        secret = (self.SECRET_KEY or "").strip()
        environment = (self.APP_ENV or "development").lower()

        if not secret or secret.lower() == "change-me":
            if environment in {"development", "test", "testing"}:
                # Ephemeral key for local dev/tests; tokens die with the process.
                generated = secrets.token_urlsafe(48)
                self.SECRET_KEY = generated
                self.SECRET_KEY_AUTO_GENERATED = True
                warnings.warn(
                    (
                        "SECRET_KEY was not provided; generated ephemeral key for "
                        f"{environment} environment. "
                        "Do not use this configuration in production."
                    ),
                    RuntimeWarning,
                )
            else:
                raise ValueError(
                    (
                        "SECRET_KEY must be set for secure operation. "
                        "Set SECRET_KEY in the environment or .env file before "
                        "starting the service."
                    )
                )
        return self

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


settings = Settings()
