# tasktracker/settings.py
from __future__ import annotations

import json
from typing import Annotated, List, Optional
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic import Field, field_validator

DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]

# Values that shipped as defaults in older setups; never valid signing keys.
PLACEHOLDER_SECRETS = {"change_me", "change-me-in-production", "your-secret-key", "secret"}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    # --- DB ---
    DATABASE_URL: str = Field(default='sqlite:///./tasktracker.db')

    # --- JWT ---
    SECRET_KEY: str
    ALGORITHM: str = Field(default='HS256')
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60 * 24 * 7, gt=0)

    # --- CORS ---
    CORS_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_CORS_ORIGINS)
    )

    # --- Runtime ---
    APP_ENV: Optional[str] = Field(default='prod')
    LOG_LEVEL: str = Field(default='INFO')

    @field_validator("SECRET_KEY")
    @classmethod
    def require_real_secret(cls, v: str) -> str:
        """Refuse to start with a blank or well-known signing key."""
        s = (v or "").strip()
        if not s:
            raise ValueError("SECRET_KEY must be set to a non-empty value.")
        if s.lower() in PLACEHOLDER_SECRETS:
            raise ValueError("SECRET_KEY is a placeholder; generate a random secret.")
        return s

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors(cls, v):
        """
        Accepts:
        - JSON: '["http://a","http://b"]'
        - Comma separated: 'http://a,http://b'
        - Empty: falls back to the default
        """
        if v is None:
            return list(DEFAULT_CORS_ORIGINS)
        if isinstance(v, list):
            return v
        if isinstance(v, str):
            s = v.strip()
            if not s:
                return list(DEFAULT_CORS_ORIGINS)
            if s.startswith("["):
                try:
                    return json.loads(s)
                except json.JSONDecodeError:
                    raise ValueError("CORS_ORIGINS must be valid JSON or a comma separated list.")
            return [part.strip() for part in s.split(",") if part.strip()]
        return v

    @property
    def is_dev(self) -> bool:
        return (self.APP_ENV or "").lower() in ("dev", "development", "local")


settings = Settings()
