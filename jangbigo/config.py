# jangbigo/config.py

from __future__ import annotations
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

class Settings(BaseSettings):
    # — Core —
    APP_NAME: str = "JangbiGO Backend API"
    SECRET_KEY: str = Field("change-me-in-production-32-bytes-min", description="JWT signing key")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(60 * 24 * 7, ge=5, le=60 * 24 * 30)
    DEBUG: bool = True  # set False in prod
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    # --- Database ---
    DATABASE_URL: str = Field("sqlite:///./jangbigo.db")
    # Alembic reads DATABASE_URL from env; kept separate on purpose.

    # --- Kakao ID token ---
    # Off by default: the mobile client hands us a token Kakao already checked.
    KAKAO_VERIFY_ID_TOKEN: bool = False
    KAKAO_JWKS_URL: str = "https://kauth.kakao.com/.well-known/jwks.json"
    KAKAO_ISSUER: str = "https://kauth.kakao.com"
    KAKAO_APP_KEY: Optional[str] = None

    # --- Community fee fallbacks (percent) ---
    DEFAULT_COMMUNITY_WORK_FEE: float = Field(5, ge=0, le=100)
    DEFAULT_COMMUNITY_SUPPORT_FEE: float = Field(2, ge=0, le=100)

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
