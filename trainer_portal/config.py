"""Centralised application settings loaded from environment variables."""

from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./trainer_portal.db"
    SECRET_KEY: str = "change-me-to-a-random-secret-key"
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:3000"]

    # JWT
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 3 * 24 * 60
    REFRESH_SECRET_KEY: str = "change-me-to-another-random-secret-key"
    REFRESH_TOKEN_EXPIRE_MINUTES: int = 7 * 24 * 60

    # Registration
    ADMIN_INVITE_CODE: str = ""
    BCRYPT_ROUNDS: int = 12

    # Scheduling
    # Batch dates/times are entered and displayed in a fixed offset (IST).
    SCHEDULE_UTC_OFFSET_MINUTES: int = 330
    MIN_BATCH_DURATION_MINUTES: int = 10
    EXPIRING_SOON_MINUTES: int = 10

    class Config:
        env_file = str(Path(__file__).resolve().parents[1] / ".env")


settings = Settings()
