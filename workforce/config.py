"""
Workforce Hub – Application configuration.
Reads environment variables from a .env file via pydantic-settings.
"""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # ── App ──
    APP_NAME: str = "Workforce Hub"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ── Database ──
    DATABASE_URL: str = "sqlite+aiosqlite:///./workforce.db"

    # ── JWT session cookie ──
    SECRET_KEY: str = "change-me-to-a-random-secret"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    COOKIE_SECURE: bool = False

    # ── Timesheets ──
    DAILY_HOUR_LIMIT: float = 8.0

    # ── Recruitment priority (fulfillment % thresholds) ──
    RECRUITMENT_HIGH_PRIORITY_BELOW: int = 50
    RECRUITMENT_MEDIUM_PRIORITY_BELOW: int = 75
    RECRUITMENT_PIPELINE_STATUSES: List[str] = ["Prospect", "Negotiation"]

    # ── Seed data ──
    DEFAULT_SKILL_CATEGORIES: List[str] = [
        "Frontend",
        "Backend",
        "DevOps",
        "Database",
        "Mobile",
        "Design",
        "AI/ML",
        "Testing",
    ]


settings = Settings()
