from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── App ─────────────────────────────────────
    APP_NAME: str = "Ribbon"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    DEBUG: bool = True

    # Origin used to build shareable links, e.g. https://ribbon.example
    PUBLIC_ORIGIN: str = "http://localhost:8000"

    # ── Database ────────────────────────────────
    DATABASE_URL: str = "sqlite+aiosqlite:///./ribbon.db"
    CREATE_TABLES_ON_STARTUP: bool = True

    # Only write a response while the stored value is still "unset"
    CONDITIONAL_RESPONSE_UPDATE: bool = False

    # ── Icon storage ────────────────────────────
    ICON_STORAGE_DIR: str = "static/icons"
    ICON_PUBLIC_PATH: str = "/static/icons"
    ICON_CACHE_CONTROL_SECONDS: int = 3600
    ICON_SIZE: int = 400
    ICON_JPEG_QUALITY: int = 90
    MAX_IMAGE_BYTES: int = 5 * 1024 * 1024

    # ── Flows ───────────────────────────────────
    MIN_SUBMIT_INTERVAL_SECONDS: float = 3.0
    REVEAL_DELAY_SECONDS: float = 1.5

    # ── Sessions ────────────────────────────────
    SESSION_COOKIE_NAME: str = "ribbon_sid"
    SESSION_COOKIE_MAX_AGE: int = 60 * 60 * 24
    MAX_TRACKED_SESSIONS: int = 5000
    MAX_LINKS_PER_SESSION: int = 20

    CORS_ORIGINS: list[str] = ["*"]

    # ── Logging ─────────────────────────────────
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    LOG_DIR: str = "logs"

    class Config:
        env_file = str(Path(__file__).parent.parent.parent / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
