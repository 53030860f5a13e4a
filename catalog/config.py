"""
Catalog Manager - Application Configuration
=============================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
How:   Pydantic Settings reads from environment variables (or a .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time.
"""

from typing import Any, Dict, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every setting has a default that works for local development, so the
    server starts with no environment at all. Attributes are grouped by concern.
    """

    # ── Database ──────────────────────────────────────────────────────────
    # Any async SQLAlchemy URL works; PostgreSQL needs the `postgres` extra (asyncpg)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./catalog.db",
        description="Async SQLAlchemy connection URL",
    )

    # Pool sizing only applies to server databases; SQLite ignores it
    db_pool_size: int = Field(default=5, ge=1, le=100)
    db_max_overflow: int = Field(default=10, ge=0, le=50)
    db_pool_pre_ping: bool = Field(default=True)

    # Insert the two starter entries when the table is empty at startup
    seed_initial_entries: bool = Field(default=True)

    # ── Uploads ───────────────────────────────────────────────────────────
    # What: Directory receiving uploaded images, served read-only under uploads_url_prefix
    uploads_dir: str = Field(default="./public/uploads")
    uploads_url_prefix: str = Field(default="/uploads")

    # What: Upload ceiling in bytes (5 MiB)
    max_upload_size: int = Field(default=5 * 1024 * 1024, ge=1024, le=52_428_800)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Comma-separated origins; "*" allows any origin
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    # Read from PORT; falls back to 3000 when unset
    port: int = Field(default=3000, ge=1, le=65535)

    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("uploads_url_prefix")
    @classmethod
    def validate_url_prefix(cls, v: str) -> str:
        """Normalizes the public prefix to a leading slash and no trailing slash."""
        cleaned = "/" + v.strip().strip("/")
        if cleaned == "/":
            raise ValueError("uploads_url_prefix must not be the site root")
        return cleaned

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # PORT and port both work
        "extra": "ignore",
    }

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def engine_options(self) -> Dict[str, Any]:
        """
        Keyword arguments for create_async_engine.

        SQLite connections are file handles, not network sockets, so the
        pool-sizing options are only passed for server databases.
        """
        options: Dict[str, Any] = {"echo": self.log_level == "DEBUG"}
        if not self.is_sqlite:
            options.update(
                pool_size=self.db_pool_size,
                max_overflow=self.db_max_overflow,
                pool_pre_ping=self.db_pool_pre_ping,
                pool_recycle=3600,
            )
        return options


# Singleton instance, imported throughout the application
settings = Settings()
