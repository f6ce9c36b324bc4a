"""
Application configuration.

Values come from the environment, with .env as a fallback
for local runs.

Nothing here opens a database connection. The repository is
built from an explicit Settings instance, so tests and tools
can pass their own without touching the environment.
"""

import os
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file into environment variables
load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "ATM System"
    APP_VERSION: str = "0.1.0"

    def __init__(
        self,
        database_url: str | None = None,
        log_level: str | None = None,
    ):
        self.DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

        # Server (HTTP front end only)
        self.HOST: str = os.getenv("HOST", "127.0.0.1")
        self.PORT: int = int(os.getenv("PORT", "8000"))

        # Database
        self.DATABASE_URL: str = database_url or os.getenv(
            "DATABASE_URL",
            "sqlite:///./atm_system.db"
        )

        # Logging
        self.LOG_LEVEL: str = (
            log_level or os.getenv("LOG_LEVEL", "INFO")
        ).upper()

        # Environment
        self.ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    def __repr__(self) -> str:
        return f"<Settings {self.ENVIRONMENT} db={self.DATABASE_URL!r}>"


@lru_cache()
def get_settings() -> Settings:
    """Settings from the environment, read once per process."""
    return Settings()
