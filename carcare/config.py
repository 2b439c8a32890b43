"""Configuration management from environment variables."""

import os
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


class Config:
    """Application configuration loaded from environment variables."""

    # Persisted settings and reminder ledger
    STATE_FILE: Path = Path(os.getenv("CARCARE_STATE_FILE", "./data/state.yaml"))

    # Whose reminders to check when none is given on the command line
    USER: str = os.getenv("CARCARE_USER", "local")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Reminders
    CHECK_INTERVAL_HOURS: float = float(os.getenv("CHECK_INTERVAL_HOURS", "6"))

    @classmethod
    def check_interval(cls) -> timedelta:
        return timedelta(hours=cls.CHECK_INTERVAL_HOURS)

    @classmethod
    def validate(cls) -> None:
        """Validate configuration."""
        if cls.CHECK_INTERVAL_HOURS <= 0:
            raise ValueError("CHECK_INTERVAL_HOURS must be positive")

        if cls.LOG_LEVEL.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown LOG_LEVEL: {cls.LOG_LEVEL}")

