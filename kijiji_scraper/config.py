"""
Configuration settings, read from the environment.
"""
import os


class Config:
    """Application configuration."""

    # Record store
    DB_PATH: str = os.getenv("KIJIJI_DB", "./data/kijiji_vehicles.db")

    # Export
    EXPORT_ROOT: str = os.getenv("KIJIJI_EXPORT_ROOT", "Kijiji Vehicles")
    EXPORT_FORMAT: str = os.getenv("KIJIJI_EXPORT_FORMAT", "xlsx")
    FILE_PREFIX: str = os.getenv("KIJIJI_FILE_PREFIX", "kijiji_vehicles")

    # Browser
    HEADLESS: bool = os.getenv("HEADLESS", "").strip().lower() in ("1", "true")
    STORAGE_STATE: str = os.getenv("KIJIJI_STORAGE_STATE", "storage_state.json")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_CONSOLE: str = os.getenv("LOG_CONSOLE", "INFO")
    LOG_FILE: str = os.getenv("LOG_FILE", "DEBUG")
    LOG_FILE_PATH: str = os.getenv("LOG_FILE_PATH", "kijiji_scraper.log")

    @classmethod
    def validate(cls) -> None:
        """Validate configuration on startup."""
        if cls.EXPORT_FORMAT not in ("xlsx", "csv"):
            raise ValueError(f"KIJIJI_EXPORT_FORMAT must be xlsx or csv, got {cls.EXPORT_FORMAT!r}")


# Global config instance
config = Config()
