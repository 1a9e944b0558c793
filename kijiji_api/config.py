"""
API settings, read from the environment at import time.
"""
import os

from kijiji_scraper.config import config as scraper_config


class Config:
    """Settings for the read API. The database is shared with the capture CLI."""

    DB_PATH: str = scraper_config.DB_PATH

    API_TITLE: str = "Kijiji Vehicles API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Read access to captured Kijiji vehicle listings"
    HOST: str = os.getenv("KIJIJI_API_HOST", "127.0.0.1")
    PORT: int = int(os.getenv("KIJIJI_API_PORT", "8000"))

    CORS_ORIGINS: list = [o.strip() for o in os.getenv("KIJIJI_API_CORS", "*").split(",") if o.strip()]

    # Paging for /api/listings
    DEFAULT_API_LIMIT: int = 50
    MAX_API_LIMIT: int = 500

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE_PATH: str = os.getenv("KIJIJI_API_LOG", "kijiji_api.log")


config = Config()
