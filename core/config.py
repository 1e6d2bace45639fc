# core/config.py
"""
Process-wide settings, read from the environment (and an optional ``.env``).

Extraction code never reads these directly: the API layer and the CLI pull
what they need from ``settings`` and pass it down explicitly.
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # ------------------------------------------------------------------
    #  Service
    # ------------------------------------------------------------------
    PROJECT_NAME: str = "Listing Extractor"
    DEBUG: bool = False
    PORT: int = 3000
    WORKERS: int = 1
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: List[str] = ["*"]

    # ------------------------------------------------------------------
    #  Upstream fetching
    # ------------------------------------------------------------------
    DEFAULT_USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
    )
    ACCEPT_LANGUAGE: str = "nb-NO,nb;q=0.9,no;q=0.8,en;q=0.5"
    TIMEOUT: float = 15.0
    FETCH_RETRIES: int = 3

    # ------------------------------------------------------------------
    #  Source selection
    # ------------------------------------------------------------------
    SOURCE_NAME: str = "finn"
    DEFAULT_ORG_ID: str = "4008599"
    FINN_API_KEY: Optional[str] = None

    # ------------------------------------------------------------------
    #  Response cache (disabled when REDIS_URL is unset)
    # ------------------------------------------------------------------
    REDIS_URL: Optional[str] = None
    CACHE_TTL: int = 300

    # ------------------------------------------------------------------
    #  Curated car list
    # ------------------------------------------------------------------
    CARS_DATA_PATH: Path = Path(__file__).resolve().parents[1] / "data" / "cars.json"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
