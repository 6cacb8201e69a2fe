"""Application settings loaded from environment variables via pydantic-settings.

Values come from, in priority order:

  1. environment variables (``SCRAPERAPI_KEY=...``, ``MAX_CREDITS=500``)
  2. a ``.env`` file in the working directory
  3. the defaults below

Field names map to upper-cased environment variable names automatically.
The ``.env`` file holds the proxy API key and is never committed.
"""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """specharvest runtime settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Transport ===
    # "scraperapi" routes every fetch through the proxy and bills one credit
    # per request; "direct" talks to the site with browser-like headers.
    transport_backend: Literal["scraperapi", "direct"] = "scraperapi"
    scraperapi_key: str = ""
    scraperapi_endpoint: str = "https://api.scraperapi.com/"
    request_timeout_seconds: float = 30.0

    # === Pacing and budget ===
    min_delay_seconds: float = 3.0
    max_delay_seconds: float = 8.0
    max_credits: int = 950

    # === Crawl policy ===
    min_launch_year: int = 2023
    saturation_page_limit: int = 3  # consecutive listing pages with nothing new
    out_of_scope_streak_limit: int = 3  # consecutive too-old items before abandoning

    # === Storage ===
    ledger_path: str = "seen_products.json"
    output_dir: str = "scraped_products"
    sink_backend: Literal["json", "sqlite"] = "json"
    sqlite_db_path: str = "data/items.db"
    categories_path: str = "config/categories.yaml"

    # === Debugging ===
    save_html: bool = False
    snapshot_dir: str = "debug"

    # === App Config ===
    app_env: str = "development"
    log_level: str = "INFO"
