"""
Pydantic Settings — centralized configuration loaded from environment variables.
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Application ───────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # ── Validation ────────────────────────────
    # Mean validator score a record needs to be loaded.  1.0 = unanimous.
    VALIDATION_THRESHOLD: float = Field(default=1.0, gt=0.0, le=1.0)
    REQUIRED_FIELDS: list[str] = ["invoice_id", "total"]

    # ── Rectification ─────────────────────────
    FIELD_DEFAULTS: dict[str, str] = {}

    # ── Local files ───────────────────────────
    ACCEPTED_SUFFIXES: list[str] = [".json"]
    OUTPUT_DIR: str = "output"
    ARCHIVE_DIR: str | None = None

    # ── Target system (loader) ────────────────
    LOADER_URL: str = ""
    LOADER_API_KEY: str = ""
    LOADER_TIMEOUT: int = 30

    model_config = {"env_file": ["../.env", ".env"], "extra": "ignore"}


settings = Settings()
