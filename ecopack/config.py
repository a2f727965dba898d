# ecopack/config.py
import os
from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DB_PATH = os.path.join(BASE_DIR, "data", "ecopack.db")

DEFAULT_GEMINI_MODELS = "gemini-2.0-flash,gemini-2.5-flash,gemini-2.5-pro"


class Settings(BaseSettings):
    """Settings read from the environment (or a local .env file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_ignore_empty=True,
        extra="ignore",
    )

    database_url: str = f"sqlite:///{DB_PATH}"

    # Gemini
    gemini_api_key: Optional[str] = None
    gemini_models: str = Field(default=DEFAULT_GEMINI_MODELS,
                               description="Comma-separated model ids, tried in order")
    gemini_timeout: float = Field(default=30.0, gt=0)

    # External emission estimator
    climate_api_key: Optional[str] = None
    climate_api_url: str = "https://api.climateiq.com"
    climate_timeout: float = Field(default=10.0, gt=0)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_json: bool = False

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, v):
        return v.upper() if isinstance(v, str) else v

    @property
    def gemini_model_ids(self) -> List[str]:
        return [m.strip() for m in self.gemini_models.split(",") if m.strip()]


@lru_cache
def get_settings() -> Settings:
    """Cached settings; tests call get_settings.cache_clear() after changing the environment."""
    return Settings()
