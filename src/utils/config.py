"""
Application configuration, loaded from BOUTIQUE_* environment variables
(or a local .env file).
"""
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

Language = Literal["fr", "ar"]

LANGUAGES = ("fr", "ar")


class Config(BaseSettings):
    """Settings read once at startup."""

    model_config = SettingsConfigDict(
        env_prefix="BOUTIQUE_", env_file=".env", extra="ignore", frozen=True
    )

    db_path: str = "data/boutique.sqlite"
    storage_path: str = "data/local-storage.sqlite"
    currency: str = "MAD"
    lang: Language = "fr"
    debug: bool = False
    log_file: Optional[str] = None

    @field_validator("lang", mode="before")
    @classmethod
    def fallback_lang(cls, value):
        # unknown languages fall back to French
        lang = str(value or "").strip().lower()
        return lang if lang in LANGUAGES else "fr"

    @field_validator("log_file", mode="before")
    @classmethod
    def empty_log_file(cls, value):
        return value or None


def load_config() -> Config:
    return Config()
