"""Application settings and configuration management."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    DB_PATH: str = Field(default="data/interview.db")
    CONFIG_PATH: str = Field(default="app_config.json")

    SILENCE_WINDOW_SECONDS: float = Field(default=2.0, gt=0.0)
    OPENING_QUESTION: str = "Tell me about yourself."
    TARGET_EXCHANGES: str = "4-5"
    DEFAULT_LANGUAGE: str = "English"

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")


settings = Settings()
