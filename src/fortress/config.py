"""Lightweight configuration for the Space Fortress services."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings read from the environment and ``.env``."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    data_dir: Path = Field(default=Path("streams"), description="Where JSON-lines streams live")
    event_store: Literal["json", "sql"] = Field(
        default="json", description="Backend used to persist event streams"
    )
    database_url: str = Field(
        default="sqlite:///fortress.db", description="SQLAlchemy URL for the SQL event store"
    )
    database_echo: bool = Field(default=False, description="Log every SQL statement")
    rules_version: str = Field(default="1.0", description="Ruleset version used by the domain")
    log_level: str = Field(default="INFO", description="Root logger level for the server")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"],
        description="Origins allowed to call the HTTP API",
    )


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    settings = Settings()
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    return settings
