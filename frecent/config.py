"""Config loading from ~/.frecent/config.json with env var overrides."""

from __future__ import annotations

import json
from pathlib import Path
from typing import ClassVar

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_DIR = Path.home() / ".frecent"
CONFIG_PATH = CONFIG_DIR / "config.json"


class FrecentConfig(BaseSettings):
    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_prefix="FRECENT_",
        extra="ignore",
    )
    data_path: str = Field(default_factory=lambda: str(CONFIG_DIR / "data.json"))
    # HTTP server
    host: str = "127.0.0.1"
    port: int = 7717
    # Trailing-edge delay before a burst of mutations is written out
    debounce_seconds: float = Field(default=0.5, ge=0)
    log_level: str = "WARNING"


def loadConfig() -> FrecentConfig:
    """Load config from ~/.frecent/config.json with env var overrides."""
    if CONFIG_PATH.exists():
        raw = json.loads(CONFIG_PATH.read_text())
        return FrecentConfig(**raw)
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    config = FrecentConfig()
    CONFIG_PATH.write_text(config.model_dump_json(indent=2))
    return config
