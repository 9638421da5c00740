"""Centralised application configuration using pydantic-settings.

All environment variables are read through the Settings class.
Consumers call ``get_settings()`` to obtain a cached, validated instance.
Tests construct ``Settings(_env_file=None, ...)`` directly for isolation.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# src/markaround/config.py  ->  parent x3  ->  project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


# ---------------------------------------------------------------------------
# Sub-models (one per configuration domain)
# ---------------------------------------------------------------------------
class EditorConfig(BaseModel):
    """Editing loop tuning."""

    render_debounce_seconds: float = Field(default=0.15, ge=0)
    # Look-back for the inside-markup check in suggestion mode. A heuristic,
    # not a parse: openers further back than this are not seen.
    lookback_window: int = Field(default=500, gt=0)


class MarkdownConfig(BaseModel):
    """Options passed to the markdown renderer."""

    linkify: bool = True
    typographer: bool = True


class AutosaveConfig(BaseModel):
    """Periodic local persistence of the document being reviewed."""

    enabled: bool = True
    interval_seconds: float = Field(default=3.0, gt=0)
    directory: Path = Path(".markaround/autosave")
    key_prefix: str = "markaround-autosave-"


class AppConfig(BaseModel):
    """Application runtime configuration."""

    port: int = 8080
    storage_secret: SecretStr = SecretStr("dev-secret-change-me")
    reload: bool = True
    default_file_name: str = "document.md"


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Application settings with automatic .env loading and type validation.

    Environment variables use double-underscore delimiter for nesting:
    ``EDITOR__RENDER_DEBOUNCE_SECONDS``, ``AUTOSAVE__DIRECTORY``,
    ``APP__PORT``, etc.
    """

    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    editor: EditorConfig = EditorConfig()
    markdown: MarkdownConfig = MarkdownConfig()
    autosave: AutosaveConfig = AutosaveConfig()
    app: AppConfig = AppConfig()


# ---------------------------------------------------------------------------
# Singleton access
# ---------------------------------------------------------------------------
@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Call ``get_settings.cache_clear()`` in tests to reset.
    """
    settings = Settings()

    env_file = settings.model_config.get("env_file")
    if env_file is not None and Path(str(env_file)).is_file():
        logger.info("Settings loaded .env from: %s", env_file)
    else:
        logger.info("Settings: no .env file found, using env vars and defaults")

    return settings
