# inspiration/config.py
"""Runtime settings (pydantic-settings).

Everything can be overridden through ``INSPIRATION_*`` environment variables
or a ``.env`` file in the working directory. The Gemini key keeps its usual
``GEMINI_API_KEY`` name.
"""
from __future__ import annotations
from pathlib import Path
from typing import Literal, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DB_PATH = Path.home() / ".inspiration" / "inspiration.db"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="INSPIRATION_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    # Storage
    db_path: Path = DEFAULT_DB_PATH

    # AI backend: "proxy" (chat-completion endpoint) or "genai" (Google Gen AI SDK)
    ai_provider: Literal["proxy", "genai"] = "proxy"
    ai_timeout_seconds: Optional[float] = None

    proxy_url: str = "https://api.deepseek.com/chat/completions"
    proxy_api_key: Optional[str] = None
    proxy_model: str = "deepseek-chat"

    gemini_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "INSPIRATION_GEMINI_API_KEY"),
    )
    genai_analysis_model: str = "gemini-3-flash-preview"
    genai_document_model: str = "gemini-3.1-pro-preview"

    # Diagnostics
    debug_log_limit: int = 500
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Read settings from the current environment (not cached)."""
    return Settings()
