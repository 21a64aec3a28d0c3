from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    openai_api_key: str | None
    openai_model: str
    openai_temperature: float
    openai_timeout_s: float
    ai_suggestions_enabled: bool
    log_level: str

    @property
    def ai_available(self) -> bool:
        return self.ai_suggestions_enabled and bool(self.openai_api_key)


def load_settings() -> Settings:
    """Build settings from the current environment (and .env, loaded at import)."""
    return Settings(
        openai_api_key=_get_env("OPENAI_API_KEY"),
        openai_model=_get_env("OPENAI_MODEL", "gpt-3.5-turbo") or "gpt-3.5-turbo",
        openai_temperature=_get_env_float("OPENAI_TEMPERATURE", 0.3),
        openai_timeout_s=_get_env_float("OPENAI_TIMEOUT_S", 30.0),
        ai_suggestions_enabled=_get_env_bool("AI_SUGGESTIONS_ENABLED", True),
        log_level=(_get_env("LOG_LEVEL", "INFO") or "INFO").upper(),
    )
