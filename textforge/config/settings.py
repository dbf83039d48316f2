"""
config/settings.py
──────────────────────────────────────────────────────────────────────────────
Single source of truth for all tuneable parameters.

All values can be overridden via environment variables or a .env file placed
at the project root.  The frozen dataclass ensures settings are never mutated
at runtime.

To swap providers, change the relevant env var; no code edits required:
  LLM_PROVIDER   → gemini | openai | groq | openrouter | relay
  LLM_MODEL      → model id sent to the selected backend
  RELAY_ENABLED  → route Gemini calls through the worker at RELAY_URL
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

from textforge.domain.exceptions import ConfigurationError

# Load .env from project root (two levels up from this file)
load_dotenv(Path(__file__).parent.parent.parent / ".env")


def _env(key: str, default: str) -> str:
    return os.getenv(key, default)


def _env_int(key: str, default: int) -> int:
    raw = os.getenv(key, str(default))
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}") from exc


def _env_bool(key: str, default: bool) -> bool:
    raw = os.getenv(key)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_json_dict(key: str) -> dict[str, str]:
    raw = os.getenv(key, "").strip()
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{key} is not valid JSON: {exc}") from exc
    if not isinstance(value, dict):
        raise ConfigurationError(f"{key} must be a JSON object")
    return {str(k): str(v) for k, v in value.items()}


@dataclass(frozen=True)
class Settings:
    """Immutable application settings loaded from environment variables."""

    # ── Provider selection ──────────────────────────────────────────────────
    # Valid values: "gemini" | "openai" | "groq" | "openrouter" | "relay"
    llm_provider: str = field(
        default_factory=lambda: _env("LLM_PROVIDER", "gemini")
    )
    llm_model: str = field(
        default_factory=lambda: _env("LLM_MODEL", "gemini-3-flash-preview")
    )

    # ── Credentials ────────────────────────────────────────────────────────
    gemini_api_key: str = field(
        default_factory=lambda: _env("GEMINI_API_KEY", "")
    )
    openai_api_key: str = field(
        default_factory=lambda: _env("OPENAI_API_KEY", "")
    )
    groq_api_key: str = field(
        default_factory=lambda: _env("GROQ_API_KEY", "")
    )
    openrouter_api_key: str = field(
        default_factory=lambda: _env("OPENROUTER_API_KEY", "")
    )
    # Platform-level Gemini key, used when GEMINI_API_KEY is empty.
    platform_api_key: str = field(
        default_factory=lambda: _env("API_KEY", "")
    )

    # ── Relay worker ───────────────────────────────────────────────────────
    relay_enabled: bool = field(
        default_factory=lambda: _env_bool("RELAY_ENABLED", False)
    )
    relay_url: str = field(
        default_factory=lambda: _env("RELAY_URL", "")
    )
    # Shared with the relay operator; not a backend API key.
    relay_token: str = field(
        default_factory=lambda: _env("RELAY_TOKEN", "textforge-relay")
    )

    # ── Tool overrides ─────────────────────────────────────────────────────
    # JSON object: {"rephrase": "You are ...", ...}
    custom_instructions: dict[str, str] = field(
        default_factory=lambda: _env_json_dict("CUSTOM_INSTRUCTIONS")
    )
    # Optional JSON settings document; takes precedence over the env vars above.
    settings_file: str = field(
        default_factory=lambda: _env("SETTINGS_FILE", "")
    )

    # ── HTTP ───────────────────────────────────────────────────────────────
    # Seconds; 0 waits indefinitely.
    llm_timeout: int = field(default_factory=lambda: _env_int("LLM_TIMEOUT", 90))
    probe_workers: int = field(default_factory=lambda: _env_int("PROBE_WORKERS", 4))

    @property
    def request_timeout(self) -> float | None:
        """Timeout value for ``requests``; None when disabled."""
        return float(self.llm_timeout) if self.llm_timeout > 0 else None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Returns a cached singleton Settings instance.

    Use this everywhere instead of instantiating Settings() directly:
    it guarantees a single object is shared across the entire process.
    """
    return Settings()
