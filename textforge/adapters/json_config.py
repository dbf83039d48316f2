"""
adapters/json_config.py
──────────────────────────────────────────────────────────────────────────────
Implements ConfigurationPort from a JSON settings document, e.g.

  {
    "provider": "groq",
    "model": "llama-3.3-70b-versatile",
    "apiKeys": {"groq": "gsk_...", "openai": ""},
    "useProxy": false,
    "proxyUrl": "https://my-worker.example.workers.dev",
    "customInstructions": {"summarize": "Answer in exactly three bullets."}
  }

The file is re-read on every snapshot() so edits apply to the next call.
Fields the document omits fall back to the environment (EnvConfigurationAdapter);
the platform-level key always comes from the environment.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from textforge.adapters.env_config import (
    EnvConfigurationAdapter,
    parse_instructions,
    parse_provider,
)
from textforge.config.settings import Settings
from textforge.domain.exceptions import ConfigurationError
from textforge.domain.models import GenerationConfig, ProviderId

logger = logging.getLogger(__name__)

_JSON_TYPE_NAMES = {str: "string", bool: "boolean", dict: "object"}


class JsonFileConfigurationAdapter:
    """Snapshot read from ``path``, layered over the environment."""

    def __init__(self, path: Path | str, settings: Settings) -> None:
        self._path = Path(path)
        self._fallback = EnvConfigurationAdapter(settings)
        logger.debug("JsonFileConfigurationAdapter ready | path=%s", self._path)

    @property
    def path(self) -> Path:
        return self._path

    def snapshot(self) -> GenerationConfig:
        base = self._fallback.snapshot()
        doc = self._load()
        if not doc:
            return base

        provider = self._field(doc, "provider", str)
        model = self._field(doc, "model", str)
        use_proxy = self._field(doc, "useProxy", bool)
        proxy_url = self._field(doc, "proxyUrl", str)

        api_keys = dict(base.api_keys)
        for name, key in (self._field(doc, "apiKeys", dict) or {}).items():
            if key is not None and not isinstance(key, str):
                raise ConfigurationError(
                    f"Settings file {self._path}: apiKeys.{name} must be a string"
                )
            try:
                api_keys[ProviderId(name)] = key or ""
            except ValueError:
                logger.warning("Ignoring API key for unknown provider %r", name)

        instructions = self._field(doc, "customInstructions", dict) or {}
        for name, text in instructions.items():
            if not isinstance(text, str):
                raise ConfigurationError(
                    f"Settings file {self._path}: customInstructions.{name} must be a string"
                )
        overrides = dict(base.custom_instructions)
        overrides.update(parse_instructions(instructions))

        return GenerationConfig(
            provider_id=parse_provider(provider) if provider else base.provider_id,
            model_id=model or base.model_id,
            api_keys=api_keys,
            platform_key=base.platform_key,
            relay_enabled=base.relay_enabled if use_proxy is None else use_proxy,
            relay_url=proxy_url or base.relay_url,
            custom_instructions=overrides,
        )

    # ── Private helpers ────────────────────────────────────────────────────

    def _field(self, doc: dict, key: str, expected: type) -> Any:
        """``doc[key]`` when present; None when absent or null.

        Raises:
            ConfigurationError: If the value is not of type ``expected``.
        """
        value = doc.get(key)
        if value is None:
            return None
        if not isinstance(value, expected):
            raise ConfigurationError(
                f"Settings file {self._path}: '{key}' must be a JSON "
                f"{_JSON_TYPE_NAMES[expected]}, got {type(value).__name__}"
            )
        return value

    def _load(self) -> dict:
        if not self._path.exists():
            logger.warning("Settings file not found: %s, using environment", self._path)
            return {}
        try:
            doc = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ConfigurationError(
                f"Settings file {self._path} is not valid JSON: {exc.msg}"
            ) from exc
        if not isinstance(doc, dict):
            raise ConfigurationError(f"Settings file {self._path} must hold a JSON object")
        return doc
