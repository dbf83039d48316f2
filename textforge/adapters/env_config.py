"""
adapters/env_config.py
──────────────────────────────────────────────────────────────────────────────
Implements ConfigurationPort from environment variables / .env
(see config/settings.py for the variable names).
"""
from __future__ import annotations

import logging

from textforge.config.settings import Settings
from textforge.domain.exceptions import ConfigurationError
from textforge.domain.models import GenerationConfig, OperationId, ProviderId

logger = logging.getLogger(__name__)


def parse_provider(value: str) -> ProviderId:
    """Map a provider name to ProviderId.

    Raises:
        ConfigurationError: If the name is unknown.
    """
    try:
        return ProviderId(value.strip().lower())
    except ValueError as exc:
        valid = ", ".join(f"'{p.value}'" for p in ProviderId)
        raise ConfigurationError(
            f"Unknown LLM_PROVIDER '{value}'. Valid values: {valid}."
        ) from exc


def parse_instructions(raw: dict[str, str]) -> dict[OperationId, str]:
    """Keep overrides for known tools; warn about and drop the rest."""
    overrides: dict[OperationId, str] = {}
    for key, text in raw.items():
        try:
            overrides[OperationId(key)] = text
        except ValueError:
            logger.warning("Ignoring instruction override for unknown tool %r", key)
    return overrides


class EnvConfigurationAdapter:
    """Snapshot built from a Settings instance."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def snapshot(self) -> GenerationConfig:
        s = self._settings
        return GenerationConfig(
            provider_id=parse_provider(s.llm_provider),
            model_id=s.llm_model,
            api_keys={
                ProviderId.GEMINI: s.gemini_api_key,
                ProviderId.OPENAI: s.openai_api_key,
                ProviderId.GROQ: s.groq_api_key,
                ProviderId.OPENROUTER: s.openrouter_api_key,
            },
            platform_key=s.platform_api_key,
            relay_enabled=s.relay_enabled,
            relay_url=s.relay_url,
            custom_instructions=parse_instructions(s.custom_instructions),
        )
