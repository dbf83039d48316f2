"""
services/container.py
──────────────────────────────────────────────────────────────────────────────
Dependency Injection container.

THIS IS THE ONLY FILE THAT NAMES CONCRETE ADAPTER CLASSES.

Backend adapters are registered once per AdapterKind; the active provider is
chosen per call from the configuration snapshot, not here:

  AdapterKind.NATIVE → GeminiGenerationAdapter
  AdapterKind.COMPAT → ChatCompletionsAdapter   (openai / groq / openrouter)
  AdapterKind.RELAY  → RelayGenerationAdapter

Configuration source:
  SETTINGS_FILE set  → JsonFileConfigurationAdapter (layered over env)
  otherwise          → EnvConfigurationAdapter

Thread safety:
  Adapters hold no per-call state, so one dispatcher can serve any number of
  threads.  @lru_cache(maxsize=1) makes get_dispatcher() a process singleton.
"""
from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from textforge.adapters.env_config import EnvConfigurationAdapter
from textforge.adapters.gemini_llm import GeminiGenerationAdapter
from textforge.adapters.json_config import JsonFileConfigurationAdapter
from textforge.adapters.openai_compat_llm import ChatCompletionsAdapter
from textforge.adapters.relay_llm import RelayGenerationAdapter
from textforge.config.settings import Settings, get_settings
from textforge.domain.models import AdapterKind
from textforge.ports.config_port import ConfigurationPort
from textforge.ports.generation_port import GenerationPort
from textforge.services.dispatcher import GenerationDispatcher
from textforge.services.prober import ConnectionProber

logger = logging.getLogger(__name__)


def build_adapters(settings: Settings) -> dict[AdapterKind, GenerationPort]:
    """One adapter per routing tag."""
    return {
        AdapterKind.NATIVE: GeminiGenerationAdapter(settings),
        AdapterKind.COMPAT: ChatCompletionsAdapter(settings),
        AdapterKind.RELAY: RelayGenerationAdapter(settings),
    }


def build_config(settings: Settings, settings_file: Path | str | None = None) -> ConfigurationPort:
    """Choose the configuration source (explicit file > SETTINGS_FILE > env)."""
    path = settings_file or settings.settings_file
    if path:
        logger.info("Configuration source: settings file %s", path)
        return JsonFileConfigurationAdapter(path, settings)
    logger.info("Configuration source: environment")
    return EnvConfigurationAdapter(settings)


def build_dispatcher(
    settings: Settings,
    settings_file: Path | str | None = None,
) -> GenerationDispatcher:
    """Wire a GenerationDispatcher from ``settings``."""
    return GenerationDispatcher(
        adapters=build_adapters(settings),
        config=build_config(settings, settings_file),
    )


def build_prober(settings: Settings) -> ConnectionProber:
    """Wire a ConnectionProber over fresh adapters."""
    return ConnectionProber(
        adapters=build_adapters(settings),
        max_workers=settings.probe_workers,
    )


@lru_cache(maxsize=1)
def get_dispatcher() -> GenerationDispatcher:
    """Build and return the fully wired GenerationDispatcher singleton.

    Returns:
        Dispatcher reading configuration from SETTINGS_FILE or the environment.
    """
    settings = get_settings()
    dispatcher = build_dispatcher(settings)
    logger.info("GenerationDispatcher ready | default_provider=%s model=%s",
                settings.llm_provider, settings.llm_model)
    return dispatcher
