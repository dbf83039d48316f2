"""
ports/config_port.py
──────────────────────────────────────────────────────────────────────────────
Abstract interface for the Configuration Provider.

Current implementations:
  EnvConfigurationAdapter       (environment / .env via config/settings.py)
  JsonFileConfigurationAdapter  (a JSON settings document, re-read per call)
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from textforge.domain.models import GenerationConfig


@runtime_checkable
class ConfigurationPort(Protocol):
    """Contract for a source of provider settings."""

    def snapshot(self) -> GenerationConfig:
        """Return the current settings as one immutable value.

        Raises:
            ConfigurationError: If the underlying source is invalid.
        """
        ...
