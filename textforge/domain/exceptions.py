"""
domain/exceptions.py
──────────────────────────────────────────────────────────────────────────────
Custom exception hierarchy.

All exceptions are rooted at TextForgeError so callers can catch broadly
(except TextForgeError) or narrowly (except CredentialMissingError).

Generation failures are surfaced to the user verbatim, so every message is
written to be read by a human:
  CredentialMissingError → no usable key; raised before any network call
  TransportError         → the endpoint could not be reached
  ProviderRejectedError  → the endpoint answered, but not with usable content
"""
from __future__ import annotations


class TextForgeError(Exception):
    """Base exception for all application errors."""


class ConfigurationError(TextForgeError):
    """Raised when required configuration is missing or invalid."""


class GenerationError(TextForgeError):
    """Base class for failures of a single generation or probe call."""


class CredentialMissingError(GenerationError):
    """Raised when the selected provider has no usable credential."""


class TransportError(GenerationError):
    """Raised when the request could not reach the endpoint."""


class ProviderRejectedError(GenerationError):
    """Raised when the endpoint responded with an error or no content.

    Args:
        message:     Human-readable reason, usually the upstream error text.
        status_code: HTTP status of the reply, when there was one.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
