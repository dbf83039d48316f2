"""
adapters/replies.py
──────────────────────────────────────────────────────────────────────────────
Reply handling shared by the HTTP adapters.

  upstream_error_message() → the provider's own error text, if the body has one
  json_body()              → a 2xx body as a dict, or ProviderRejectedError
  to_variants()            → Normalizer output, rejecting empty successes
"""
from __future__ import annotations

import logging

import requests

from textforge.domain.exceptions import ProviderRejectedError
from textforge.services.normalizer import Structured, decode

logger = logging.getLogger(__name__)


def upstream_error_message(resp: requests.Response) -> str | None:
    """Extract ``error.message`` (or a string ``error``) from an error body."""
    try:
        body = resp.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        return str(message) if message else None
    if isinstance(error, str) and error:
        return error
    return None


def to_variants(raw: str, label: str) -> list[str]:
    """Normalize ``raw`` and refuse to return an empty result.

    Raises:
        ProviderRejectedError: If the backend answered with an empty array.
    """
    outcome = decode(raw)
    if isinstance(outcome, Structured) and not outcome.items:
        raise ProviderRejectedError(f"{label} returned an empty list of variants.")
    variants = outcome.variants
    logger.debug("%s reply decoded | outcome=%s variants=%d",
                 label, type(outcome).__name__, len(variants))
    return variants


def json_body(resp: requests.Response, label: str) -> dict:
    """Decode a 2xx reply body as a JSON object.

    Raises:
        ProviderRejectedError: If the body is not a JSON object.
    """
    try:
        body = resp.json()
    except ValueError as exc:
        raise ProviderRejectedError(
            f"{label} returned a non-JSON body.", status_code=resp.status_code
        ) from exc
    if not isinstance(body, dict):
        raise ProviderRejectedError(
            f"{label} returned an unexpected JSON {type(body).__name__}.",
            status_code=resp.status_code,
        )
    return body
