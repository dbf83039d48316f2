"""
adapters/relay_llm.py
──────────────────────────────────────────────────────────────────────────────
Implements GenerationPort by forwarding one combined prompt to a
user-operated relay (e.g. a serverless worker that holds the real Gemini key).

Key behaviour:
  - URL is sanitized: whitespace trimmed, everything from the first "?" dropped
  - Body is {"prompt": <combined prompt>}; instruction and user prompt are
    merged by config/prompts.build_relay_prompt()
  - Authorization carries RELAY_TOKEN, agreed with the relay operator, never
    a backend API key
  - Reply shape is not fixed; REPLY_FIELDS is probed in order and the first
    non-empty string wins
  - Exactly one attempt per call, no retry, no back-off
"""
from __future__ import annotations

import logging
from typing import Any, Callable

import requests

from textforge.adapters.replies import to_variants
from textforge.config.prompts import PROBE_PROMPT, build_relay_prompt
from textforge.config.settings import Settings
from textforge.domain.exceptions import (
    CredentialMissingError,
    ProviderRejectedError,
    TransportError,
)
from textforge.domain.models import AdapterKind, GenerationRequest, ProviderSelection

logger = logging.getLogger(__name__)

CORS_HINT = (
    "Check that the relay is online and that it answers with "
    "Access-Control-Allow-Origin and Access-Control-Allow-Headers "
    "(Content-Type, Authorization) set."
)

# Candidate locations of the reply text, highest priority first.
REPLY_FIELDS: tuple[tuple[str, Callable[[Any], Any]], ...] = (
    ("candidates[0].content.parts[0].text",
     lambda d: d["candidates"][0]["content"]["parts"][0]["text"]),
    ("candidates[0].text", lambda d: d["candidates"][0]["text"]),
    ("text", lambda d: d["text"]),
    ("response", lambda d: d["response"]),
    ("output", lambda d: d["output"]),
)


def sanitize_relay_url(url: str) -> str:
    """Trim whitespace and drop any query string."""
    return url.strip().split("?", 1)[0]


def extract_reply_text(body: Any) -> str | None:
    """First non-empty string found at one of REPLY_FIELDS, else None."""
    for path, accessor in REPLY_FIELDS:
        try:
            value = accessor(body)
        except (KeyError, IndexError, TypeError):
            continue
        if isinstance(value, str) and value.strip():
            logger.debug("Relay reply text found at %s", path)
            return value
    return None


class RelayGenerationAdapter:
    """Relay adapter for a user-deployed intermediary endpoint."""

    kind = AdapterKind.RELAY

    def __init__(self, settings: Settings) -> None:
        self._timeout = settings.request_timeout
        self._headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {settings.relay_token}",
        }
        logger.debug("RelayGenerationAdapter ready | timeout=%s", self._timeout)

    # ── GenerationPort implementation ──────────────────────────────────────

    def generate(
        self,
        request: GenerationRequest,
        selection: ProviderSelection,
    ) -> list[str]:
        """Combine instruction + prompt and forward them to the relay."""
        combined = build_relay_prompt(request.system_instruction, request.user_prompt)
        return self.forward(combined, self._require_url(selection))

    def forward(self, combined_prompt: str, relay_url: str) -> list[str]:
        """POST an already-combined prompt and return its variants.

        Raises:
            TransportError:        The relay could not be reached.
            ProviderRejectedError: Non-2xx reply, or no extractable text.
        """
        url = sanitize_relay_url(relay_url)
        logger.info("Relay generate | url=%s", url)
        resp = self._post(url, combined_prompt)

        if not resp.ok:
            logger.error("Relay HTTP %d: %s", resp.status_code, resp.text[:300])
            raise ProviderRejectedError(
                f"Relay returned HTTP {resp.status_code}: {resp.text[:200]}",
                status_code=resp.status_code,
            )

        try:
            body = resp.json()
        except ValueError:
            body = None
        text = extract_reply_text(body)
        if text is None:
            raise ProviderRejectedError(
                "Relay returned no extractable content.", status_code=resp.status_code
            )
        return to_variants(text, "Relay")

    def probe(self, selection: ProviderSelection) -> bool:
        """Trivial ping payload; live on any 2xx."""
        if not selection.relay_url:
            return False
        resp = self._post(sanitize_relay_url(selection.relay_url), PROBE_PROMPT)
        return bool(resp.ok)

    # ── Private helpers ────────────────────────────────────────────────────

    @staticmethod
    def _require_url(selection: ProviderSelection) -> str:
        if not selection.relay_url or not sanitize_relay_url(selection.relay_url):
            raise CredentialMissingError("Relay URL is not configured.")
        return selection.relay_url

    def _post(self, url: str, prompt: str) -> requests.Response:
        try:
            return requests.post(
                url,
                headers=self._headers,
                json={"prompt": prompt},
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            logger.warning("Relay HTTP error for %s: %s", url, exc)
            raise TransportError(f"Could not reach the relay at {url}. {CORS_HINT}") from exc
