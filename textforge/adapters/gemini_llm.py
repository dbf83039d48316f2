"""
adapters/gemini_llm.py
──────────────────────────────────────────────────────────────────────────────
Implements GenerationPort using the Gemini generateContent REST API.

Key behaviour:
  - Sends system_instruction + contents as separate fields
  - Requests structured output: response_mime_type application/json plus a
    response_schema of "array of strings", so the backend enforces encoding
  - Credential: per-provider key, else the platform-level key; sent as the
    ``key`` query parameter
  - Exactly one attempt per call, no retry, no back-off
  - Returns the Normalizer's variants for candidates[0].content.parts[0].text
"""
from __future__ import annotations

import logging

import requests

from textforge.adapters.replies import json_body, to_variants, upstream_error_message
from textforge.config.prompts import PROBE_PROMPT
from textforge.config.settings import Settings
from textforge.domain.exceptions import (
    CredentialMissingError,
    ProviderRejectedError,
    TransportError,
)
from textforge.domain.models import AdapterKind, GenerationRequest, ProviderSelection

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
GENERATION_TEMPERATURE = 0.7

_ARRAY_OF_STRINGS_SCHEMA = {
    "type": "ARRAY",
    "items": {"type": "STRING"},
}


def build_gemini_url(model_id: str) -> str:
    return f"{GEMINI_BASE_URL}/models/{model_id}:generateContent"


class GeminiGenerationAdapter:
    """Native-schema adapter for Gemini.

    Injected into GenerationDispatcher via services/container.py.
    """

    kind = AdapterKind.NATIVE

    def __init__(self, settings: Settings) -> None:
        self._timeout = settings.request_timeout
        logger.debug("GeminiGenerationAdapter ready | timeout=%s", self._timeout)

    # ── GenerationPort implementation ──────────────────────────────────────

    def generate(
        self,
        request: GenerationRequest,
        selection: ProviderSelection,
    ) -> list[str]:
        """Send one structured-output request and return its variants.

        Raises:
            CredentialMissingError: No per-provider or platform key.
            TransportError:         Network-level failure.
            ProviderRejectedError:  Non-2xx reply, or a reply with no text.
        """
        api_key = self._require_key(selection)
        payload = self._build_payload(request.system_instruction, request.user_prompt)
        logger.info("Gemini generate | model=%s operation=%s",
                    selection.model_id, request.operation_id.value)

        resp = self._post(selection.model_id, api_key, payload)
        if not resp.ok:
            message = upstream_error_message(resp)
            logger.error("Gemini HTTP %d: %s", resp.status_code, resp.text[:300])
            raise ProviderRejectedError(
                message or f"Gemini request failed with HTTP {resp.status_code}",
                status_code=resp.status_code,
            )

        text = self._extract_text(json_body(resp, "Gemini"))
        return to_variants(text, "Gemini")

    def probe(self, selection: ProviderSelection) -> bool:
        """Tiny generation call; live when any text comes back."""
        api_key = selection.native_credential
        if not api_key:
            return False
        payload = {
            "contents": [{"role": "user", "parts": [{"text": PROBE_PROMPT}]}],
            "generationConfig": {
                "maxOutputTokens": 5,
                "thinkingConfig": {"thinkingBudget": 0},
            },
        }
        resp = self._post(selection.model_id, api_key, payload)
        if not resp.ok:
            logger.warning("Gemini probe HTTP %d", resp.status_code)
            return False
        return bool(self._first_text(json_body(resp, "Gemini")).strip())

    # ── Private helpers ────────────────────────────────────────────────────

    @staticmethod
    def _require_key(selection: ProviderSelection) -> str:
        api_key = selection.native_credential
        if not api_key:
            raise CredentialMissingError(
                "Gemini API key not found. Set GEMINI_API_KEY or the platform API_KEY."
            )
        return api_key

    def _build_payload(self, system_instruction: str, user_prompt: str) -> dict:
        return {
            "system_instruction": {
                "parts": [{"text": system_instruction}],
            },
            "contents": [
                {
                    "role": "user",
                    "parts": [{"text": user_prompt}],
                }
            ],
            "generationConfig": {
                "temperature": GENERATION_TEMPERATURE,
                "response_mime_type": "application/json",
                "response_schema": _ARRAY_OF_STRINGS_SCHEMA,
            },
        }

    def _post(self, model_id: str, api_key: str, payload: dict) -> requests.Response:
        try:
            return requests.post(
                build_gemini_url(model_id),
                params={"key": api_key},
                headers={"Content-Type": "application/json"},
                json=payload,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            logger.warning("Gemini HTTP error: %s", type(exc).__name__)
            raise TransportError(f"Could not reach Gemini: {type(exc).__name__}") from exc

    @staticmethod
    def _first_text(response_json: dict) -> str:
        """candidates[0].content.parts[0].text as sent, or "" when absent."""
        try:
            candidates = response_json.get("candidates") or []
            if not candidates:
                return ""
            parts = (candidates[0].get("content") or {}).get("parts") or []
            if not parts:
                return ""
            text = parts[0].get("text")
            return text if isinstance(text, str) else ""
        except (AttributeError, IndexError, TypeError):
            return ""

    def _extract_text(self, response_json: dict) -> str:
        """Pull the text out of a generateContent reply or explain why not."""
        text = self._first_text(response_json)
        if text.strip():
            return text

        feedback = response_json.get("promptFeedback")
        block_reason = feedback.get("blockReason") if isinstance(feedback, dict) else None
        if block_reason:
            raise ProviderRejectedError(f"Gemini blocked the prompt: {block_reason}")
        raise ProviderRejectedError("Gemini returned no text.")
