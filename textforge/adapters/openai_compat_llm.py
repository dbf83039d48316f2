"""
adapters/openai_compat_llm.py
──────────────────────────────────────────────────────────────────────────────
Implements GenerationPort for the OpenAI Chat Completions wire convention.

One adapter serves every backend in the family; they differ only in base URL
and credential slot:

  openai      https://api.openai.com/v1
  groq        https://api.groq.com/openai/v1
  openrouter  https://openrouter.ai/api/v1

Key behaviour:
  - Uses /chat/completions via raw requests (no openai SDK dependency)
  - system message = instruction + "Respond only with a JSON array of strings."
  - Credential sent as Authorization: Bearer <key>
  - Exactly one attempt per call, no retry, no back-off
  - Probe = authenticated metadata GET (model listing / key introspection)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

import requests

from textforge.adapters.replies import json_body, to_variants, upstream_error_message
from textforge.config.prompts import build_compat_system_message
from textforge.config.settings import Settings
from textforge.domain.exceptions import (
    ConfigurationError,
    CredentialMissingError,
    ProviderRejectedError,
    TransportError,
)
from textforge.domain.models import (
    AdapterKind,
    GenerationRequest,
    ProviderId,
    ProviderSelection,
)

logger = logging.getLogger(__name__)

GENERATION_TEMPERATURE = 0.7


@dataclass(frozen=True)
class CompatEndpoint:
    """Where one chat-completions backend lives."""

    chat_url: str
    probe_url: str


ENDPOINTS: dict[ProviderId, CompatEndpoint] = {
    ProviderId.OPENAI: CompatEndpoint(
        chat_url="https://api.openai.com/v1/chat/completions",
        probe_url="https://api.openai.com/v1/models",
    ),
    ProviderId.GROQ: CompatEndpoint(
        chat_url="https://api.groq.com/openai/v1/chat/completions",
        probe_url="https://api.groq.com/openai/v1/models",
    ),
    ProviderId.OPENROUTER: CompatEndpoint(
        chat_url="https://openrouter.ai/api/v1/chat/completions",
        probe_url="https://openrouter.ai/api/v1/auth/key",
    ),
}


class ChatCompletionsAdapter:
    """OpenAI-compatible chat completions adapter.

    The provider is taken from each call's ProviderSelection, so a single
    instance serves OpenAI, Groq and OpenRouter.
    """

    kind = AdapterKind.COMPAT

    def __init__(self, settings: Settings) -> None:
        self._timeout = settings.request_timeout
        logger.debug("ChatCompletionsAdapter ready | providers=%s",
                     ", ".join(p.value for p in ENDPOINTS))

    # ── GenerationPort implementation ──────────────────────────────────────

    def generate(
        self,
        request: GenerationRequest,
        selection: ProviderSelection,
    ) -> list[str]:
        """Send one chat completion and return its variants.

        Raises:
            CredentialMissingError: The provider's key slot is empty.
            TransportError:         Network-level failure.
            ProviderRejectedError:  Non-2xx reply, or a reply with no content.
        """
        endpoint = _endpoint_for(selection.provider_id)
        label = selection.provider_id.value.upper()
        headers = self._headers(selection, label)
        payload = self._build_payload(selection.model_id, request)
        logger.info("%s generate | model=%s operation=%s",
                    label, selection.model_id, request.operation_id.value)

        try:
            resp = requests.post(
                endpoint.chat_url,
                headers=headers,
                json=payload,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            logger.warning("%s HTTP error: %s", label, type(exc).__name__)
            raise TransportError(f"Could not reach {label}: {type(exc).__name__}") from exc

        if not resp.ok:
            message = upstream_error_message(resp)
            logger.error("%s HTTP %d: %s", label, resp.status_code, resp.text[:300])
            raise ProviderRejectedError(
                message or f"{label} request failed with HTTP {resp.status_code}",
                status_code=resp.status_code,
            )

        content = self._extract_content(json_body(resp, label), label)
        return to_variants(content, label)

    def probe(self, selection: ProviderSelection) -> bool:
        """Authenticated metadata call; live on any 2xx."""
        if not selection.credential:
            return False
        endpoint = _endpoint_for(selection.provider_id)
        resp = requests.get(
            endpoint.probe_url,
            headers={"Authorization": f"Bearer {selection.credential}"},
            timeout=self._timeout,
        )
        if not resp.ok:
            logger.warning("%s probe HTTP %d",
                           selection.provider_id.value.upper(), resp.status_code)
        return bool(resp.ok)

    # ── Private helpers ────────────────────────────────────────────────────

    @staticmethod
    def _headers(selection: ProviderSelection, label: str) -> dict:
        if not selection.credential:
            raise CredentialMissingError(f"API key for {label} not found.")
        return {
            "Authorization": f"Bearer {selection.credential}",
            "Content-Type": "application/json",
        }

    @staticmethod
    def _build_payload(model_id: str, request: GenerationRequest) -> dict:
        """Build the chat completions request body."""
        return {
            "model": model_id,
            "messages": [
                {
                    "role": "system",
                    "content": build_compat_system_message(request.system_instruction),
                },
                {"role": "user", "content": request.user_prompt},
            ],
            "temperature": GENERATION_TEMPERATURE,
        }

    @staticmethod
    def _extract_content(response_json: dict, label: str) -> str:
        """Pull choices[0].message.content out of the reply."""
        try:
            content = response_json["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            content = None
        if not isinstance(content, str) or not content.strip():
            raise ProviderRejectedError(f"{label} returned no content.")
        return content


def _endpoint_for(provider_id: ProviderId) -> CompatEndpoint:
    try:
        return ENDPOINTS[provider_id]
    except KeyError as exc:
        raise ConfigurationError(
            f"'{provider_id.value}' is not a chat-completions provider."
        ) from exc
