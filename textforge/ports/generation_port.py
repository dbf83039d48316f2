"""
ports/generation_port.py
──────────────────────────────────────────────────────────────────────────────
Abstract interface for text-generation backends.

Current implementations:
  GeminiGenerationAdapter  (AdapterKind.NATIVE: structured-output schema)
  ChatCompletionsAdapter   (AdapterKind.COMPAT: OpenAI / Groq / OpenRouter)
  RelayGenerationAdapter   (AdapterKind.RELAY : user-operated worker)

The dispatcher holds a mapping AdapterKind → GenerationPort, so a fourth
backend is one new adapter plus one line in services/container.py.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from textforge.domain.models import AdapterKind, GenerationRequest, ProviderSelection


@runtime_checkable
class GenerationPort(Protocol):
    """Contract for a backend that turns a request into ordered variants."""

    @property
    def kind(self) -> AdapterKind:
        """Routing tag this adapter is registered under."""
        ...

    def generate(
        self,
        request: GenerationRequest,
        selection: ProviderSelection,
    ) -> list[str]:
        """Issue exactly one generation call and return its variants.

        Args:
            request:   Rendered instruction + prompt.
            selection: Provider snapshot (model, credential, relay settings).

        Returns:
            Non-empty list of variants in upstream order.

        Raises:
            CredentialMissingError: Before any network call, if no key applies.
            TransportError:         If the endpoint could not be reached.
            ProviderRejectedError:  On a non-2xx reply or a reply with no content.
        """
        ...

    def probe(self, selection: ProviderSelection) -> bool:
        """Lightweight liveness check.

        May raise; ConnectionProber converts every failure into ``False``.
        """
        ...
