"""
services/prober.py
──────────────────────────────────────────────────────────────────────────────
Connection Prober: lightweight liveness checks per provider.

  gemini      tiny generateContent call (or, in relay mode, a "ping" POST)
  compat      authenticated metadata GET (model list / key introspection)
  relay       "ping" POST to the relay URL

A probe never raises; every failure mode becomes ``False``.  probe_all()
checks every configured credential slot concurrently; the probes share no
state.  Superseded probe bursts are not cancelled or deduplicated here.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor

from textforge.domain.models import (
    AdapterKind,
    GenerationConfig,
    ProviderId,
    ProviderSelection,
)
from textforge.ports.generation_port import GenerationPort
from textforge.services.dispatcher import route

logger = logging.getLogger(__name__)

PROBED_PROVIDERS: tuple[ProviderId, ...] = (
    ProviderId.GEMINI,
    ProviderId.OPENAI,
    ProviderId.GROQ,
    ProviderId.OPENROUTER,
)


class ConnectionProber:
    """Boolean liveness checks over the same adapters the dispatcher uses.

    Args:
        adapters:    One GenerationPort per AdapterKind.
        max_workers: Thread-pool size for probe_all().
    """

    def __init__(
        self,
        adapters: Mapping[AdapterKind, GenerationPort],
        max_workers: int = 4,
    ) -> None:
        self._adapters = dict(adapters)
        self._max_workers = max(1, max_workers)

    # ── Public API ─────────────────────────────────────────────────────────

    def probe(
        self,
        provider_id: ProviderId,
        model_id: str,
        credential: str | None = None,
        *,
        relay_url: str | None = None,
        relay_enabled: bool = False,
        platform_credential: str | None = None,
    ) -> bool:
        """Whether ``provider_id`` answers with the given credential."""
        selection = ProviderSelection(
            provider_id=provider_id,
            model_id=model_id,
            credential=credential or None,
            platform_credential=platform_credential or None,
            relay_url=relay_url or None,
            relay_enabled=relay_enabled,
        )
        return self.probe_selection(selection)

    def probe_selection(self, selection: ProviderSelection) -> bool:
        """Probe one ProviderSelection; any exception yields ``False``."""
        kind = route(selection)
        try:
            ok = bool(self._adapters[kind].probe(selection))
        except Exception as exc:
            logger.warning(
                "probe failed | provider=%s adapter=%s error=%s",
                selection.provider_id.value, kind.value, type(exc).__name__,
            )
            return False
        logger.info("probe | provider=%s adapter=%s ok=%s",
                    selection.provider_id.value, kind.value, ok)
        return ok

    def probe_all(self, config: GenerationConfig) -> dict[ProviderId, bool]:
        """Probe every provider slot in ``config`` concurrently.

        Slots with no credential report ``False`` without a network call.
        """
        results: dict[ProviderId, bool] = {p: False for p in PROBED_PROVIDERS}
        configured = [p for p in PROBED_PROVIDERS if config.has_credential(p)]
        if not configured:
            return results

        with ThreadPoolExecutor(max_workers=min(self._max_workers, len(configured))) as pool:
            futures = {
                p: pool.submit(self.probe_selection, config.select(p))
                for p in configured
            }
            for provider_id, future in futures.items():
                results[provider_id] = future.result()
        return results
