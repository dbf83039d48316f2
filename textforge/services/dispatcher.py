"""
services/dispatcher.py
──────────────────────────────────────────────────────────────────────────────
Provider-agnostic generation dispatcher, the primary entry point for all
interfaces.

Routing (route()):
  gemini + relay_enabled + relay_url → RELAY   (combined single prompt)
  relay                              → RELAY
  gemini                             → NATIVE  (structured-output schema)
  openai | groq | openrouter         → COMPAT  (chat completions)

Only the Gemini family goes through the relay; compat providers ignore the
relay toggle.  The dispatcher holds a mapping AdapterKind → GenerationPort and
never branches on wire details itself.

Errors raised by adapters propagate unmodified: no retry, no translation.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping

from textforge.config.prompts import get_tool, render_user_prompt
from textforge.domain.exceptions import ConfigurationError
from textforge.domain.models import (
    AdapterKind,
    GenerationConfig,
    GenerationRequest,
    GenerationResult,
    OperationId,
    ProviderId,
    ProviderSelection,
    TransformRequest,
)
from textforge.ports.config_port import ConfigurationPort
from textforge.ports.generation_port import GenerationPort

logger = logging.getLogger(__name__)


def route(selection: ProviderSelection) -> AdapterKind:
    """Pick the wire shape for ``selection``."""
    if selection.provider_id == ProviderId.RELAY:
        return AdapterKind.RELAY
    if selection.provider_id == ProviderId.GEMINI:
        if selection.relay_enabled and selection.relay_url:
            return AdapterKind.RELAY
        return AdapterKind.NATIVE
    return AdapterKind.COMPAT


def build_request(
    transform: TransformRequest,
    config: GenerationConfig,
) -> GenerationRequest:
    """Resolve the instruction and render the prompt for one tool run."""
    tool = get_tool(transform.operation_id)
    return GenerationRequest(
        operation_id=transform.operation_id,
        system_instruction=config.instruction_for(transform.operation_id, tool.system_prompt),
        user_prompt=render_user_prompt(transform.operation_id, transform.text, transform.tone),
    )


class GenerationDispatcher:
    """Routes a GenerationRequest to exactly one backend adapter.

    Inject via services/container.py; do not instantiate directly in
    application code.

    Args:
        adapters: One GenerationPort per AdapterKind.
        config:   Source of provider settings; read once per run().
    """

    def __init__(
        self,
        adapters: Mapping[AdapterKind, GenerationPort],
        config: ConfigurationPort,
    ) -> None:
        missing = [k.value for k in AdapterKind if k not in adapters]
        if missing:
            raise ConfigurationError(f"No adapter registered for: {', '.join(missing)}")
        self._adapters = dict(adapters)
        self._config = config

    @property
    def config(self) -> ConfigurationPort:
        return self._config

    # ── Public API ─────────────────────────────────────────────────────────

    def generate(
        self,
        request: GenerationRequest,
        selection: ProviderSelection,
    ) -> GenerationResult:
        """Issue one generation call against the selected backend.

        Args:
            request:   Rendered instruction + prompt.
            selection: Provider snapshot for this call.

        Returns:
            GenerationResult with at least one variant, in upstream order.

        Raises:
            CredentialMissingError, TransportError, ProviderRejectedError:
                Propagated unmodified from the adapter.
        """
        kind = route(selection)
        logger.info(
            "generate | operation=%s provider=%s model=%s adapter=%s",
            request.operation_id.value,
            selection.provider_id.value,
            selection.model_id,
            kind.value,
        )
        variants = self._adapters[kind].generate(request, selection)
        return GenerationResult(
            variants=variants,
            operation_id=request.operation_id,
            provider_id=selection.provider_id,
            model_id=selection.model_id,
            adapter=kind,
        )

    def run(
        self,
        operation_id: OperationId | str,
        text: str,
        tone: str | None = None,
    ) -> GenerationResult:
        """Run a tool on ``text`` with the current configuration.

        Takes one configuration snapshot, so the call is unaffected by
        later configuration changes.

        Raises:
            pydantic.ValidationError: If ``text`` is blank or the tool unknown.
        """
        transform = TransformRequest(operation_id=operation_id, text=text, tone=tone)
        config = self._config.snapshot()
        request = build_request(transform, config)
        return self.generate(request, config.select())
