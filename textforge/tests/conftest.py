"""
tests/conftest.py
──────────────────────────────────────────────────────────────────────────────
Shared pytest fixtures and mock adapter implementations.

Mock adapters implement the Port Protocols via structural subtyping; they do
NOT inherit from any base class.  pytest uses them to test dispatcher and
prober logic without any network access.

Fixture hierarchy:
  settings        → Settings with fixed test values (no env reads)
  config          → GenerationConfig snapshot with every key slot filled
  fake_response   → factory for MagicMock requests.Response objects
  mock_adapters   → AdapterKind → RecordingAdapter
  dispatcher      → GenerationDispatcher wired with mock_adapters + config
"""
from __future__ import annotations

import json
from typing import Any
from unittest.mock import MagicMock

import pytest

from textforge.config.settings import Settings
from textforge.domain.models import (
    AdapterKind,
    GenerationConfig,
    GenerationRequest,
    OperationId,
    ProviderId,
    ProviderSelection,
)
from textforge.services.dispatcher import GenerationDispatcher


# ── Settings fixture ───────────────────────────────────────────────────────

@pytest.fixture(scope="session")
def settings() -> Settings:
    """Return a Settings instance with sane test defaults."""
    return Settings(
        llm_provider="gemini",
        llm_model="gemini-test",
        gemini_api_key="gm-test-key",
        openai_api_key="sk-test-key",
        groq_api_key="gsk-test-key",
        openrouter_api_key="sk-or-test-key",
        platform_api_key="",
        relay_enabled=False,
        relay_url="",
        relay_token="relay-test-token",
        custom_instructions={},
        settings_file="",
        llm_timeout=5,
        probe_workers=2,
    )


@pytest.fixture
def config() -> GenerationConfig:
    return GenerationConfig(
        provider_id=ProviderId.GEMINI,
        model_id="gemini-test",
        api_keys={
            ProviderId.GEMINI: "gm-test-key",
            ProviderId.OPENAI: "sk-test-key",
            ProviderId.GROQ: "gsk-test-key",
            ProviderId.OPENROUTER: "sk-or-test-key",
        },
    )


@pytest.fixture
def gen_request() -> GenerationRequest:
    return GenerationRequest(
        operation_id=OperationId.REPHRASE,
        system_instruction="You are an expert editor.",
        user_prompt="Rephrase this text in 3 different ways:\n\nWe should meet soon.",
    )


@pytest.fixture
def selection_factory():
    """Build a ProviderSelection with test defaults."""

    def _make(provider_id: ProviderId = ProviderId.GEMINI, **overrides: Any) -> ProviderSelection:
        values: dict[str, Any] = {
            "provider_id": provider_id,
            "model_id": "test-model",
            "credential": "test-key",
        }
        values.update(overrides)
        return ProviderSelection(**values)

    return _make


# ── Fake HTTP responses ────────────────────────────────────────────────────

@pytest.fixture
def fake_response():
    """Build a mock requests.Response.

    ``json_error=True`` makes .json() raise ValueError like a plain-text reply.
    """

    def _make(
        status: int = 200,
        body: Any = None,
        text: str | None = None,
        json_error: bool = False,
    ) -> MagicMock:
        resp = MagicMock()
        resp.status_code = status
        resp.ok = 200 <= status < 300
        if json_error:
            resp.json.side_effect = ValueError("Expecting value")
            resp.text = text or ""
        else:
            resp.json.return_value = body
            resp.text = text if text is not None else json.dumps(body)
        return resp

    return _make


# ── Mock adapters ──────────────────────────────────────────────────────────

class RecordingAdapter:
    """Returns canned variants and records every call it receives."""

    def __init__(self, kind: AdapterKind, variants: list[str] | None = None) -> None:
        self.kind = kind
        self.variants = variants or [f"{kind.value} variant 1", f"{kind.value} variant 2"]
        self.calls: list[tuple[GenerationRequest, ProviderSelection]] = []
        self.probes: list[ProviderSelection] = []
        self.probe_result: bool = True
        self.error: Exception | None = None

    def generate(self, request: GenerationRequest, selection: ProviderSelection) -> list[str]:
        self.calls.append((request, selection))
        if self.error is not None:
            raise self.error
        return list(self.variants)

    def probe(self, selection: ProviderSelection) -> bool:
        self.probes.append(selection)
        if self.error is not None:
            raise self.error
        return self.probe_result


class StaticConfig:
    """ConfigurationPort returning a fixed snapshot; counts reads."""

    def __init__(self, snapshot: GenerationConfig) -> None:
        self._snapshot = snapshot
        self.reads = 0

    def snapshot(self) -> GenerationConfig:
        self.reads += 1
        return self._snapshot


# ── pytest fixtures ────────────────────────────────────────────────────────

@pytest.fixture
def mock_adapters() -> dict[AdapterKind, RecordingAdapter]:
    return {kind: RecordingAdapter(kind) for kind in AdapterKind}


@pytest.fixture
def static_config(config) -> StaticConfig:
    return StaticConfig(config)


@pytest.fixture
def dispatcher(mock_adapters, static_config) -> GenerationDispatcher:
    return GenerationDispatcher(adapters=mock_adapters, config=static_config)
