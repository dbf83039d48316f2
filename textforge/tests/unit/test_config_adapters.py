"""
tests/unit/test_config_adapters.py
──────────────────────────────────────────────────────────────────────────────
EnvConfigurationAdapter, JsonFileConfigurationAdapter and Settings helpers.
"""
from __future__ import annotations

import dataclasses
import json

import pytest

from textforge.adapters.env_config import (
    EnvConfigurationAdapter,
    parse_instructions,
    parse_provider,
)
from textforge.adapters.json_config import JsonFileConfigurationAdapter
from textforge.config.settings import Settings
from textforge.domain.exceptions import ConfigurationError
from textforge.domain.models import OperationId, ProviderId
from textforge.services.container import build_config


class TestParsers:
    @pytest.mark.parametrize("raw", ["groq", " GROQ ", "Groq"])
    def test_provider_case_insensitive(self, raw):
        assert parse_provider(raw) is ProviderId.GROQ

    def test_unknown_provider(self):
        with pytest.raises(ConfigurationError, match="Unknown LLM_PROVIDER 'claude'"):
            parse_provider("claude")

    def test_unknown_instruction_keys_dropped(self):
        parsed = parse_instructions({"rephrase": "A", "translate": "B"})
        assert parsed == {OperationId.REPHRASE: "A"}


class TestEnvConfigurationAdapter:
    def test_snapshot_from_settings(self, settings):
        config = EnvConfigurationAdapter(settings).snapshot()
        assert config.provider_id is ProviderId.GEMINI
        assert config.model_id == "gemini-test"
        assert config.api_keys[ProviderId.GROQ] == "gsk-test-key"
        assert config.relay_enabled is False

    def test_custom_instructions_mapped(self, settings):
        s = dataclasses.replace(settings, custom_instructions={"expand": "Go long."})
        config = EnvConfigurationAdapter(s).snapshot()
        assert config.custom_instructions == {OperationId.EXPAND: "Go long."}

    def test_bad_provider_surfaces_on_snapshot(self, settings):
        s = dataclasses.replace(settings, llm_provider="bogus")
        with pytest.raises(ConfigurationError):
            EnvConfigurationAdapter(s).snapshot()


class TestJsonFileConfigurationAdapter:
    def _write(self, tmp_path, doc) -> str:
        path = tmp_path / "settings.json"
        path.write_text(json.dumps(doc) if not isinstance(doc, str) else doc, encoding="utf-8")
        return str(path)

    def test_document_overrides_env(self, tmp_path, settings):
        path = self._write(tmp_path, {
            "provider": "openrouter",
            "model": "openai/gpt-4o-mini",
            "apiKeys": {"openrouter": "sk-or-file"},
            "useProxy": True,
            "proxyUrl": "https://w.dev",
            "customInstructions": {"summarize": "Three bullets."},
        })
        config = JsonFileConfigurationAdapter(path, settings).snapshot()
        assert config.provider_id is ProviderId.OPENROUTER
        assert config.model_id == "openai/gpt-4o-mini"
        assert config.api_keys[ProviderId.OPENROUTER] == "sk-or-file"
        assert config.api_keys[ProviderId.OPENAI] == "sk-test-key"
        assert config.relay_enabled is True
        assert config.relay_url == "https://w.dev"
        assert config.custom_instructions[OperationId.SUMMARIZE] == "Three bullets."

    def test_omitted_fields_fall_back(self, tmp_path, settings):
        path = self._write(tmp_path, {"model": "gpt-4o"})
        config = JsonFileConfigurationAdapter(path, settings).snapshot()
        assert config.provider_id is ProviderId.GEMINI
        assert config.model_id == "gpt-4o"
        assert config.api_keys[ProviderId.GEMINI] == "gm-test-key"

    def test_empty_key_in_file_clears_slot(self, tmp_path, settings):
        path = self._write(tmp_path, {"apiKeys": {"openai": ""}})
        config = JsonFileConfigurationAdapter(path, settings).snapshot()
        assert not config.has_credential(ProviderId.OPENAI)

    def test_unknown_provider_key_ignored(self, tmp_path, settings):
        path = self._write(tmp_path, {"apiKeys": {"mistral": "m-1"}})
        config = JsonFileConfigurationAdapter(path, settings).snapshot()
        assert "mistral" not in {p.value for p in config.api_keys}

    def test_reread_on_every_snapshot(self, tmp_path, settings):
        path = self._write(tmp_path, {"provider": "groq"})
        adapter = JsonFileConfigurationAdapter(path, settings)
        first = adapter.snapshot()
        self._write(tmp_path, {"provider": "openai"})
        second = adapter.snapshot()
        assert first.provider_id is ProviderId.GROQ
        assert second.provider_id is ProviderId.OPENAI

    def test_missing_file_falls_back_to_env(self, tmp_path, settings):
        adapter = JsonFileConfigurationAdapter(tmp_path / "absent.json", settings)
        assert adapter.snapshot() == EnvConfigurationAdapter(settings).snapshot()

    def test_invalid_json(self, tmp_path, settings):
        path = self._write(tmp_path, "{not json")
        with pytest.raises(ConfigurationError, match="not valid JSON"):
            JsonFileConfigurationAdapter(path, settings).snapshot()

    @pytest.mark.parametrize("value", ["false", "true", 0, 1])
    def test_use_proxy_must_be_boolean(self, tmp_path, settings, value):
        path = self._write(tmp_path, {"useProxy": value, "proxyUrl": "https://w.dev"})
        with pytest.raises(ConfigurationError, match="useProxy"):
            JsonFileConfigurationAdapter(path, settings).snapshot()

    def test_use_proxy_false_disables_relay(self, tmp_path, settings):
        s = dataclasses.replace(settings, relay_enabled=True, relay_url="https://env.dev")
        path = self._write(tmp_path, {"useProxy": False})
        assert JsonFileConfigurationAdapter(path, s).snapshot().relay_enabled is False

    def test_absent_use_proxy_keeps_env_value(self, tmp_path, settings):
        s = dataclasses.replace(settings, relay_enabled=True, relay_url="https://env.dev")
        path = self._write(tmp_path, {"model": "gpt-4o"})
        assert JsonFileConfigurationAdapter(path, s).snapshot().relay_enabled is True

    @pytest.mark.parametrize(
        "doc, field",
        [
            ({"apiKeys": ["sk"]}, "apiKeys"),
            ({"apiKeys": "sk"}, "apiKeys"),
            ({"apiKeys": {"openai": 123}}, "apiKeys.openai"),
            ({"customInstructions": ["Be brief."]}, "customInstructions"),
            ({"customInstructions": {"rephrase": {"text": "x"}}}, "customInstructions.rephrase"),
            ({"provider": 7}, "provider"),
            ({"model": ["gpt-4o"]}, "model"),
            ({"proxyUrl": True}, "proxyUrl"),
        ],
    )
    def test_wrongly_typed_fields(self, tmp_path, settings, doc, field):
        path = self._write(tmp_path, doc)
        with pytest.raises(ConfigurationError, match=field):
            JsonFileConfigurationAdapter(path, settings).snapshot()

    def test_null_fields_fall_back(self, tmp_path, settings):
        path = self._write(tmp_path, {"provider": None, "apiKeys": None, "useProxy": None})
        config = JsonFileConfigurationAdapter(path, settings).snapshot()
        assert config == EnvConfigurationAdapter(settings).snapshot()

    def test_non_object(self, tmp_path, settings):
        path = self._write(tmp_path, ["a"])
        with pytest.raises(ConfigurationError, match="JSON object"):
            JsonFileConfigurationAdapter(path, settings).snapshot()


class TestBuildConfig:
    def test_env_by_default(self, settings):
        assert isinstance(build_config(settings), EnvConfigurationAdapter)

    def test_explicit_file(self, tmp_path, settings):
        adapter = build_config(settings, tmp_path / "s.json")
        assert isinstance(adapter, JsonFileConfigurationAdapter)
        assert adapter.path == tmp_path / "s.json"

    def test_settings_file_from_env(self, tmp_path, settings):
        s = dataclasses.replace(settings, settings_file=str(tmp_path / "s.json"))
        assert isinstance(build_config(s), JsonFileConfigurationAdapter)


class TestSettings:
    def test_timeout_enabled(self, settings):
        assert settings.request_timeout == 5.0

    def test_timeout_disabled(self, settings):
        assert dataclasses.replace(settings, llm_timeout=0).request_timeout is None

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "groq")
        monkeypatch.setenv("RELAY_ENABLED", "true")
        monkeypatch.setenv("CUSTOM_INSTRUCTIONS", '{"tone": "Be warm."}')
        monkeypatch.setenv("LLM_TIMEOUT", "12")
        s = Settings()
        assert s.llm_provider == "groq"
        assert s.relay_enabled is True
        assert s.custom_instructions == {"tone": "Be warm."}
        assert s.llm_timeout == 12

    def test_custom_instructions_must_be_object(self, monkeypatch):
        monkeypatch.setenv("CUSTOM_INSTRUCTIONS", '["x"]')
        with pytest.raises(ConfigurationError, match="CUSTOM_INSTRUCTIONS must be a JSON object"):
            Settings()

    def test_malformed_custom_instructions(self, monkeypatch):
        monkeypatch.setenv("CUSTOM_INSTRUCTIONS", '{"tone": ')
        with pytest.raises(ConfigurationError, match="CUSTOM_INSTRUCTIONS is not valid JSON"):
            Settings()

    def test_non_integer_timeout(self, monkeypatch):
        monkeypatch.setenv("LLM_TIMEOUT", "soon")
        with pytest.raises(ConfigurationError, match="LLM_TIMEOUT"):
            Settings()
