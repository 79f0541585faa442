# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

from bridge_core.config import BridgeConfig
from bridge_core.runtime_config import EngineRuntimeConfig


def test_verification_timeouts_default(monkeypatch):
    monkeypatch.delenv("BRIDGE_VERIFY_HEAD_TIMEOUT", raising=False)
    monkeypatch.delenv("BRIDGE_VERIFY_GET_TIMEOUT", raising=False)
    cfg = EngineRuntimeConfig.load_from_env()
    assert cfg.verification.head_timeout_sec == 8.0
    assert cfg.verification.get_timeout_sec == 10.0


def test_batch_size_is_clamped(monkeypatch):
    monkeypatch.setenv("BRIDGE_BATCH_SIZE", "999")
    cfg = EngineRuntimeConfig.load_from_env()
    assert cfg.batch.batch_size == 10

    monkeypatch.setenv("BRIDGE_BATCH_SIZE", "0")
    cfg2 = EngineRuntimeConfig.load_from_env()
    assert cfg2.batch.batch_size == 1


def test_garbage_env_values_fall_back(monkeypatch):
    monkeypatch.setenv("BRIDGE_BATCH_DELAY", "soon")
    monkeypatch.setenv("BRIDGE_TRACE_ENABLED", "maybe")
    cfg = EngineRuntimeConfig.load_from_env()
    assert cfg.batch.delay_sec == 1.0
    assert cfg.features.trace_enabled is True


def test_feature_flags_parse_falsey_strings(monkeypatch):
    monkeypatch.setenv("BRIDGE_JSON_REPAIR", "off")
    cfg = EngineRuntimeConfig.load_from_env()
    assert cfg.features.json_repair is False


def test_safe_log_dict_has_no_secrets(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-secret")
    cfg = EngineRuntimeConfig.load_from_env()
    dumped = repr(cfg.to_safe_log_dict())
    assert "sk-secret" not in dumped
    assert cfg.to_safe_log_dict()["llm"]["timeout_sec"] == 60.0


def test_bridge_config_reads_env(monkeypatch):
    monkeypatch.setenv("BRIDGE_OPENAI_API_KEY", "test-key")
    monkeypatch.setenv("BRIDGE_FOCUS_MODE", "deal_hunter")
    monkeypatch.setenv("BRIDGE_ANALYSIS_MODEL", "fast")
    config = BridgeConfig.from_env()
    assert config.openai_api_key == "test-key"
    assert config.analysis.focus_mode.value == "DEAL_HUNTER"
    assert config.analysis.analysis_model.value == "fast"
    assert config.runtime.verification.head_timeout_sec == 8.0
