"""Tests for TUI onboarding flow."""

import os

import yaml

from codebuddy.config_manager import ConfigManager
from codebuddy.tui.onboarding import needs_onboarding, run_onboarding


def test_needs_onboarding_without_key(tmp_path):
    assert needs_onboarding(ConfigManager(tmp_path))["needs_api_key"] is True


def test_needs_onboarding_has_env_key(tmp_path, monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "env-key")
    assert needs_onboarding(ConfigManager(tmp_path))["needs_api_key"] is False


def test_run_onboarding_skips_when_configured(tmp_path, monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "env-key")

    def _fail_input(prompt):
        raise AssertionError("should not prompt")

    result = run_onboarding(ConfigManager(tmp_path), input_fn=_fail_input)
    assert result == {"api_key_configured": True, "skipped": True}


def test_run_onboarding_saves_entered_key(tmp_path, monkeypatch):
    cm = ConfigManager(tmp_path)

    result = run_onboarding(cm, input_fn=lambda prompt: "typed-key")

    assert result == {"api_key_configured": True, "skipped": False}
    data = yaml.safe_load(cm.config_path.read_text(encoding="utf-8"))
    assert data["api_key"] == "typed-key"
    assert os.environ["GEMINI_API_KEY"] == "typed-key"


def test_run_onboarding_allows_skipping(tmp_path):
    cm = ConfigManager(tmp_path)

    result = run_onboarding(cm, input_fn=lambda prompt: "")

    assert result == {"api_key_configured": False, "skipped": False}
    assert not cm.config_path.exists()
