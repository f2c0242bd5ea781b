import pytest


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch):
    """Keep real keys and .env files out of every test."""
    # setenv first so monkeypatch restores the original value even when a
    # test (or save_api_key) sets the variable later.
    for name in ("GEMINI_API_KEY", "CODEBUDDY_DEBUG"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.setattr("codebuddy.config_manager.load_dotenv", lambda *a, **k: False)
