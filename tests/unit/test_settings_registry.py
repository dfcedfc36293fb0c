from pathlib import Path

import pytest

from config import load_config, resolve_route
from config.registry import AGENT_KEY, ICE_BREAKER_KEY, bind_model, get_model, unbind_model
from config.settings import Settings

ROOT = Path(__file__).resolve().parents[2]


def test_settings_defaults():
    settings = Settings(_env_file=None)
    assert settings.DB_PATH.endswith(".db")
    assert settings.SILENCE_WINDOW_SECONDS == 2.0
    assert settings.OPENING_QUESTION == "Tell me about yourself."


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("SILENCE_WINDOW_SECONDS", "3.5")
    assert Settings(_env_file=None).SILENCE_WINDOW_SECONDS == 3.5


def test_registry_bind_and_retrieve():
    marker = object()
    bind_model(AGENT_KEY, lambda **_: marker)
    try:
        assert get_model(AGENT_KEY)() is marker
    finally:
        unbind_model(AGENT_KEY)
    with pytest.raises(KeyError):
        get_model(AGENT_KEY)


def test_shipped_config_routes_both_agents():
    cfg = load_config(ROOT / "app_config.json")
    agent_route = resolve_route(cfg, AGENT_KEY)
    assert resolve_route(cfg, ICE_BREAKER_KEY) is agent_route
    assert agent_route.api_key_envs
