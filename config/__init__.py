"""Configuration package for the interview orchestration service."""
from .registry import AGENT_KEY, ICE_BREAKER_KEY, bind_model, get_model, unbind_model
from .routes import AppConfig, LlmRoute, load_config, resolve_route
from .settings import Settings, settings

__all__ = [
    "AppConfig",
    "LlmRoute",
    "load_config",
    "resolve_route",
    "AGENT_KEY",
    "ICE_BREAKER_KEY",
    "bind_model",
    "get_model",
    "unbind_model",
    "Settings",
    "settings",
]
