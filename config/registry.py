"""Keyed callables that back the interview agents.

Production binds the LLM gateway here at startup; tests bind scripted fakes.
Bound callables are invoked with keyword arguments (``task``, ``schema``,
``images``) and may return a model, a dict, or an awaitable of either.
"""
from typing import Any, Callable, Dict

ModelFn = Callable[..., Any]

AGENT_KEY = "models.interview_agent"
ICE_BREAKER_KEY = "models.ice_breaker"

_REGISTRY: Dict[str, ModelFn] = {}


def bind_model(key: str, fn: ModelFn) -> None:
    _REGISTRY[key] = fn


def get_model(key: str) -> ModelFn:
    """Return the callable bound to ``key``.

    Raises:
        KeyError: If nothing is bound for ``key``.
    """

    try:
        return _REGISTRY[key]
    except KeyError:
        raise KeyError(f"Model not bound in registry: {key}") from None


def unbind_model(key: str) -> None:
    _REGISTRY.pop(key, None)
