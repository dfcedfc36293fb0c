"""Bind registry model keys to the LLM gateway behind credential failover."""
from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional, Sequence, Type

from pydantic import BaseModel

from config import AppConfig, LlmRoute, resolve_route
from config.registry import AGENT_KEY, ICE_BREAKER_KEY, bind_model
from llm_gateway import CredentialPool, HttpClient, call, dispatch

logger = logging.getLogger(__name__)

GATEWAY_KEYS = (AGENT_KEY, ICE_BREAKER_KEY)


def gateway_model(
    route: LlmRoute,
    pool: CredentialPool,
    client: Optional[HttpClient] = None,
) -> Callable[..., Awaitable[BaseModel]]:
    """Wrap one route as a registry callable that fails over across ``pool``."""

    async def _invoke(*, task: str, schema: Type[BaseModel], images: Sequence[str] = (), **_: Any) -> BaseModel:
        async def _attempt(api_key: str) -> BaseModel:
            return await call(task, schema, cfg=route, api_key=api_key, images=images, client=client)

        return await dispatch(pool, _attempt)

    return _invoke


def bind_gateway_models(cfg: AppConfig, *, client: Optional[HttpClient] = None) -> None:
    """Bind every agent key listed in the config registry to its route."""

    for key in GATEWAY_KEYS:
        route = resolve_route(cfg, key)
        pool = CredentialPool.from_env(route.api_key_envs)
        if not len(pool):
            logger.warning("No credentials available for %s (route=%s)", key, route.name)
        bind_model(key, gateway_model(route, pool, client))
        logger.info("Bound %s to route=%s credentials=%d", key, route.name, len(pool))


__all__ = ["GATEWAY_KEYS", "bind_gateway_models", "gateway_model"]
