from __future__ import annotations  # FastAPI server exposing the interview session API

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agents.gateway_models import bind_gateway_models
from api.routes import live_sessions, router
from config import load_config
from config.settings import settings

logger = logging.getLogger(__name__)

CONFIG_PATH = Path(__file__).resolve().parent / settings.CONFIG_PATH


def _bind_models() -> None:  # Wire agent keys to the configured LLM routes
    try:
        cfg = load_config(CONFIG_PATH)
    except FileNotFoundError:
        logger.warning("LLM config not found at %s; agent models left unbound", CONFIG_PATH)
        return
    bind_gateway_models(cfg)


@asynccontextmanager
async def _lifespan(_: FastAPI) -> AsyncIterator[None]:
    _bind_models()
    yield
    live_sessions.clear()


def create_app(*, bind_models: bool = True) -> FastAPI:  # Build the ASGI app
    app = FastAPI(title="Interview Coach API", lifespan=_lifespan if bind_models else None)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app


app = create_app()
