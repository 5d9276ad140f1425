# main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from adapters.entry.http.views.rebalance_view import router as rebalance_router
from adapters.entry.http.views.swap_view import router as swap_router
from config import get_settings


def configure_logging() -> None:
    s = get_settings()
    logging.basicConfig(
        level=getattr(logging, (s.LOG_LEVEL or "INFO").upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan context.

    Logging is configured once on startup. Chain connections are built per
    request from settings, so there is nothing to tear down.
    """
    configure_logging()
    logging.getLogger(__name__).info("croc planner api starting env=%s", get_settings().ENV)
    yield


def create_app() -> FastAPI:
    """
    Application factory for the Croc planner API.

    Exposes swap quoting/execution and out-of-range rebalance planning.
    """
    app = FastAPI(
        title="Croc Planner API",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(swap_router, prefix="/api")
    app.include_router(rebalance_router, prefix="/api")

    return app


app = create_app()
