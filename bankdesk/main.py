"""
Application factory.

Builds the FastAPI app, wires the database engine, session factory and
cache onto ``app.state`` and registers the error handlers that turn
``BankdeskError`` subclasses into JSON responses.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from bankdesk.api.fast_api import router
from bankdesk.cache import EphemeralCache, RedisConnection
from bankdesk.database.config.config import Settings, settings as default_settings
from bankdesk.database.core.session import build_engine, init_db, make_session_factory
from bankdesk.exceptions import BankdeskError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(config: Settings = default_settings) -> None:
    logging.basicConfig(level=config.LOG_LEVEL.upper(), format=LOG_FORMAT)


async def handle_bankdesk_error(request: Request, exc: BankdeskError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


def create_app(
    config: Settings = default_settings,
    engine: Optional[Engine] = None,
    cache: Optional[EphemeralCache] = None,
) -> FastAPI:
    """
    Create the application.

    Args:
        config: settings to use; defaults to the environment-backed singleton.
        engine: a pre-built engine (tests pass an in-memory sqlite engine).
        cache: a pre-built cache; otherwise one is built from ``REDIS_*``.
    """
    connection = None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        nonlocal connection
        app.state.settings = config
        app.state.engine = engine or build_engine(config)
        app.state.session_factory = make_session_factory(app.state.engine)
        init_db(app.state.engine)
        if cache is not None:
            app.state.cache = cache
        else:
            connection = RedisConnection(config)
            app.state.cache = EphemeralCache(
                connection.connect(verify=False),
                prefix=config.CACHE_KEY_PREFIX,
                default_ttl=config.CACHE_DEFAULT_TTL_SECONDS,
            )
        logger.info("Application started")
        try:
            yield
        finally:
            if connection is not None:
                connection.disconnect()
            if engine is None:
                app.state.engine.dispose()
            logger.info("Application stopped")

    app = FastAPI(title="bankdesk", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(BankdeskError, handle_bankdesk_error)
    app.include_router(router)
    return app


def run():
    """Entry point for ``bankdesk-serve``."""
    configure_logging()
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
