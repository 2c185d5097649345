#!/usr/bin/env python3
"""
sessionkit - Demo Application Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Builds the session store and middleware
3. Runs the API server

All session logic is in the modules, following black box principles.
"""

import logging
import logging.config as log_config
from contextlib import asynccontextmanager
from typing import Optional

import redis.asyncio as redis
import uvicorn
from fastapi import Depends, FastAPI, HTTPException

from sessionkit.config.provider import ConfigProvider, EnvConfigProvider
from sessionkit.logging_config import get_logging_config
from sessionkit.modules.api import (
    CounterResponse,
    FlashMessage,
    FlashRequest,
    FlashResponse,
    LoginRequest,
    SessionInfo,
    StatusResponse,
)
from sessionkit.modules.middleware import install_session_middleware, session_dependency
from sessionkit.modules.session import Session
from sessionkit.modules.storage import GCWorker, RedisStore, SQLStore, StoreFactory

logger = logging.getLogger(__name__)


def create_app(config_provider: Optional[ConfigProvider] = None) -> FastAPI:
    """
    Build the demo application.

    Args:
        config_provider: Configuration provider (environment by default)

    Returns:
        FastAPI app with session middleware installed
    """
    config_provider = config_provider or EnvConfigProvider()
    session_settings = config_provider.get_session_settings()
    store_settings = config_provider.get_store_settings()

    redis_client: Optional[redis.Redis] = None
    if store_settings.backend == "redis":
        redis_client = redis.from_url(store_settings.redis_url)

    store = StoreFactory.build(store_settings, redis_client)
    session_config = session_settings.to_config(store)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage application lifecycle - start and stop the store GC.
        """
        logger.info("Starting sessionkit demo API...")

        gc_worker: Optional[GCWorker] = None
        if not isinstance(store, RedisStore):
            gc_worker = GCWorker(store, store_settings.gc_interval).start()
            logger.info(f"Session GC running every {store_settings.gc_interval}s")

        yield

        logger.info("Shutting down sessionkit demo API...")
        if gc_worker:
            await gc_worker.stop()
        if isinstance(store, SQLStore):
            store.close()
        if redis_client:
            await redis_client.aclose()
        logger.info("sessionkit demo API shutdown complete")

    app = FastAPI(
        title="sessionkit demo",
        description="Server-side sessions with hashed ids, renewal and flash messages",
        version="1.0.0",
        lifespan=lifespan,
    )
    install_session_middleware(app, session_config)

    current = session_dependency(session_config.name)

    async def require_session(session: Optional[Session] = Depends(current)) -> Session:
        if session is None:
            raise HTTPException(503, "Session middleware not installed")
        return session

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    @app.get("/counter", response_model=CounterResponse)
    async def counter(session: Session = Depends(require_session)):
        """First visit stores 0; each later visit reports the value, then increments it."""
        is_new = session.is_new
        if "counter" not in session:
            session.set("counter", 0)
            return CounterResponse(count=None, is_new=is_new)

        count = session.get_int("counter")
        session.set("counter", count + 1)
        return CounterResponse(count=count, is_new=is_new)

    @app.post("/login", response_model=StatusResponse)
    async def login(request: LoginRequest, session: Session = Depends(require_session)):
        # Privilege change: issue a new id so a planted cookie is worthless
        session.set("user", request.username)
        session.rotate()
        return StatusResponse(status="success", message=f"Logged in as {request.username}")

    @app.post("/logout", response_model=StatusResponse)
    async def logout(session: Session = Depends(require_session)):
        session.destroy()
        return StatusResponse(status="success", message="Logged out")

    @app.post("/flash", response_model=StatusResponse)
    async def add_flash(request: FlashRequest, session: Session = Depends(require_session)):
        session.flash().add("messages", {"message": request.message, "category": request.category})
        return StatusResponse(status="queued")

    @app.get("/flash", response_model=FlashResponse)
    async def read_flash(session: Session = Depends(require_session)):
        messages = [FlashMessage(**m) for m in session.flash().values("messages")]
        return FlashResponse(messages=messages)

    @app.get("/session", response_model=SessionInfo)
    async def session_info(session: Session = Depends(require_session)):
        return SessionInfo(
            is_new=session.is_new,
            keys=session.keys(),
            user=session.get("user"),
        )

    return app


def main() -> None:
    """Run the demo API with uvicorn."""
    config_provider = EnvConfigProvider()
    api_config = config_provider.get_api_config()
    session_settings = config_provider.get_session_settings()

    log_config.dictConfig(get_logging_config(api_config.log_level, session_settings.cookie_name))

    uvicorn.run(
        create_app(config_provider),
        host=api_config.host,
        port=api_config.port,
        log_config=get_logging_config(api_config.log_level, session_settings.cookie_name),
    )


if __name__ == "__main__":
    main()
