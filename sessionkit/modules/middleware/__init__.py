"""
Session Middleware Module - Black Box Interface

Purpose: Run the session lifecycle around every request
Interface: SessionMiddleware, install_session_middleware(), get_session()
Hidden: Cookie handling, id hashing, store calls, commit execution

Per request: read the cookie, load the session from the store, attach it
to the request, call the endpoint, then commit the session and write the
cookie. The commit runs even when the endpoint raises.
"""

import asyncio
import logging
import time
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..codec import CodecError, IdentifierCodec
from ..session import CommitPlan, CookieOptions, Session
from ..storage import NotFoundError, StoreOption
from .config import DEFAULT_COOKIE_NAME, SecureMode, SessionConfig
from .context import attach_session, get_session, session_dependency

logger = logging.getLogger(__name__)


class SessionMiddleware:
    """
    Session lifecycle middleware for FastAPI applications.

    Register with:
        app.middleware("http")(SessionMiddleware(config))
    """

    def __init__(self, config: SessionConfig):
        """
        Initialize session middleware.

        Args:
            config: Validated SessionConfig (store and secret already checked)
        """
        self.config = config
        self.store = config.store
        self.ids = IdentifierCodec(
            secret=config.secret,
            entropy=config.entropy,
            disable_hash=config.disable_hash_id,
        )
        # Wall clock for renewal timestamps
        self.clock: Callable[[], float] = time.time

    @staticmethod
    def is_tls(request: Request) -> bool:
        """Check whether the request arrived over TLS, directly or via a proxy."""
        if request.url.scheme == "https":
            return True
        proto = request.headers.get("x-forwarded-proto", "")
        return proto.split(",")[0].strip().lower() == "https"

    def cookie_options(self, request: Request) -> CookieOptions:
        """Build cookie attributes for this request."""
        mode = self.config.secure
        secure = mode is SecureMode.FORCE or (mode is SecureMode.PREFER and self.is_tls(request))
        return CookieOptions(
            name=self.config.name,
            domain=self.config.domain,
            path=self.config.path,
            http_only=self.config.http_only,
            secure=secure,
            max_age=self.config.max_age,
            same_site=self.config.same_site,
        )

    def new_session(self, request: Request) -> Session:
        return Session(
            self.cookie_options(request),
            coder=self.config.coder,
            id_factory=self.ids.generate,
            disable_renew=self.config.disable_renew,
        )

    async def _store_call(self, coro):
        """Await a store call, bounded by store_timeout when configured."""
        if self.config.store_timeout is None:
            return await coro
        return await asyncio.wait_for(coro, self.config.store_timeout)

    async def load(self, request: Request, session: Session) -> None:
        """
        Populate the session from the store using the request cookie.

        A missing cookie, an unknown key or an undecodable payload all leave
        the session fresh. The cookie value is never adopted unless the store
        knows it, which is what stops fixation.
        """
        client_id = request.cookies.get(self.config.name)
        if not client_id:
            return

        key = self.ids.storage_key(client_id)
        try:
            payload = await self._store_call(self.store.get(key, StoreOption(ttl=self.config.max_age)))
        except NotFoundError:
            logger.debug(f"Session {key[:8]}... not found, starting fresh")
            return

        try:
            session.load(client_id, payload)
        except CodecError as e:
            logger.warning(f"Discarding undecodable session {key[:8]}...: {e}")
            return

        if self.config.rolling and self.config.max_age > 0 and not session.retiring:
            await self.extend(key)

    async def extend(self, key: str) -> None:
        """Push a live session's expiry forward by max_age. Failures are logged."""
        try:
            await self._store_call(self.store.touch(key, self.config.max_age))
        except Exception:
            logger.exception(f"Failed to extend session {key[:8]}...")

    async def persist(self, plan: CommitPlan) -> None:
        """Execute a commit plan. Failures are logged, never raised."""
        if plan.delete_id:
            key = self.ids.storage_key(plan.delete_id)
            try:
                await self._store_call(self.store.delete(key))
                logger.debug(f"Session {key[:8]}... destroyed")
            except Exception:
                logger.exception(f"Failed to delete session {key[:8]}...")

        for write in plan.writes:
            key = self.ids.storage_key(write.client_id)
            try:
                await self._store_call(self.store.set(key, write.payload, write.ttl))
            except Exception:
                logger.exception(f"Failed to save session {key[:8]}...")

    async def commit(self, session: Session) -> Optional[CommitPlan]:
        """Commit the session and persist the result."""
        try:
            plan = session.commit(now=self.clock(), grace_period=self.config.grace_period)
        except (TypeError, ValueError):
            logger.exception("Failed to encode session data")
            return None
        await self.persist(plan)
        return plan

    def write_cookie(self, response, session: Session, plan: CommitPlan) -> None:
        """Emit Set-Cookie only when the client-visible id changed or must be cleared."""
        cookie = session.cookie
        if plan.clear_cookie:
            response.delete_cookie(
                cookie.name,
                path=cookie.path,
                domain=cookie.domain,
                secure=cookie.secure,
                httponly=cookie.http_only,
                samesite=cookie.same_site,
            )
        elif plan.cookie_value:
            response.set_cookie(
                cookie.name,
                plan.cookie_value,
                max_age=cookie.max_age if cookie.max_age > 0 else None,
                path=cookie.path,
                domain=cookie.domain,
                secure=cookie.secure,
                httponly=cookie.http_only,
                samesite=cookie.same_site,
            )

    def format_error(self, status_code: int, message: str) -> Dict[str, Any]:
        return {"error": message, "status": status_code}

    async def __call__(self, request: Request, call_next):
        """Process the request through the session lifecycle."""
        session = self.new_session(request)

        try:
            await self.load(request, session)
        except Exception as e:
            logger.error(f"Error loading session: {e}")
            return JSONResponse(
                status_code=500,
                content=self.format_error(500, "Internal error loading session"),
            )

        attach_session(request, session)

        response = None
        plan = None
        try:
            response = await call_next(request)
        finally:
            plan = await self.commit(session)

        if plan is not None:
            self.write_cookie(response, session, plan)
        return response


def create_session_middleware(config: SessionConfig) -> SessionMiddleware:
    """
    Factory function to create session middleware.

    Args:
        config: Session configuration

    Returns:
        Configured SessionMiddleware instance
    """
    return SessionMiddleware(config)


def install_session_middleware(app: FastAPI, config: SessionConfig) -> SessionMiddleware:
    """Create session middleware and register it on an app."""
    middleware = create_session_middleware(config)

    @app.middleware("http")
    async def session_lifecycle(request: Request, call_next):
        return await middleware(request, call_next)

    return middleware


# Module interface - what this module provides
__all__ = [
    "SessionMiddleware",
    "SessionConfig",
    "SecureMode",
    "DEFAULT_COOKIE_NAME",
    "create_session_middleware",
    "install_session_middleware",
    "attach_session",
    "get_session",
    "session_dependency",
]
