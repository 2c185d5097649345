"""
Attach sessions to requests and read them back.

Sessions are kept in request.state under their cookie name, so several
session middlewares with different cookie names can share one app.
"""

from typing import Callable, Optional

from fastapi import Request

from ..session import Session
from .config import DEFAULT_COOKIE_NAME


def attach_session(request: Request, session: Session) -> None:
    sessions = getattr(request.state, "sessions", None)
    if sessions is None:
        sessions = {}
        request.state.sessions = sessions
    sessions[session.cookie.name] = session


def get_session(request: Request, name: str = DEFAULT_COOKIE_NAME) -> Optional[Session]:
    """Return the request's session, or None when no middleware attached one."""
    sessions = getattr(request.state, "sessions", None)
    if not sessions:
        return None
    return sessions.get(name)


def session_dependency(name: str = DEFAULT_COOKIE_NAME) -> Callable[[Request], Optional[Session]]:
    """
    FastAPI dependency returning the named session.

    Usage:
        @app.get("/")
        async def index(session: Session = Depends(session_dependency())):
            ...
    """

    def dependency(request: Request) -> Optional[Session]:
        return get_session(request, name)

    return dependency
