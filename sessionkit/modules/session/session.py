"""
Per-request session entity.

A Session is created by the middleware for every request, handed to the
endpoint, and committed once after the endpoint returns. It never talks to
a store: commit() returns a CommitPlan describing the store writes and the
cookie, and the middleware carries it out.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ..codec import JsonCoder, SessionCoder, generate_id, validate_value
from .flash import FLASH_KEY, Flash

logger = logging.getLogger(__name__)

# Reserved data entry holding the Unix time of the last id renewal
TIMESTAMP_KEY = "_sk.ts"
RENEW_DISABLED = -1
RESERVED_KEYS = frozenset({TIMESTAMP_KEY, FLASH_KEY})

# Seconds the retiring storage key stays readable after a rotation
DEFAULT_GRACE_PERIOD = 5.0


class Mark(str, Enum):
    """What should happen to the session at the end of the request."""

    NONE = "none"
    SAVE = "save"
    ROTATE = "rotate"
    DESTROY = "destroy"


@dataclass(frozen=True)
class CookieOptions:
    """Cookie attributes, fixed for the lifetime of a request."""
    name: str = "sess"
    domain: Optional[str] = None
    path: str = "/"
    http_only: bool = True
    secure: bool = False
    max_age: int = 0  # seconds; <= 0 means browser-session cookie, no store expiry
    same_site: Optional[str] = "lax"


@dataclass
class StoreWrite:
    """One record to write, keyed by client id (the middleware hashes it)."""
    client_id: str
    payload: bytes
    ttl: float


@dataclass
class CommitPlan:
    """Everything the middleware must do once the endpoint has returned."""
    writes: List[StoreWrite] = field(default_factory=list)
    delete_id: Optional[str] = None
    cookie_value: Optional[str] = None
    clear_cookie: bool = False

    @property
    def empty(self) -> bool:
        return (
            not self.writes
            and self.delete_id is None
            and self.cookie_value is None
            and not self.clear_cookie
        )


class Session:
    """
    Session data for one request.

    Endpoints use get/set/delete/pop for data and rotate()/destroy() to
    change the session's identity. rotate() and destroy() are mutually
    exclusive; whichever is called last wins.
    """

    def __init__(
        self,
        cookie: Optional[CookieOptions] = None,
        *,
        coder: Optional[SessionCoder] = None,
        id_factory: Callable[[], str] = generate_id,
        disable_renew: bool = False,
    ):
        """
        Initialize an empty session.

        Args:
            cookie: Cookie attributes for this request
            coder: Session data serializer
            id_factory: Generates new client ids
            disable_renew: Never rotate the id automatically
        """
        self.cookie = cookie or CookieOptions()
        self.disable_renew = disable_renew
        self._coder = coder or JsonCoder()
        self._id_factory = id_factory

        self._id = ""
        self._old_id = ""
        self._data: Optional[Dict[str, Any]] = None
        self._raw = b""
        self._mark = Mark.NONE
        self._flash: Optional[Flash] = None

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def load(self, client_id: str, payload: bytes) -> None:
        """
        Populate the session from a stored record.

        Raises:
            CodecError: If the payload cannot be decoded; the session is
                left empty and anonymous.
        """
        data = self._coder.decode(payload)
        self._data = data
        # Re-encode so change detection compares canonical forms
        self._raw = self._coder.encode(data)
        self._id = client_id

    # -------------------------------------------------------------------------
    # Identity
    # -------------------------------------------------------------------------

    @property
    def id(self) -> str:
        """Client-visible id; empty for a session that was never saved."""
        return self._id

    @property
    def old_id(self) -> str:
        return self._old_id

    @property
    def is_new(self) -> bool:
        return not self._id

    @property
    def retiring(self) -> bool:
        """True for an old id kept alive only for the grace window after a rotation."""
        return self.get(TIMESTAMP_KEY) == RENEW_DISABLED

    @property
    def mark(self) -> Mark:
        return self._mark

    def rotate(self) -> None:
        """Issue a new id at the end of the request, keeping the data."""
        if self._mark is Mark.DESTROY:
            logger.debug("Session rotate() overrides earlier destroy()")
        self._mark = Mark.ROTATE

    def destroy(self) -> None:
        """Delete the session at the end of the request and clear the cookie."""
        if self._mark is Mark.ROTATE:
            logger.debug("Session destroy() overrides earlier rotate()")
        self._mark = Mark.DESTROY

    # -------------------------------------------------------------------------
    # Data
    # -------------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        if self._data is None:
            return default
        return self._data.get(key, default)

    def get_str(self, key: str) -> str:
        value = self.get(key)
        return value if isinstance(value, str) else ""

    def get_int(self, key: str) -> int:
        value = self.get(key)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return 0

    def get_float(self, key: str) -> float:
        value = self.get(key)
        if isinstance(value, bool):
            return 0.0
        if isinstance(value, (int, float)):
            return float(value)
        return 0.0

    def get_bool(self, key: str) -> bool:
        value = self.get(key)
        return value if isinstance(value, bool) else False

    def set(self, key: str, value: Any) -> None:
        """
        Store a value.

        Raises:
            TypeError: If key is not a str or value is not storable
        """
        if not isinstance(key, str):
            raise TypeError(f"Session keys must be str, got {type(key).__name__}")
        validate_value(value)
        if self._data is None:
            self._data = {}
        self._data[key] = value

    def delete(self, key: str) -> None:
        if self._data is None:
            return
        self._data.pop(key, None)

    def pop(self, key: str, default: Any = None) -> Any:
        """Remove key and return its value."""
        if self._data is None:
            return default
        return self._data.pop(key, default)

    def keys(self) -> List[str]:
        """Application keys, without reserved entries."""
        if self._data is None:
            return []
        return [k for k in self._data if k not in RESERVED_KEYS]

    def __contains__(self, key: str) -> bool:
        return self._data is not None and key in self._data

    def flash(self) -> Flash:
        if self._flash is None:
            self._flash = Flash(self)
        return self._flash

    # -------------------------------------------------------------------------
    # Commit
    # -------------------------------------------------------------------------

    def should_renew(self, now: float) -> bool:
        """
        Decide whether the id is old enough to be rotated automatically.

        Renewal happens once half of max_age has elapsed since the last
        renewal, so an id lives at most about max_age.
        """
        if self.disable_renew or self.cookie.max_age <= 0:
            return False
        if self.retiring:
            return False
        ts = self.get(TIMESTAMP_KEY)
        if not isinstance(ts, (int, float)) or ts <= 0:
            return True
        return now - ts >= self.cookie.max_age / 2

    def _encode(self) -> bytes:
        return self._coder.encode(self._data or {})

    def _stamp(self, value: int) -> None:
        if self._data is None:
            self._data = {}
        self._data[TIMESTAMP_KEY] = value

    def commit(self, now: Optional[float] = None, grace_period: float = DEFAULT_GRACE_PERIOD) -> CommitPlan:
        """
        Decide what to persist at the end of the request.

        Args:
            now: Unix time (defaults to time.time())
            grace_period: Seconds the old key stays valid after a rotation

        Returns:
            CommitPlan for the middleware to execute
        """
        now = int(time.time() if now is None else now)
        ttl = self.cookie.max_age if self.cookie.max_age > 0 else 0
        plan = CommitPlan()

        if self._mark is Mark.DESTROY:
            if self._id:
                plan.delete_id = self._id
            plan.clear_cookie = True
            return plan

        encoded = self._encode()
        changed = encoded != self._raw
        if not changed and not self._id:
            # Nothing seen, nothing saved: anonymous traffic leaves no trace
            return plan

        if self._id and self.should_renew(now):
            self._mark = Mark.ROTATE

        if self._mark is Mark.ROTATE:
            if self._id:
                self._old_id = self._id
                self._stamp(RENEW_DISABLED)
                plan.writes.append(StoreWrite(self._old_id, self._encode(), grace_period))
            self._id = ""
        elif changed:
            self._mark = Mark.SAVE

        if self._id:
            if self._mark is Mark.SAVE:
                if not self.get(TIMESTAMP_KEY):
                    self._stamp(now)
                # A retiring id never outlives its grace window, even when written to
                write_ttl = grace_period if self.retiring else ttl
                plan.writes.append(StoreWrite(self._id, self._encode(), write_ttl))
            return plan

        self._id = self._id_factory()
        self._stamp(now)
        plan.writes.append(StoreWrite(self._id, self._encode(), ttl))
        plan.cookie_value = self._id
        return plan
