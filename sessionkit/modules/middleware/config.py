"""Session middleware configuration."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from ..codec import DEFAULT_ENTROPY, JsonCoder, SessionCoder
from ..session import DEFAULT_GRACE_PERIOD

DEFAULT_COOKIE_NAME = "sess"


class SecureMode(str, Enum):
    """How the cookie Secure flag is decided."""

    NO = "no"
    FORCE = "force"
    PREFER = "prefer"  # Secure only when the request arrived over TLS


@dataclass
class SessionConfig:
    """
    Session middleware configuration.

    A store is mandatory; so is a secret unless id hashing is disabled.
    Both are checked at construction because every request would fail
    without them.
    """
    store: Any = None
    secret: Union[bytes, str] = b""
    entropy: int = DEFAULT_ENTROPY
    name: str = DEFAULT_COOKIE_NAME
    domain: Optional[str] = None
    path: str = "/"
    http_only: bool = True
    max_age: int = 0
    secure: SecureMode = SecureMode.NO
    same_site: Optional[str] = "lax"
    disable_renew: bool = False
    disable_hash_id: bool = False
    rolling: bool = False
    grace_period: float = DEFAULT_GRACE_PERIOD
    store_timeout: Optional[float] = None
    coder: SessionCoder = field(default_factory=JsonCoder)

    def __post_init__(self) -> None:
        if self.store is None:
            raise ValueError("session: store is required")

        if isinstance(self.secret, str):
            self.secret = self.secret.encode("utf-8")
        if not self.secret and not self.disable_hash_id:
            raise ValueError(
                "session: secret is required when id hashing is enabled. "
                "Set a secret or pass disable_hash_id=True."
            )

        if self.entropy <= 0:
            self.entropy = DEFAULT_ENTROPY
        if not self.name:
            self.name = DEFAULT_COOKIE_NAME
        if not isinstance(self.secure, SecureMode):
            self.secure = SecureMode(self.secure)
        if self.grace_period <= 0:
            raise ValueError("session: grace_period must be positive")
