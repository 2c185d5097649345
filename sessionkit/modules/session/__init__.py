"""
Session Module - Black Box Interface

Purpose: Hold one request's session data and decide what to persist
Interface: Session.get()/set()/delete()/rotate()/destroy()/commit(), Flash
Hidden: Dirty tracking, renewal policy, reserved data entries

The session entity never touches a store; the middleware executes the
CommitPlan it returns.
"""

from .flash import FLASH_KEY, Flash
from .session import (
    DEFAULT_GRACE_PERIOD,
    RENEW_DISABLED,
    TIMESTAMP_KEY,
    CommitPlan,
    CookieOptions,
    Mark,
    Session,
    StoreWrite,
)

__all__ = [
    "Session",
    "Mark",
    "CookieOptions",
    "CommitPlan",
    "StoreWrite",
    "Flash",
    "FLASH_KEY",
    "TIMESTAMP_KEY",
    "RENEW_DISABLED",
    "DEFAULT_GRACE_PERIOD",
]
