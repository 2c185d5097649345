"""
Demo application data models.

Request and response bodies for the example endpoints in sessionkit.main.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


# Request Models (API Input)


class LoginRequest(BaseModel):
    """Request to log a user into the current session."""

    username: str = Field(
        ...,
        description="User name to store in the session",
        min_length=1,
        max_length=100,
    )


class FlashRequest(BaseModel):
    """Request to queue a flash message for the next request."""

    message: str = Field(..., description="Message text", min_length=1, max_length=500)
    category: str = Field(default="info", description="Message category")


# Response Models (API Output)


class CounterResponse(BaseModel):
    """Visit counter stored in the session."""

    count: Optional[int] = Field(None, description="Counter value before this request, None on first visit")
    is_new: bool = Field(..., description="Whether the session had no stored identity")


class SessionInfo(BaseModel):
    """What the current request knows about its session."""

    is_new: bool
    keys: List[str] = Field(default_factory=list)
    user: Optional[str] = None


class FlashMessage(BaseModel):
    """A flash message."""

    message: str
    category: str = "info"


class FlashResponse(BaseModel):
    """Flash messages consumed by this request."""

    messages: List[FlashMessage] = Field(default_factory=list)


class StatusResponse(BaseModel):
    """Generic status response."""

    status: str
    message: Optional[str] = None
