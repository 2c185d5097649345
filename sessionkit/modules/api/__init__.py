"""
API Module - Black Box Interface

Purpose: Request/response models for the demo application
Interface: pydantic models
Hidden: Validation rules

The API module only describes data - it contains no session logic.
"""

from .models import (
    CounterResponse,
    FlashMessage,
    FlashRequest,
    FlashResponse,
    LoginRequest,
    SessionInfo,
    StatusResponse,
)

__all__ = [
    "CounterResponse",
    "FlashMessage",
    "FlashRequest",
    "FlashResponse",
    "LoginRequest",
    "SessionInfo",
    "StatusResponse",
]
