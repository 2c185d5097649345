"""
Codec Module - Black Box Interface

Purpose: Identifiers and session data encoding
Interface: generate_id(), hash_id(), IdentifierCodec, JsonCoder
Hidden: Random source, hash construction, wire format

The data coder can be swapped for any SessionCoder implementation.
"""

from .coder import CodecError, JsonCoder, SessionCoder, validate_value
from .identifier import DEFAULT_ENTROPY, IdentifierCodec, generate_id, hash_id

__all__ = [
    "CodecError",
    "JsonCoder",
    "SessionCoder",
    "validate_value",
    "DEFAULT_ENTROPY",
    "IdentifierCodec",
    "generate_id",
    "hash_id",
]
