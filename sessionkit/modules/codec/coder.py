"""
Session data coder.

Session values form a closed set: str, bool, int, float, None, and lists
or str-keyed dicts of those. Anything else is rejected when it is put into
a session, not when the session is saved at the end of the request.
"""

import json
from typing import Any, Dict, Protocol


class CodecError(ValueError):
    """Stored payload could not be decoded."""


_SCALARS = (str, bool, int, float, type(None))


def validate_value(value: Any) -> None:
    """
    Check that a value can be stored in a session.

    Raises:
        TypeError: If the value (or a nested value) is not supported
    """
    if isinstance(value, _SCALARS):
        return
    if isinstance(value, list):
        for item in value:
            validate_value(item)
        return
    if isinstance(value, dict):
        for k, v in value.items():
            if not isinstance(k, str):
                raise TypeError(f"Session dict keys must be str, got {type(k).__name__}")
            validate_value(v)
        return
    raise TypeError(f"Unsupported session value type: {type(value).__name__}")


class SessionCoder(Protocol):
    """Protocol for session data serializers."""

    def encode(self, data: Dict[str, Any]) -> bytes:
        ...

    def decode(self, payload: bytes) -> Dict[str, Any]:
        ...


class JsonCoder:
    """
    Canonical JSON coder.

    Output is deterministic (sorted keys, no whitespace) so two encodings of
    equal data compare equal byte for byte. An empty mapping encodes to
    b"" so that untouched anonymous sessions have nothing to persist.
    """

    def encode(self, data: Dict[str, Any]) -> bytes:
        if not data:
            return b""
        return json.dumps(data, sort_keys=True, separators=(",", ":")).encode("utf-8")

    def decode(self, payload: bytes) -> Dict[str, Any]:
        if not payload:
            return {}
        try:
            data = json.loads(payload)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CodecError(f"Invalid session payload: {e}") from e
        if not isinstance(data, dict):
            raise CodecError(f"Session payload must be an object, got {type(data).__name__}")
        return data
