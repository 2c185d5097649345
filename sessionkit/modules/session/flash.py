"""
Flash messages.

Values put in the flash survive until they are read, normally on the
next request. They live inside the session data under FLASH_KEY, so
persistence follows the session's ordinary change detection.
"""

from typing import Any, Dict, List

from ..codec import validate_value

FLASH_KEY = "_sk.flash"


class Flash:
    """Read-once view over a session's flash bucket."""

    def __init__(self, session):
        self._session = session

    def _bucket(self) -> Dict[str, List[Any]]:
        bucket = self._session.get(FLASH_KEY)
        return bucket if isinstance(bucket, dict) else {}

    def _store(self, bucket: Dict[str, List[Any]]) -> None:
        if bucket:
            self._session.set(FLASH_KEY, bucket)
        else:
            self._session.delete(FLASH_KEY)

    def set(self, key: str, value: Any) -> None:
        """Replace all values for key."""
        validate_value(value)
        bucket = self._bucket()
        bucket[key] = [value]
        self._store(bucket)

    def add(self, key: str, value: Any) -> None:
        """Append a value for key."""
        validate_value(value)
        bucket = self._bucket()
        bucket.setdefault(key, []).append(value)
        self._store(bucket)

    def values(self, key: str) -> List[Any]:
        """Consume and return every value for key."""
        bucket = self._bucket()
        values = bucket.pop(key, [])
        self._store(bucket)
        return values

    def get(self, key: str, default: Any = None) -> Any:
        """Consume all values for key and return the first one."""
        values = self.values(key)
        return values[0] if values else default

    def has(self, key: str) -> bool:
        """Check for key without consuming it."""
        return bool(self._bucket().get(key))

    def delete(self, key: str) -> None:
        bucket = self._bucket()
        if key in bucket:
            del bucket[key]
            self._store(bucket)

    def clear(self) -> None:
        self._session.delete(FLASH_KEY)

    def __len__(self) -> int:
        return sum(len(v) for v in self._bucket().values())
