"""Store interfaces following Black Box Design principles."""
from dataclasses import dataclass
from typing import Optional, Protocol


class NotFoundError(LookupError):
    """Key is absent or expired."""

    def __init__(self, key: str):
        super().__init__(f"Session key not found: {key[:8]}...")
        self.key = key


@dataclass(frozen=True)
class StoreOption:
    """Options passed to Store.get."""
    ttl: float = 0
    rolling: bool = False

    @property
    def extends_ttl(self) -> bool:
        """Whether a successful get should push the expiry forward."""
        return self.rolling and self.ttl > 0


class Store(Protocol):
    """Protocol for session stores - allows swappable backends."""

    async def get(self, key: str, opt: Optional[StoreOption] = None) -> bytes:
        """
        Get a record.

        Args:
            key: Storage key
            opt: Rolling expiry options

        Returns:
            Stored payload

        Raises:
            NotFoundError: If absent or expired
        """
        ...

    async def set(self, key: str, value: bytes, ttl: float) -> None:
        """
        Upsert a record.

        Args:
            key: Storage key
            value: Payload
            ttl: Seconds to live; <= 0 means no expiry
        """
        ...

    async def touch(self, key: str, ttl: float) -> None:
        """
        Reset the expiry of a live record without rewriting its payload.

        Args:
            key: Storage key
            ttl: Seconds to live from now; <= 0 means no expiry

        Absent or expired keys are left alone.
        """
        ...

    async def delete(self, key: str) -> None:
        """Delete a record. Deleting an absent key is not an error."""
        ...

    async def gc(self) -> int:
        """Remove expired records, returning how many were removed."""
        ...
