"""
Session identifier generation and hashing.

The client only ever sees the generated identifier. Stores are keyed by
a hash of that identifier and a server secret, so a leaked cookie value
does not reveal a storage key and a store dump does not reveal cookies.
"""

import base64
import hashlib
import logging
import secrets

logger = logging.getLogger(__name__)

DEFAULT_ENTROPY = 32


def _encode(raw: bytes) -> str:
    """URL-safe base64 without padding."""
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def generate_id(entropy: int = DEFAULT_ENTROPY) -> str:
    """
    Generate a new client-visible session identifier.

    Args:
        entropy: Number of random bytes to draw

    Returns:
        URL-safe identifier string

    Raises:
        OSError, NotImplementedError: If the OS random source is unavailable.
            This is never recovered from; a session without a secure id is
            worse than no session at all.
    """
    try:
        raw = secrets.token_bytes(entropy)
    except (OSError, NotImplementedError) as e:
        logger.critical(f"Secure random source unavailable: {e}")
        raise
    return _encode(raw)


def hash_id(client_id: str, secret: bytes) -> str:
    """
    Derive the storage key for a client identifier.

    Args:
        client_id: Identifier from the cookie
        secret: Server secret mixed into the hash

    Returns:
        SHA-256 digest, encoded like identifiers
    """
    h = hashlib.sha256()
    h.update(client_id.encode("utf-8"))
    h.update(secret)
    return _encode(h.digest())


class IdentifierCodec:
    """Generates identifiers and maps them to storage keys."""

    def __init__(self, secret: bytes = b"", entropy: int = DEFAULT_ENTROPY, disable_hash: bool = False):
        """
        Initialize identifier codec.

        Args:
            secret: Server secret used for hashing
            entropy: Random bytes per identifier
            disable_hash: Use the client identifier verbatim as storage key
        """
        self.secret = secret
        self.entropy = entropy if entropy > 0 else DEFAULT_ENTROPY
        self.disable_hash = disable_hash

    def generate(self) -> str:
        return generate_id(self.entropy)

    def storage_key(self, client_id: str) -> str:
        if self.disable_hash:
            return client_id
        return hash_id(client_id, self.secret)
