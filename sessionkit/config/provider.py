"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass
from typing import Optional, Protocol


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class SessionSettings:
    """Session cookie and lifecycle settings."""
    secret: str
    cookie_name: str
    domain: Optional[str]
    path: str
    http_only: bool
    secure: str
    same_site: str
    max_age: int
    entropy: int
    disable_renew: bool
    disable_hash_id: bool
    rolling: bool
    grace_period: float
    store_timeout: Optional[float]

    def to_config(self, store):
        """Build a SessionConfig around a store."""
        from ..modules.middleware.config import SessionConfig

        return SessionConfig(
            store=store,
            secret=self.secret,
            entropy=self.entropy,
            name=self.cookie_name,
            domain=self.domain,
            path=self.path,
            http_only=self.http_only,
            max_age=self.max_age,
            secure=self.secure,
            same_site=self.same_site,
            disable_renew=self.disable_renew,
            disable_hash_id=self.disable_hash_id,
            rolling=self.rolling,
            grace_period=self.grace_period,
            store_timeout=self.store_timeout,
        )


@dataclass
class StoreSettings:
    """Session store settings."""
    backend: str
    redis_url: str
    sqlite_path: str
    sqlite_table: str
    gc_interval: float


@dataclass
class APIConfig:
    """API configuration."""
    port: int
    host: str
    log_level: str


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_session_settings(self) -> SessionSettings:
        """Get session settings."""
        ...

    def get_store_settings(self) -> StoreSettings:
        """Get store settings."""
        ...

    def get_api_config(self) -> APIConfig:
        """Get API configuration."""
        ...


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_session_settings(self) -> SessionSettings:
        """Get session settings from environment variables."""
        disable_hash_id = _env_bool("SESSION_DISABLE_HASH_ID")

        # The secret is required - no default for security
        secret = os.getenv("SESSION_SECRET", "")
        if not secret and not disable_hash_id:
            raise ValueError(
                "SESSION_SECRET environment variable is required. "
                "Generate one with: python -c 'import secrets; print(secrets.token_urlsafe(32))'"
            )

        store_timeout = os.getenv("SESSION_STORE_TIMEOUT")

        return SessionSettings(
            secret=secret,
            cookie_name=os.getenv("SESSION_COOKIE_NAME", "sess"),
            domain=os.getenv("SESSION_DOMAIN") or None,
            path=os.getenv("SESSION_PATH", "/"),
            http_only=_env_bool("SESSION_HTTP_ONLY", "true"),
            secure=os.getenv("SESSION_SECURE", "no").lower(),
            same_site=os.getenv("SESSION_SAME_SITE", "lax").lower(),
            max_age=int(os.getenv("SESSION_MAX_AGE", "86400")),
            entropy=int(os.getenv("SESSION_ENTROPY", "32")),
            disable_renew=_env_bool("SESSION_DISABLE_RENEW"),
            disable_hash_id=disable_hash_id,
            rolling=_env_bool("SESSION_ROLLING"),
            grace_period=float(os.getenv("SESSION_GRACE_PERIOD", "5")),
            store_timeout=float(store_timeout) if store_timeout else None,
        )

    def get_store_settings(self) -> StoreSettings:
        """Get store settings from environment variables."""
        return StoreSettings(
            backend=os.getenv("SESSION_STORE", "memory").lower(),
            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
            sqlite_path=os.getenv("SESSION_SQLITE_PATH", "/var/lib/sessionkit/sessions.db"),
            sqlite_table=os.getenv("SESSION_SQLITE_TABLE", "sessions"),
            gc_interval=float(os.getenv("SESSION_GC_INTERVAL", "60")),
        )

    def get_api_config(self) -> APIConfig:
        """Get API configuration from environment variables."""
        return APIConfig(
            port=int(os.getenv("API_PORT", "8080")),
            host=os.getenv("API_HOST", "0.0.0.0"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
