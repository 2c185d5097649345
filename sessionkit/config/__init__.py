"""
Config Module - Black Box Interface

Purpose: Application configuration management
Interface: ConfigProvider, EnvConfigProvider
Hidden: Config sources, environment parsing

Can be replaced with any provider implementing ConfigProvider.
"""

from .provider import APIConfig, ConfigProvider, EnvConfigProvider, SessionSettings, StoreSettings

__all__ = ["APIConfig", "ConfigProvider", "EnvConfigProvider", "SessionSettings", "StoreSettings"]
