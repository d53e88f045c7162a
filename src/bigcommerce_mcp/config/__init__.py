"""Configuration loading and validation."""

from bigcommerce_mcp.config.loader import load_config
from bigcommerce_mcp.config.schema import (
    AppConfig,
    BigCommerceConfig,
    LoggingConfig,
    ServerConfig,
)

__all__ = [
    "AppConfig",
    "BigCommerceConfig",
    "LoggingConfig",
    "ServerConfig",
    "load_config",
]
