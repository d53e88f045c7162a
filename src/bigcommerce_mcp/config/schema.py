"""Pydantic models for bigcommerce-mcp configuration."""

from __future__ import annotations

from pydantic import BaseModel, Field


class BigCommerceConfig(BaseModel):
    """Upstream BigCommerce API settings."""

    store_hash: str | None = None
    store_hash_env: str = "BIGCOMMERCE_STORE_HASH"
    api_key: str | None = None
    api_key_env: str = "BIGCOMMERCE_API_KEY"
    base_url: str = "https://api.bigcommerce.com/stores"
    timeout: float = 30.0


class ServerConfig(BaseModel):
    """Network binding settings for the SSE and streamable HTTP transports."""

    host: str = "0.0.0.0"
    port: int = 3000
    port_env: str = "PORT"
    auth_token: str | None = None
    auth_token_env: str = "MCP_AUTH_TOKEN"
    json_response: bool = True


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    file: str = ""


class AppConfig(BaseModel):
    """Top-level configuration for bigcommerce-mcp."""

    bigcommerce: BigCommerceConfig = Field(default_factory=BigCommerceConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
