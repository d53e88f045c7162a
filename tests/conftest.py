"""Shared test fixtures for bigcommerce-mcp."""

from __future__ import annotations

from typing import Any

import pytest

from bigcommerce_mcp.config.schema import AppConfig
from bigcommerce_mcp.mcp.dispatcher import Dispatcher
from bigcommerce_mcp.tools.client import BigCommerceClient
from bigcommerce_mcp.tools.registry import ToolRegistry
from tests.fixtures.tools import FakeTool, FakeUpstream


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Any) -> None:
    """Keep developer credentials and config files out of tests."""
    for var in (
        "BIGCOMMERCE_STORE_HASH",
        "BIGCOMMERCE_API_KEY",
        "MCP_AUTH_TOKEN",
        "PORT",
        "BIGCOMMERCE_MCP_CONFIG",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))


@pytest.fixture
def app_config() -> AppConfig:
    """Config pointing at a fake store."""
    return AppConfig(
        bigcommerce={  # type: ignore[arg-type]
            "store_hash": "envstore",
            "api_key": "secret-key",
            "base_url": "https://api.test/stores",
        },
    )


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream(body={"data": [{"id": 1}], "meta": {"pagination": {"total": 1}}})


@pytest.fixture
def make_client(app_config: AppConfig) -> Any:
    """Factory fixture: BigCommerceClient talking to a FakeUpstream."""

    def _make(fake: FakeUpstream) -> BigCommerceClient:
        return BigCommerceClient(app_config.bigcommerce, transport=fake.transport)

    return _make


@pytest.fixture
def make_dispatcher() -> Any:
    """Factory fixture: Dispatcher over the given tools."""

    def _make(*tools: FakeTool) -> Dispatcher:
        registry = ToolRegistry()
        for tool in tools:
            registry.register(tool)
        return Dispatcher(registry)

    return _make
