"""Tool registry — holds the tools discovered at startup.

Provides registration, lookup and listing of tools that implement the
:class:`Tool` protocol, plus :func:`discover_tools`, which builds the
registry once per process.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from bigcommerce_mcp.core.errors import DiscoveryError

if TYPE_CHECKING:
    from bigcommerce_mcp.config.schema import AppConfig
    from bigcommerce_mcp.tools.base import Tool, ToolDefinition
    from bigcommerce_mcp.tools.client import BigCommerceClient

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Registry of available tools, iterated in registration order."""

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        """Register a tool.

        Raises:
            ValueError: If a tool with the same name is already registered,
                or the tool requires parameters its schema does not declare.
        """
        definition = tool.definition
        if definition.name in self._tools:
            msg = f"Tool already registered: {definition.name}"
            raise ValueError(msg)
        undeclared = [
            p for p in definition.required_parameters
            if p not in definition.parameter_names
        ]
        if undeclared:
            msg = (
                f"Tool {definition.name} requires undeclared parameters: "
                f"{', '.join(undeclared)}"
            )
            raise ValueError(msg)
        self._tools[definition.name] = tool

    def get(self, name: str) -> Tool:
        """Get a tool by name.

        Raises:
            KeyError: If the tool is not found.
        """
        if name not in self._tools:
            msg = f"Tool not found: {name}"
            raise KeyError(msg)
        return self._tools[name]

    def list_definitions(self) -> list[ToolDefinition]:
        """Return tool definitions for all registered tools."""
        return [t.definition for t in self._tools.values()]

    def list_names(self) -> list[str]:
        """Return names of all registered tools."""
        return list(self._tools.keys())

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools


async def discover_tools(
    config: AppConfig,
    client: BigCommerceClient | None = None,
) -> ToolRegistry:
    """Build the registry of BigCommerce tools.

    Raises:
        DiscoveryError: If any tool cannot be registered.
    """
    from bigcommerce_mcp.tools.client import BigCommerceClient
    from bigcommerce_mcp.tools.customers import GetAllCustomersTool
    from bigcommerce_mcp.tools.orders import GetAllOrdersTool
    from bigcommerce_mcp.tools.products import GetAllProductsTool

    client = client or BigCommerceClient(config.bigcommerce)
    registry = ToolRegistry()

    for tool in (
        GetAllProductsTool(client),
        GetAllCustomersTool(client),
        GetAllOrdersTool(client),
    ):
        try:
            registry.register(tool)
        except ValueError as e:
            raise DiscoveryError(str(e)) from e
        logger.debug("Registered tool %s", tool.definition.name)

    return registry
