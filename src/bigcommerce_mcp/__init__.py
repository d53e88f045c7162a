"""bigcommerce-mcp - BigCommerce store data as MCP tools."""

__version__ = "0.1.0"

SERVER_NAME = "bigcommerce-api-mcp"
