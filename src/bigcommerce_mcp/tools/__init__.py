"""BigCommerce tools exposed over MCP.

Provides the tool protocol, the registry built at startup, the
upstream HTTP client, and the products/customers/orders tools.
"""
