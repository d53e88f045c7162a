"""``get_all_products`` — list catalog products."""

from __future__ import annotations

from bigcommerce_mcp.tools.store import StoreTool


class GetAllProductsTool(StoreTool):
    """List every product in the store catalog."""

    name = "get_all_products"
    description = "Get all products from the API."
    action = "getting all products"
    path = "v3/catalog/products"
