"""``get_all_orders`` — list orders from the v2 Orders API."""

from __future__ import annotations

from typing import TYPE_CHECKING

from bigcommerce_mcp.tools.store import StoreTool, add_filters, add_pagination

if TYPE_CHECKING:
    from bigcommerce_mcp.tools.base import Arguments

ORDER_FILTERS: dict[str, str] = {
    name: name for name in ("customer_id", "email", "status_id", "min_id", "max_id")
}


class GetAllOrdersTool(StoreTool):
    """List orders, optionally narrowed to one customer, status or ID range."""

    name = "get_all_orders"
    description = (
        "Get all orders from the BigCommerce API. Can filter by customer_id "
        "to get products associated with specific customers through their "
        "order history."
    )
    action = "getting all orders"
    path = "v2/orders"
    properties = {
        "customer_id": {
            "type": "integer",
            "description": (
                "Filter orders by specific customer ID to get products "
                "associated with that customer."
            ),
        },
        "email": {
            "type": "string",
            "description": "Filter orders by customer email address.",
        },
        "status_id": {
            "type": "integer",
            "description": (
                "Filter orders by status ID (e.g., 1=Pending, "
                "7=Awaiting Payment, 11=Awaiting Fulfillment)."
            ),
        },
        "min_id": {
            "type": "integer",
            "description": "Minimum order ID for filtering.",
        },
        "max_id": {
            "type": "integer",
            "description": "Maximum order ID for filtering.",
        },
        "limit": {
            "type": "integer",
            "description": "Number of results to return (default: 50, max: 250).",
        },
        "page": {
            "type": "integer",
            "description": "Page number to return (default: 1).",
        },
    }

    def build_params(self, arguments: Arguments) -> dict[str, str]:
        params = add_filters({}, arguments, ORDER_FILTERS)
        return add_pagination(params, arguments)
