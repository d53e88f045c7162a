"""``get_all_customers`` — list customers with v3 filter syntax."""

from __future__ import annotations

from typing import TYPE_CHECKING

from bigcommerce_mcp.tools.store import StoreTool, add_filters, add_pagination

if TYPE_CHECKING:
    from bigcommerce_mcp.tools.base import Arguments

# argument name -> v3 Customers API query key
CUSTOMER_FILTERS: dict[str, str] = {
    "email": "email:in",
    "name": "name:like",
    "company": "company:in",
    "phone": "phone:in",
    "customer_group_id": "customer_group_id:in",
    "date_created": "date_created:min",
    "date_modified": "date_modified:min",
}


class GetAllCustomersTool(StoreTool):
    """List customers, optionally filtered by contact details or dates."""

    name = "get_all_customers"
    description = (
        "Get all customers from the BigCommerce API with comprehensive "
        "filtering options (email, name, company, phone, customer group, "
        "dates, pagination)."
    )
    action = "getting all customers"
    path = "v3/customers"
    properties = {
        "email": {
            "type": "string",
            "description": "Filter by customer email address (exact match).",
        },
        "name": {
            "type": "string",
            "description": (
                "Filter by customer name (first or last name, "
                "partial match supported)."
            ),
        },
        "company": {
            "type": "string",
            "description": "Filter by company name (exact match).",
        },
        "phone": {
            "type": "string",
            "description": "Filter by phone number (exact match).",
        },
        "customer_group_id": {
            "type": "integer",
            "description": "Filter by customer group ID.",
        },
        "limit": {
            "type": "integer",
            "description": "Number of results to return (max 250, default 50).",
        },
        "page": {
            "type": "integer",
            "description": "Page number for pagination (default 1).",
        },
        "date_created": {
            "type": "string",
            "description": (
                "Filter customers created after this date "
                "(ISO format: YYYY-MM-DD or YYYY-MM-DDTHH:MM:SS)."
            ),
        },
        "date_modified": {
            "type": "string",
            "description": (
                "Filter customers modified after this date "
                "(ISO format: YYYY-MM-DD or YYYY-MM-DDTHH:MM:SS)."
            ),
        },
    }

    def build_params(self, arguments: Arguments) -> dict[str, str]:
        params = add_filters({}, arguments, CUSTOMER_FILTERS)
        return add_pagination(params, arguments)
