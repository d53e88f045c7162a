"""Shared base for read-only BigCommerce store tools."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, ClassVar

import httpx

from bigcommerce_mcp.core.errors import UpstreamError
from bigcommerce_mcp.tools.base import Failure, Success, ToolDefinition

if TYPE_CHECKING:
    from bigcommerce_mcp.tools.base import Arguments, OperationResult
    from bigcommerce_mcp.tools.client import BigCommerceClient

logger = logging.getLogger(__name__)

STORE_HASH_PARAM = "store_Hash"


class StoreTool:
    """A tool that GETs one store endpoint with optional query filters.

    Subclasses declare ``name``, ``description``, ``action``, ``path``
    and ``properties``; ``store_Hash`` is always present and required.
    ``build_params`` maps call arguments to the query string.

    Implements the :class:`Tool` protocol.
    """

    name: ClassVar[str]
    description: ClassVar[str]
    action: ClassVar[str]
    path: ClassVar[str]
    properties: ClassVar[dict[str, dict[str, str]]] = {}

    def __init__(self, client: BigCommerceClient) -> None:
        self._client = client

    @property
    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=self.name,
            description=self.description,
            parameters_schema={
                "type": "object",
                "properties": {
                    STORE_HASH_PARAM: {
                        "type": "string",
                        "description": "The store hash to be included in the URL.",
                    },
                    **self.properties,
                },
                "required": [STORE_HASH_PARAM],
            },
        )

    def build_params(self, arguments: Arguments) -> dict[str, str]:
        return {}

    async def invoke(self, arguments: Arguments) -> OperationResult:
        store_hash = arguments.get(STORE_HASH_PARAM) or None
        params = self.build_params(arguments)
        try:
            payload = await self._client.get(
                str(store_hash) if store_hash else None, self.path, params
            )
        except (UpstreamError, httpx.HTTPError) as exc:
            logger.warning("Error %s: %s", self.action, exc)
            return Failure(f"An error occurred while {self.action}: {exc}")
        return Success(payload)


def query_value(value: Any) -> str:
    """Render an argument the way it appears in a query string."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def add_filters(
    params: dict[str, str],
    arguments: Arguments,
    mapping: dict[str, str],
) -> dict[str, str]:
    """Copy truthy arguments into *params* under their query keys."""
    for argument, query_key in mapping.items():
        value = arguments.get(argument)
        if value:
            params[query_key] = query_value(value)
    return params


def add_pagination(
    params: dict[str, str],
    arguments: Arguments,
    *,
    limit: int = 50,
    page: int = 1,
) -> dict[str, str]:
    """Append ``limit`` and ``page``, defaulting when absent."""
    for key, default in (("limit", limit), ("page", page)):
        value = arguments.get(key, default)
        if value:
            params[key] = query_value(value)
    return params
