"""Tool dispatch: lookup, argument checks, invocation, result formatting.

The dispatcher is transport-agnostic.  It raises
:class:`~bigcommerce_mcp.core.errors.ToolCallError` subclasses for
protocol faults and returns a :class:`ResponseEnvelope` for everything
else, including tools that report an upstream failure.
"""

from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from bigcommerce_mcp.core.errors import (
    InvalidParamsError,
    ToolExecutionError,
    UnknownToolError,
)
from bigcommerce_mcp.tools.base import Failure

if TYPE_CHECKING:
    from collections.abc import Mapping

    from bigcommerce_mcp.tools.base import Arguments, ToolDefinition
    from bigcommerce_mcp.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ResponseEnvelope:
    """Uniform result of a tool call, independent of transport."""

    text: str
    is_error: bool = False
    meta: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class ToolListing:
    name: str
    description: str
    input_schema: dict[str, Any] = field(default_factory=dict)


# ── Payload classification ───────────────────────────────────────


class PayloadKind(enum.Enum):
    """Shape of a successful payload, decided once before formatting."""

    TEXT = "text"
    SEQUENCE = "sequence"
    RECORD_WITH_DATA = "record_with_data"
    RECORD = "record"
    SCALAR = "scalar"


def classify_payload(payload: Any) -> PayloadKind:
    if isinstance(payload, str):
        return PayloadKind.TEXT
    if isinstance(payload, list | tuple):
        return PayloadKind.SEQUENCE
    if isinstance(payload, dict):
        if isinstance(payload.get("data"), list | tuple):
            return PayloadKind.RECORD_WITH_DATA
        return PayloadKind.RECORD
    return PayloadKind.SCALAR


def pretty_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def scalar_text(value: Any) -> str:
    """Stringify a non-container payload the way JavaScript's ``String()`` does."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_payload(payload: Any, kind: PayloadKind | None = None) -> str:
    """Render a successful payload as text for the calling agent.

    Lists and ``{"data": [...]}`` pages are prefixed with an item count
    so a client learns "how many" without parsing the JSON dump.
    """
    kind = kind or classify_payload(payload)
    if kind is PayloadKind.TEXT:
        return payload
    if kind is PayloadKind.SEQUENCE:
        return f"Found {len(payload)} items:\n{pretty_json(payload)}"
    if kind is PayloadKind.RECORD_WITH_DATA:
        return f"Found {len(payload['data'])} items:\n{pretty_json(payload)}"
    if kind is PayloadKind.RECORD:
        return pretty_json(payload)
    return scalar_text(payload)


def result_type(payload: Any) -> str:
    """Name the payload's type using JavaScript ``typeof`` vocabulary."""
    if isinstance(payload, str):
        return "string"
    if isinstance(payload, bool):
        return "boolean"
    if isinstance(payload, int | float):
        return "number"
    return "object"


def has_data(payload: Any) -> bool:
    return isinstance(payload, list | tuple) or (
        isinstance(payload, dict) and "data" in payload
    )


def timestamp() -> str:
    """Current UTC time as ISO 8601 with milliseconds and a ``Z`` suffix."""
    now = datetime.now(UTC).isoformat(timespec="milliseconds")
    return now.replace("+00:00", "Z")


# ── Argument validation ──────────────────────────────────────────


def validate_arguments(
    definition: ToolDefinition, arguments: Mapping[str, Any] | None
) -> dict[str, Any]:
    """Check that every required parameter is present.

    Presence only: values and undeclared keys pass through untouched.
    The first missing name, in schema order, is reported.

    Raises:
        InvalidParamsError: Naming the first missing parameter.
    """
    bag = dict(arguments or {})
    for name in definition.required_parameters:
        if name not in bag:
            raise InvalidParamsError(name)
    return bag


# ── Dispatcher ───────────────────────────────────────────────────


class Dispatcher:
    """Resolve tool calls against a registry and normalise their results."""

    def __init__(self, registry: ToolRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    def list_tools(self) -> list[ToolListing]:
        return [
            ToolListing(
                name=d.name,
                description=d.description,
                input_schema=d.parameters_schema,
            )
            for d in self._registry.list_definitions()
        ]

    async def call_tool(
        self, name: str, arguments: Arguments | None = None
    ) -> ResponseEnvelope:
        """Invoke tool *name* with *arguments*.

        Raises:
            UnknownToolError: No tool is registered under *name*.
            InvalidParamsError: A required parameter is missing.
            ToolExecutionError: The tool raised instead of returning.
        """
        if name not in self._registry:
            raise UnknownToolError(name)
        tool = self._registry.get(name)
        bag = validate_arguments(tool.definition, arguments)

        try:
            result = await tool.invoke(bag)
        except Exception as exc:
            logger.exception("Tool %s failed", name)
            raise ToolExecutionError(str(exc)) from exc

        if isinstance(result, Failure):
            return ResponseEnvelope(text=f"Error: {result.error}", is_error=True)

        payload = result.payload
        return ResponseEnvelope(
            text=format_payload(payload),
            meta={
                "toolName": name,
                "resultType": result_type(payload),
                "hasData": has_data(payload),
                "timestamp": timestamp(),
            },
        )
