"""Tool protocol and data types.

Defines the ``Tool`` protocol that every tool implementation must
satisfy, the ``ToolDefinition`` schema record, and the
``Success``/``Failure`` outcome values returned by tools.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, TypeAlias, runtime_checkable

JSONValue: TypeAlias = (
    str | int | float | bool | None | Mapping[str, "JSONValue"] | Sequence["JSONValue"]
)
Arguments: TypeAlias = Mapping[str, JSONValue]

EMPTY_RESULT: dict[str, Any] = {"data": [], "meta": {"total": 0}}


@dataclass(frozen=True, slots=True)
class ToolDefinition:
    """Schema definition for a tool, as advertised to MCP clients."""

    name: str
    description: str
    parameters_schema: dict[str, Any] = field(default_factory=dict)

    @property
    def required_parameters(self) -> tuple[str, ...]:
        return tuple(self.parameters_schema.get("required", ()))

    @property
    def parameter_names(self) -> frozenset[str]:
        return frozenset(self.parameters_schema.get("properties", {}))


@dataclass(frozen=True, slots=True)
class Success:
    """A tool completed and produced a JSON payload."""

    payload: Any


@dataclass(frozen=True, slots=True)
class Failure:
    """A tool completed but the upstream call did not succeed."""

    error: str


OperationResult: TypeAlias = Success | Failure


@runtime_checkable
class Tool(Protocol):
    """Protocol that all tool implementations must satisfy."""

    @property
    def definition(self) -> ToolDefinition:
        """Name, description and parameter schema of this tool."""
        ...

    async def invoke(self, arguments: Arguments) -> OperationResult:
        """Run the tool.

        Upstream problems are reported as a :class:`Failure` value.
        Anything raised is treated as a fault in the tool itself.
        """
        ...
