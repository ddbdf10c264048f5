"""Tool registry: named, schema-described callables for a tool-calling agent."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from pydantic import BaseModel

from xltools.config.settings import Settings
from xltools.observe.events import EventEmitter


class UnknownToolError(LookupError):
    code = "ERR_UNKNOWN_TOOL"


@dataclass
class ToolResult:
    """Agent-readable ``content`` plus structured ``details``."""

    content: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"content": self.content, "details": self.details}


@dataclass
class ToolRuntime:
    """Per-invocation settings and event sink handed to every tool."""

    settings: Settings = field(default_factory=Settings)
    emitter: EventEmitter = field(default_factory=EventEmitter)


Handler = Callable[[Any, ToolRuntime], ToolResult]


@dataclass
class ToolSpec:
    name: str
    label: str
    description: str
    params: type[BaseModel]
    handler: Handler
    mutating: bool = False

    def schema(self) -> dict[str, Any]:
        """JSON schema of the tool's parameters."""
        return self.params.model_json_schema()

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "description": self.description,
            "mutating": self.mutating,
            "parameters": self.schema(),
        }

    def execute(self, arguments: dict[str, Any], runtime: ToolRuntime | None = None) -> ToolResult:
        """Validate ``arguments`` and run the tool. ValidationError propagates."""
        params = self.params.model_validate(arguments)
        return self.handler(params, runtime or ToolRuntime())


_REGISTRY: dict[str, ToolSpec] = {}


def register(spec: ToolSpec) -> ToolSpec:
    if spec.name in _REGISTRY:
        raise ValueError(f"Tool '{spec.name}' is already registered")
    _REGISTRY[spec.name] = spec
    return spec


def get_tool(name: str) -> ToolSpec:
    try:
        return _REGISTRY[name]
    except KeyError:
        raise UnknownToolError(
            f"Unknown tool: '{name}'. Available: {', '.join(_REGISTRY)}"
        ) from None


def list_tools() -> list[ToolSpec]:
    return list(_REGISTRY.values())


def execute_tool(
    name: str,
    arguments: dict[str, Any],
    runtime: ToolRuntime | None = None,
) -> ToolResult:
    return get_tool(name).execute(arguments, runtime)
