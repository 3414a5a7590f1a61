"""Base types and definitions for tools."""

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel

EventSink = Callable[[Any], Awaitable[None]]


async def _discard(_payload: Any) -> None:
    return None


@dataclass(frozen=True)
class ToolContext:
    """Read-only invocation context handed to every tool handler of a run."""

    thread_id: str | None = None
    values: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    tool_call_id: str | None = None
    sink: EventSink = _discard

    @classmethod
    def create(cls, thread_id: str | None = None, values: Mapping[str, Any] | None = None, sink: EventSink | None = None):
        return cls(thread_id=thread_id, values=MappingProxyType(dict(values or {})), sink=sink or _discard)

    def for_call(self, tool_call_id: str | None) -> "ToolContext":
        """Return the same context tagged with a tool call id."""
        return ToolContext(thread_id=self.thread_id, values=self.values, tool_call_id=tool_call_id, sink=self.sink)

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    async def emit(self, payload: Any) -> None:
        """Send an out-of-band event on the custom channel."""
        await self.sink(payload)


ToolHandler = Callable[[Any, ToolContext], Awaitable[Any]]


@dataclass
class ToolDefinition:
    """Definition of a tool available to the AI assistant."""

    name: str
    description: str
    input_schema_class: type[BaseModel]
    handler: ToolHandler

    def get_json_schema(self) -> dict[str, Any]:
        """Get JSON schema for this tool's input."""
        return self.input_schema_class.model_json_schema()

    def parse_input(self, raw_input: dict[str, Any]) -> BaseModel:
        """Parse and validate tool input."""
        return self.input_schema_class.model_validate(raw_input)

    def as_function_schema(self) -> dict[str, Any]:
        """OpenAI-format function schema, accepted by every chat model's ``bind_tools``."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.get_json_schema(),
            },
        }
