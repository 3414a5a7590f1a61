"""Tools registry for validating and dispatching tool calls."""

import asyncio
from typing import Any

from pydantic import ValidationError

from app.errors import DuplicateToolName, HandlerError, InvalidArguments, UnknownTool
from app.tools.base import ToolContext, ToolDefinition
from app.utils.logging import get_logger

logger = get_logger(__name__)


class ToolsRegistry:
    """Registry mapping tool names to their schema and handler."""

    def __init__(self, tools: list[ToolDefinition] | None = None):
        self._tools: dict[str, ToolDefinition] = {}
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: ToolDefinition) -> None:
        """Register a new tool in the registry.

        Raises:
            DuplicateToolName: If a tool with that name is already registered
        """
        if tool.name in self._tools:
            raise DuplicateToolName(tool.name)
        self._tools[tool.name] = tool

    def get(self, name: str, tool_call_id: str | None = None) -> ToolDefinition:
        """Look up a tool by name.

        Raises:
            UnknownTool: If no tool has that name
        """
        tool = self._tools.get(name)
        if tool is None:
            raise UnknownTool(name, tool_call_id)
        return tool

    async def invoke(
        self,
        name: str,
        arguments: dict[str, Any],
        context: ToolContext | None = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Validate arguments and run the tool handler once.

        Args:
            name: Registered tool name
            arguments: Raw arguments from the model
            context: Invocation context; its ``tool_call_id`` tags raised errors
            timeout: Optional limit in seconds for the handler

        Returns:
            Whatever the handler returned, including empty results

        Raises:
            UnknownTool: If no tool has that name
            InvalidArguments: If arguments fail validation (handler not called)
            HandlerError: If the handler raised or timed out
        """
        context = context or ToolContext.create()
        tool_call_id = context.tool_call_id

        tool = self.get(name, tool_call_id)

        try:
            parsed = tool.parse_input(arguments)
        except ValidationError as e:
            logger.info(f"Rejected arguments for {name} ({tool_call_id}): {e.error_count()} error(s)")
            raise InvalidArguments(name, tool_call_id, str(e)) from e

        logger.debug(f"Executing tool: {name} ({tool_call_id}) with input: {arguments}")
        try:
            async with asyncio.timeout(timeout):
                return await tool.handler(parsed, context)
        except Exception as e:
            logger.warning(f"Tool {name} ({tool_call_id}) failed: {e!r}")
            raise HandlerError(name, tool_call_id, e) from e

    def get_tool_schemas(self) -> list[dict[str, Any]]:
        """Get function schemas for binding to a chat model."""
        return [tool.as_function_schema() for tool in self._tools.values()]

    def get_tool_names(self) -> list[str]:
        """Get list of all registered tool names."""
        return list(self._tools.keys())

    def has_tool(self, name: str) -> bool:
        """Check if a tool is registered."""
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
