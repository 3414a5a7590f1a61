"""Tools for the conversational AI assistant."""

from app.tools.base import ToolContext, ToolDefinition
from app.tools.registry import ToolsRegistry
from app.tools.toolsets import create_learning_registry, create_travel_registry

__all__ = ["ToolContext", "ToolDefinition", "ToolsRegistry", "create_learning_registry", "create_travel_registry"]
