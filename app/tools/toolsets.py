"""Tool sets for the travel and learning agents."""

import httpx

from app.config import ProviderConfig
from app.tools.calculator import create_addition_tool, create_calculator_tool, create_multiply_tool
from app.tools.currency import create_currency_tool
from app.tools.demo import create_city_weather_tool, create_knowledge_search_tool, create_user_location_tool
from app.tools.intel_bridge import create_intel_bridge_tool
from app.tools.registry import ToolsRegistry
from app.tools.search import create_search_tool
from app.tools.weather import create_weather_tool


def create_travel_registry(config: ProviderConfig, http_client: httpx.AsyncClient | None = None) -> ToolsRegistry:
    """Weather, search, budget arithmetic, currency and MCP intelligence."""
    return ToolsRegistry(
        [
            create_weather_tool(config, http_client),
            create_search_tool(config, http_client),
            create_multiply_tool(),
            create_addition_tool(),
            create_currency_tool(config),
            create_intel_bridge_tool(config, http_client),
        ]
    )


def create_learning_registry() -> ToolsRegistry:
    """Deterministic tools for the learning pages."""
    return ToolsRegistry(
        [
            create_calculator_tool(),
            create_city_weather_tool(),
            create_knowledge_search_tool(),
            create_user_location_tool(),
        ]
    )
