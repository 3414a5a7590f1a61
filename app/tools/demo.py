"""Small deterministic tools used by the learning scenarios."""

from pydantic import BaseModel, Field

from app.tools.base import ToolContext, ToolDefinition

CITY_WEATHER: dict[str, str] = {
    "beijing": "Sunny, 15-25°C",
    "shanghai": "Cloudy, 18-26°C",
    "shenzhen": "Light rain, 22-28°C",
}

KNOWLEDGE_BASE: dict[str, str] = {
    "langchain": "LangChain is a framework for building LLM applications, with chains, agents and memory.",
    "fastapi": "FastAPI is a Python web framework for building APIs with type hints and async support.",
    "langgraph": "LangGraph builds stateful, multi-actor agent workflows as graphs on top of LangChain.",
}

USER_LOCATIONS: dict[str, str] = {
    "1": "Florida",
    "2": "SF",
}


class CityInput(BaseModel):
    city: str = Field(..., min_length=1, description="City name")


class QueryInput(BaseModel):
    query: str = Field(..., min_length=1, description="Search query")


class EmptyInput(BaseModel):
    """Input schema for tools that don't require parameters."""


async def city_weather_handler(params: CityInput, context: ToolContext) -> str:  # noqa: RUF029
    return CITY_WEATHER.get(params.city.strip().lower()) or f"Sorry, no weather data for {params.city}"


async def knowledge_search_handler(params: QueryInput, context: ToolContext) -> str:  # noqa: RUF029
    lowered = params.query.lower()
    for keyword, entry in KNOWLEDGE_BASE.items():
        if keyword in lowered:
            return entry
    return "No relevant information found"


async def user_location_handler(params: EmptyInput, context: ToolContext) -> str:  # noqa: RUF029
    user_id = str(context.get("user_id", ""))
    return USER_LOCATIONS.get(user_id) or f"Unknown location for user {user_id or '(anonymous)'}"


def create_city_weather_tool() -> ToolDefinition:
    return ToolDefinition(
        name="get_weather",
        description="Look up the weather for a given city.",
        input_schema_class=CityInput,
        handler=city_weather_handler,
    )


def create_knowledge_search_tool() -> ToolDefinition:
    return ToolDefinition(
        name="search",
        description="Search the knowledge base for information.",
        input_schema_class=QueryInput,
        handler=knowledge_search_handler,
    )


def create_user_location_tool() -> ToolDefinition:
    return ToolDefinition(
        name="get_user_location",
        description="Retrieve the current user's location based on their user id.",
        input_schema_class=EmptyInput,
        handler=user_location_handler,
    )
