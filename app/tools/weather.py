"""Weather lookup tool backed by OpenWeatherMap."""

import httpx
from pydantic import BaseModel, Field

from app.clients.http import provider_client
from app.config import ProviderConfig
from app.errors import ProviderNotConfigured
from app.tools.base import ToolContext, ToolDefinition
from app.utils.logging import get_logger

logger = get_logger(__name__)

OPENWEATHERMAP_URL = "https://api.openweathermap.org/data/2.5/weather"


class WeatherInput(BaseModel):
    """Input schema for the weather tool."""

    location: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="City name, e.g. Beijing, Bangkok, Tokyo",
        examples=["Tokyo", "Bangkok"],
    )


def unconfigured_weather(location: str) -> str:
    return f"Weather API not configured. Simulated data: {location} is currently 28°C and sunny, good for travel."


def degraded_weather(location: str) -> str:
    return f"Unable to fetch live weather for {location}. Simulated data: 25°C and sunny."


def create_weather_tool(config: ProviderConfig, http_client: httpx.AsyncClient | None = None) -> ToolDefinition:
    async def get_weather_handler(params: WeatherInput, context: ToolContext) -> str:
        location = params.location

        if not config.openweathermap_api_key:
            if config.fallback == "strict":
                raise ProviderNotConfigured("OpenWeatherMap", "OPENWEATHERMAP_API_KEY")
            await context.emit({"tool": "get_weather", "source": "mock", "location": location})
            return unconfigured_weather(location)

        query = {
            "q": location,
            "appid": config.openweathermap_api_key,
            "units": "metric",
            "lang": config.weather_language,
        }

        try:
            async with provider_client(http_client, config.timeout) as client:
                response = await client.get(OPENWEATHERMAP_URL, params=query)

            if response.status_code != 200:
                logger.warning(f"OpenWeatherMap returned {response.status_code} for {location}")
                await context.emit({"tool": "get_weather", "source": "mock", "location": location})
                return degraded_weather(location)

            data = response.json()
            temperature = round(data["main"]["temp"])
            description = data["weather"][0]["description"]
            humidity = data["main"]["humidity"]

        except (httpx.HTTPError, ValueError, KeyError, IndexError) as e:
            logger.warning(f"Weather lookup for {location} failed: {e!r}")
            await context.emit({"tool": "get_weather", "source": "mock", "location": location})
            return degraded_weather(location)

        await context.emit({"tool": "get_weather", "source": "live", "location": location})
        return f"Current weather in {location}: {temperature}°C, {description}, humidity {humidity}%"

    return ToolDefinition(
        name="get_weather",
        description=(
            "Look up the current weather for a location, including temperature, conditions and humidity. "
            "Use it before recommending outdoor plans."
        ),
        input_schema_class=WeatherInput,
        handler=get_weather_handler,
    )
