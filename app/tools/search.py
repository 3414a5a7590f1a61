"""Web search tool backed by Serper.dev."""

import httpx
from pydantic import BaseModel, Field

from app.clients.http import provider_client
from app.config import ProviderConfig
from app.errors import ProviderNotConfigured
from app.tools.base import ToolContext, ToolDefinition
from app.utils.logging import get_logger

logger = get_logger(__name__)

SERPER_URL = "https://google.serper.dev/search"

MOCK_RESULTS: dict[str, str] = {
    "bangkok hotels": (
        "Bangkok hotel prices: budget 200-400 CNY/night, mid-range 500-800 CNY/night, luxury from 1000 CNY/night. "
        "Recommended areas: Siam Square, Sukhumvit Road."
    ),
    "thailand visa": (
        "Thailand offers visa on arrival for Chinese travellers for about 2000 THB (around 400 CNY); "
        "a tourist visa can also be arranged in advance."
    ),
    "west lake": (
        "West Lake scenic area is free to enter. Nearby: Leifeng Pagoda (40 CNY), Lingyin Temple (45 CNY). "
        "Plan 2-3 hours."
    ),
    "sanya hotels": (
        "Sanya hotel prices: budget 300-500 CNY/night, sea-view rooms 600-1200 CNY/night, "
        "five-star from 1500 CNY/night."
    ),
    "phuket": (
        "Phuket highlights: Patong Beach (free), Phi Phi Islands day trip (about 300 CNY), Big Buddha (free). "
        "Best season May to October."
    ),
}


class SearchInput(BaseModel):
    """Input schema for the web search tool."""

    query: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Search keywords, e.g. 'Bangkok hotel prices' or 'West Lake tickets'",
    )


def mock_search(query: str) -> str:
    """Fuzzy match a query against the fixed result table."""
    normalized = query.strip().lower()
    for key, value in MOCK_RESULTS.items():
        if key in normalized or normalized in key:
            return value
    return f'Search results for "{query}": plan ahead and check the latest prices and policies.'


def create_search_tool(config: ProviderConfig, http_client: httpx.AsyncClient | None = None) -> ToolDefinition:
    async def search_handler(params: SearchInput, context: ToolContext) -> str:
        query = params.query

        if not config.serper_api_key:
            if config.fallback == "strict":
                raise ProviderNotConfigured("Serper search", "SERPER_API_KEY")
            await context.emit({"tool": "search_google", "source": "mock", "query": query})
            return mock_search(query)

        try:
            async with provider_client(http_client, config.timeout) as client:
                response = await client.post(
                    SERPER_URL,
                    headers={"X-API-KEY": config.serper_api_key, "Content-Type": "application/json"},
                    json={"q": query, "gl": config.search_region, "hl": config.search_language},
                )

            if response.status_code != 200:
                logger.warning(f"Serper returned {response.status_code} for {query!r}")
                return f'Searching for "{query}" failed, please try again later.'

            organic = response.json().get("organic") or []

        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Search for {query!r} failed: {e!r}")
            return f'Searching for "{query}" failed: {e}'

        await context.emit({"tool": "search_google", "source": "live", "query": query})
        results = [f"{item.get('title', '')}: {item.get('snippet', '')}" for item in organic[:3]]
        return "\n".join(results) or "No relevant results found."

    return ToolDefinition(
        name="search_google",
        description="Search the web for current information such as hotel prices, attraction tickets and travel guides.",
        input_schema_class=SearchInput,
        handler=search_handler,
    )
