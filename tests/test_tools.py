"""Tests for the travel and learning tools."""

import json

import httpx
import pytest

from app.config import ProviderConfig
from app.errors import HandlerError, InvalidArguments, ProviderNotConfigured
from app.tools import ToolContext, create_learning_registry, create_travel_registry
from app.tools.calculator import calculate
from app.tools.currency import DEFAULT_RATES, convert, load_rates
from app.tools.intel_bridge import render_response
from app.tools.search import mock_search


def collecting_context():
    events = []

    async def sink(payload):
        events.append(payload)

    return ToolContext.create("thread-1", sink=sink).for_call("call_1"), events


def mock_client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestWeatherTool:
    """Tests for the weather tool."""

    @pytest.mark.asyncio
    async def test_unconfigured_returns_labelled_mock(self, provider_config):
        """Test that missing credentials give simulated data and a mock event."""
        registry = create_travel_registry(provider_config)
        context, events = collecting_context()

        result = await registry.invoke("get_weather", {"location": "Tokyo"}, context)

        assert result == "Weather API not configured. Simulated data: Tokyo is currently 28°C and sunny, good for travel."
        assert events == [{"tool": "get_weather", "source": "mock", "location": "Tokyo"}]

    @pytest.mark.asyncio
    async def test_strict_mode_reports_error(self):
        """Test that strict fallback turns missing credentials into a tool failure."""
        registry = create_travel_registry(ProviderConfig(fallback="strict"))

        with pytest.raises(HandlerError) as exc_info:
            await registry.invoke("get_weather", {"location": "Tokyo"})

        assert isinstance(exc_info.value.__cause__, ProviderNotConfigured)
        assert "OPENWEATHERMAP_API_KEY" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_live_lookup(self):
        """Test a successful OpenWeatherMap call."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.url.params)
            return httpx.Response(
                200,
                json={"main": {"temp": 27.6, "humidity": 70}, "weather": [{"description": "scattered clouds"}]},
            )

        async with mock_client(handler) as client:
            registry = create_travel_registry(ProviderConfig(openweathermap_api_key="key"), client)
            context, events = collecting_context()
            result = await registry.invoke("get_weather", {"location": "Bangkok"}, context)

        assert result == "Current weather in Bangkok: 28°C, scattered clouds, humidity 70%"
        assert seen["q"] == "Bangkok"
        assert seen["units"] == "metric"
        assert events[0]["source"] == "live"

    @pytest.mark.asyncio
    async def test_provider_error_degrades(self):
        """Test that an upstream error falls back to simulated data."""
        async with mock_client(lambda request: httpx.Response(401)) as client:
            registry = create_travel_registry(ProviderConfig(openweathermap_api_key="bad"), client)
            result = await registry.invoke("get_weather", {"location": "Bangkok"})

        assert result == "Unable to fetch live weather for Bangkok. Simulated data: 25°C and sunny."

    @pytest.mark.asyncio
    async def test_empty_location_rejected(self, provider_config):
        """Test that schema validation applies before the handler."""
        registry = create_travel_registry(provider_config)

        with pytest.raises(InvalidArguments):
            await registry.invoke("get_weather", {"location": ""})


class TestSearchTool:
    """Tests for the web search tool."""

    def test_mock_search_matches_both_directions(self):
        """Test fuzzy matching of queries against the fixed table."""
        assert mock_search("Bangkok Hotels near Siam").startswith("Bangkok hotel prices")
        assert mock_search("phuket").startswith("Phuket highlights")
        assert mock_search("Reykjavik") == (
            'Search results for "Reykjavik": plan ahead and check the latest prices and policies.'
        )

    @pytest.mark.asyncio
    async def test_live_search_top_three(self):
        """Test that the top three organic results are returned."""
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["key"] = request.headers["X-API-KEY"]
            captured["body"] = json.loads(request.content)
            organic = [{"title": f"Result {i}", "snippet": f"Snippet {i}"} for i in range(5)]
            return httpx.Response(200, json={"organic": organic})

        async with mock_client(handler) as client:
            registry = create_travel_registry(ProviderConfig(serper_api_key="serper"), client)
            result = await registry.invoke("search_google", {"query": "Kyoto temples"})

        assert result == "Result 0: Snippet 0\nResult 1: Snippet 1\nResult 2: Snippet 2"
        assert captured["key"] == "serper"
        assert captured["body"] == {"q": "Kyoto temples", "gl": "us", "hl": "en"}


class TestCalculatorTools:
    """Tests for the arithmetic tools."""

    @pytest.mark.asyncio
    async def test_multiply_and_addition(self, provider_config):
        """Test the budget arithmetic tools."""
        registry = create_travel_registry(provider_config)

        assert await registry.invoke("multiply", {"a": 350, "b": 3}) == "350 × 3 = 1050"
        assert await registry.invoke("addition", {"numbers": [1050, 200.5, 80]}) == "1050 + 200.5 + 80 = 1330.5"

    def test_calculate_operations(self):
        """Test each operation of the general calculator."""
        assert calculate("add", 1, 2) == "1 + 2 = 3"
        assert calculate("subtract", 5, 7.5) == "5 - 7.5 = -2.5"
        assert calculate("divide", 9, 3) == "9 ÷ 3 = 3"
        assert calculate("divide", 1, 0) == "Error: division by zero"


class TestCurrencyTool:
    """Tests for currency conversion."""

    @pytest.mark.asyncio
    async def test_usd_to_cny(self, provider_config):
        """Test conversion with the built-in rates."""
        registry = create_travel_registry(provider_config)

        result = await registry.invoke("convert_currency", {"amount": 100, "from": "usd", "to": " cny "})

        assert result.startswith("100 USD ≈ 720.00 CNY")

    def test_unknown_code_uses_cny_rate(self):
        """Test that unknown currency codes are treated as CNY."""
        assert convert(100, "XYZ", "CNY").value == 100
        assert convert(720, "CNY", "USD").value == 100

    def test_configured_rates_merge_over_defaults(self):
        """Test that TRAVEL_CURRENCY_RATES overrides individual rates."""
        rates = load_rates('{"usd": 7.0, "GBP": 9.1}')

        assert rates["USD"] == 7.0
        assert rates["GBP"] == 9.1
        assert rates["EUR"] == DEFAULT_RATES["EUR"]

    def test_invalid_rates_ignored(self):
        """Test that malformed rate JSON falls back to the defaults."""
        assert load_rates("not json") == DEFAULT_RATES
        assert load_rates("[1, 2]") == DEFAULT_RATES


class TestIntelBridgeTool:
    """Tests for the MCP gateway bridge."""

    @pytest.mark.asyncio
    async def test_mock_hint(self, provider_config):
        """Test the simulated answers without an endpoint."""
        registry = create_travel_registry(provider_config)

        known = await registry.invoke("travel_intel_mcp", {"query": "Osaka food"})
        unknown = await registry.invoke("travel_intel_mcp", {"query": "lisbon trams"})

        assert known.startswith("Dotonbori must-eats in Osaka")
        assert "TRAVEL_MCP_ENDPOINT" in unknown

    @pytest.mark.asyncio
    async def test_gateway_call(self):
        """Test the request body sent to the gateway and the rendered result."""
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured.update(json.loads(request.content))
            return httpx.Response(200, json={"result": "Ryokan rooms from 900 CNY"})

        config = ProviderConfig(mcp_endpoint="http://mcp.local/call", mcp_tool="intel.lookup")
        async with mock_client(handler) as client:
            registry = create_travel_registry(config, client)
            result = await registry.invoke(
                "travel_intel_mcp", {"query": "kyoto ryokan", "format": "pricing", "metadata": {"budget": "mid"}}
            )

        assert result == "Ryokan rooms from 900 CNY"
        assert captured == {
            "tool": "intel.lookup",
            "arguments": {"query": "kyoto ryokan", "format": "pricing", "metadata": {"budget": "mid"}},
        }

    @pytest.mark.asyncio
    async def test_gateway_failure_status(self):
        """Test that a failed gateway call is explained to the model."""
        config = ProviderConfig(mcp_endpoint="http://mcp.local/call")
        async with mock_client(lambda request: httpx.Response(502)) as client:
            registry = create_travel_registry(config, client)
            result = await registry.invoke("travel_intel_mcp", {"query": "anything"})

        assert result.startswith("MCP tool call failed (502)")

    def test_render_response_shapes(self):
        """Test rendering of the gateway payload variants."""
        assert render_response("plain") == "plain"
        assert render_response({"result": {"rooms": 3}}) == '{\n  "rooms": 3\n}'
        assert render_response({"data": [1]}) == "[\n  1\n]"
        assert render_response({"message": "queued"}) == "queued"
        assert render_response({"other": True}) == '{\n  "other": true\n}'


class TestLearningTools:
    """Tests for the deterministic learning tools."""

    @pytest.mark.asyncio
    async def test_city_weather_and_knowledge(self):
        """Test table lookups and their misses."""
        registry = create_learning_registry()

        assert await registry.invoke("get_weather", {"city": " Beijing "}) == "Sunny, 15-25°C"
        assert await registry.invoke("get_weather", {"city": "Oslo"}) == "Sorry, no weather data for Oslo"
        assert (await registry.invoke("search", {"query": "What is FastAPI?"})).startswith("FastAPI is")
        assert await registry.invoke("search", {"query": "rust"}) == "No relevant information found"

    @pytest.mark.asyncio
    async def test_user_location_from_context(self):
        """Test that the location tool reads the user id from the run context."""
        registry = create_learning_registry()

        assert await registry.invoke("get_user_location", {}, ToolContext.create(values={"user_id": "2"})) == "SF"
        assert await registry.invoke("get_user_location", {}) == "Unknown location for user (anonymous)"

    @pytest.mark.asyncio
    async def test_calculator(self):
        """Test the general calculator schema and dispatch."""
        registry = create_learning_registry()

        result = await registry.invoke("calculator", {"operation": "multiply", "a": 123, "b": 456})

        assert result == "123 × 456 = 56088"
        with pytest.raises(InvalidArguments):
            await registry.invoke("calculator", {"operation": "power", "a": 2, "b": 8})
