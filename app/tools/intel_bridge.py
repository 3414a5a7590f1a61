"""Bridge tool that delegates destination queries to an external MCP gateway."""

import json
from typing import Any, Literal

import httpx
from pydantic import BaseModel, Field

from app.clients.http import provider_client
from app.config import ProviderConfig
from app.errors import ProviderNotConfigured
from app.tools.base import ToolContext, ToolDefinition
from app.utils.logging import get_logger

logger = get_logger(__name__)

MOCK_INTEL: dict[str, str] = {
    "osaka food": (
        "Dotonbori must-eats in Osaka: takoyaki (35 CNY), kushikatsu (45 CNY), wagyu sukiyaki (180 CNY). "
        "Walk Shinsaibashi after dinner; shops close around 22:00."
    ),
    "tokyo onsen": (
        "Hakone onsen day passes cost about 300-400 CNY per person including yukata. Book ahead for weekends; "
        "JR Shinjuku to Hakone takes about 90 minutes."
    ),
}


class IntelInput(BaseModel):
    """Input schema for the travel intelligence bridge."""

    query: str = Field(..., min_length=1, description="What to look up, e.g. 'osaka food' or 'tokyo onsen'")
    format: Literal["insight", "pricing", "inventory"] = Field(default="insight", description="Kind of data wanted")
    metadata: dict[str, str] | None = Field(
        default=None, description="Extra context such as a user id or budget range"
    )


def render_response(payload: Any) -> str:
    """Turn a gateway response into text for the model."""
    if isinstance(payload, str):
        return payload

    if isinstance(payload, dict):
        if payload.get("result"):
            result = payload["result"]
            return result if isinstance(result, str) else json.dumps(result, indent=2, ensure_ascii=False)
        if payload.get("data"):
            return json.dumps(payload["data"], indent=2, ensure_ascii=False)
        if payload.get("message"):
            return str(payload["message"])

    return json.dumps(payload, indent=2, ensure_ascii=False)


def create_intel_bridge_tool(config: ProviderConfig, http_client: httpx.AsyncClient | None = None) -> ToolDefinition:
    async def travel_intel_handler(params: IntelInput, context: ToolContext) -> str:
        endpoint = config.mcp_endpoint
        tool_name = config.mcp_tool

        if not endpoint:
            if config.fallback == "strict":
                raise ProviderNotConfigured("MCP gateway", "TRAVEL_MCP_ENDPOINT")
            await context.emit({"tool": "travel_intel_mcp", "source": "mock", "query": params.query})
            return MOCK_INTEL.get(params.query.strip().lower()) or (
                "No MCP endpoint configured. Set TRAVEL_MCP_ENDPOINT to an MCP HTTP gateway to fetch live data "
                f"through the {tool_name} tool. Returning a simulated hint for reference."
            )

        body = {
            "tool": tool_name,
            "arguments": {"query": params.query, "format": params.format, "metadata": params.metadata},
        }

        try:
            async with provider_client(http_client, config.timeout) as client:
                response = await client.post(endpoint, json=body)

            if not response.is_success:
                logger.warning(f"MCP gateway {endpoint} returned {response.status_code}")
                return f"MCP tool call failed ({response.status_code}). Check that {endpoint} is reachable."

            try:
                payload = response.json()
            except ValueError:
                payload = response.text

        except httpx.HTTPError as e:
            logger.warning(f"MCP gateway call failed: {e!r}")
            return f"Error calling the MCP tool: {e}"

        await context.emit({"tool": "travel_intel_mcp", "source": "live", "query": params.query})
        return render_response(payload)

    return ToolDefinition(
        name="travel_intel_mcp",
        description=(
            "Query live destination intelligence, pricing or inventory through an external MCP service. "
            "Good for local food, bookings and company-internal travel data."
        ),
        input_schema_class=IntelInput,
        handler=travel_intel_handler,
    )
