"""Runtime configuration read from the environment."""

import os
from dataclasses import dataclass, field
from typing import Literal

ModelProvider = Literal["anthropic", "openai"]
FallbackMode = Literal["mock", "strict"]

DEFAULT_MODEL_NAMES: dict[str, str] = {
    "anthropic": "claude-3-7-sonnet-latest",
    "openai": "gpt-4o-mini",
}


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value else default


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


@dataclass
class ModelConfig:
    """Chat model selection and sampling parameters."""

    provider: ModelProvider = "anthropic"
    name: str = DEFAULT_MODEL_NAMES["anthropic"]
    temperature: float = 0.0
    max_tokens: int = 4096

    @classmethod
    def from_env(cls, default_temperature: float = 0.0) -> "ModelConfig":
        provider = os.getenv("MODEL_PROVIDER", "anthropic").lower()
        if provider not in DEFAULT_MODEL_NAMES:
            raise ValueError(f"Unsupported MODEL_PROVIDER: {provider}")

        return cls(
            provider=provider,  # type: ignore[arg-type]
            name=os.getenv("MODEL_NAME", DEFAULT_MODEL_NAMES[provider]),
            temperature=_env_float("MODEL_TEMPERATURE", default_temperature),
            max_tokens=_env_int("MODEL_MAX_TOKENS", 4096),
        )


@dataclass
class AgentConfig:
    """Limits for a single orchestration run."""

    max_turns: int = 10
    model_timeout: float = 60.0
    tool_timeout: float = 30.0
    max_model_retries: int = 2
    retry_delay: float = 1.0

    # Inbound message limit, checked before a run starts
    max_message_tokens: int = 2000

    @classmethod
    def from_env(cls) -> "AgentConfig":
        return cls(
            max_turns=_env_int("AGENT_MAX_TURNS", 10),
            model_timeout=_env_float("AGENT_MODEL_TIMEOUT", 60.0),
            tool_timeout=_env_float("AGENT_TOOL_TIMEOUT", 30.0),
            max_model_retries=_env_int("AGENT_MAX_MODEL_RETRIES", 2),
            retry_delay=_env_float("AGENT_RETRY_DELAY", 1.0),
            max_message_tokens=_env_int("MAX_MESSAGE_TOKENS", 2000),
        )


@dataclass
class ProviderConfig:
    """Credentials and endpoints of the external tool providers.

    A provider without credentials is "unconfigured". In ``mock`` fallback mode
    its tool answers with labelled simulated data; in ``strict`` mode the tool
    reports an error result instead.
    """

    openweathermap_api_key: str | None = None
    serper_api_key: str | None = None
    mcp_endpoint: str | None = None
    mcp_tool: str = "travel.intel"
    currency_rates: str | None = None

    fallback: FallbackMode = "mock"
    timeout: float = 10.0
    weather_language: str = "en"
    search_region: str = "us"
    search_language: str = "en"

    @classmethod
    def from_env(cls) -> "ProviderConfig":
        fallback = os.getenv("PROVIDER_FALLBACK", "mock").lower()
        if fallback not in ("mock", "strict"):
            raise ValueError(f"PROVIDER_FALLBACK must be 'mock' or 'strict', got {fallback!r}")

        return cls(
            openweathermap_api_key=os.getenv("OPENWEATHERMAP_API_KEY") or None,
            serper_api_key=os.getenv("SERPER_API_KEY") or None,
            mcp_endpoint=os.getenv("TRAVEL_MCP_ENDPOINT") or None,
            mcp_tool=os.getenv("TRAVEL_MCP_TOOL") or "travel.intel",
            currency_rates=os.getenv("TRAVEL_CURRENCY_RATES") or None,
            fallback=fallback,  # type: ignore[arg-type]
            timeout=_env_float("PROVIDER_TIMEOUT", 10.0),
            weather_language=os.getenv("WEATHER_LANGUAGE", "en"),
            search_region=os.getenv("SEARCH_REGION", "us"),
            search_language=os.getenv("SEARCH_LANGUAGE", "en"),
        )


@dataclass
class Settings:
    """All configuration needed to build the agent runtimes."""

    model: ModelConfig = field(default_factory=ModelConfig)
    agent: AgentConfig = field(default_factory=AgentConfig)
    providers: ProviderConfig = field(default_factory=ProviderConfig)

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            # Travel planning benefits from some variety
            model=ModelConfig.from_env(default_temperature=0.7),
            agent=AgentConfig.from_env(),
            providers=ProviderConfig.from_env(),
        )
