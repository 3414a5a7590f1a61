"""Shared fixtures."""

import pytest

from app.config import AgentConfig, ProviderConfig, Settings
from app.services.conversation_store import InMemoryConversationStore


@pytest.fixture
def agent_config():
    """Fast limits: no retry backoff and short timeouts."""
    return AgentConfig(max_turns=5, model_timeout=5, tool_timeout=2, max_model_retries=2, retry_delay=0)


@pytest.fixture
def provider_config():
    """No provider credentials, so every external tool answers with mock data."""
    return ProviderConfig()


@pytest.fixture
def settings(agent_config, provider_config):
    return Settings(agent=agent_config, providers=provider_config)


@pytest.fixture
def store():
    return InMemoryConversationStore()
