"""Chat model construction for the supported providers."""

from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI

from app.config import ModelConfig
from app.utils.logging import get_logger

logger = get_logger(__name__)


def create_chat_model(config: ModelConfig) -> BaseChatModel:
    """Create a LangChain chat model for the configured provider.

    Credentials are read by the provider integration from ANTHROPIC_API_KEY or
    OPENAI_API_KEY. Retries are handled by the orchestrator, so the SDK's own
    retry loop is disabled.
    """
    logger.info(f"Creating {config.provider} chat model {config.name} (temperature={config.temperature})")

    if config.provider == "openai":
        return ChatOpenAI(
            model=config.name,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            max_retries=0,
        )

    return ChatAnthropic(
        model=config.name,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        max_retries=0,
    )
