"""Agent runtimes: the explicitly constructed context of every orchestration run."""

import asyncio
from collections.abc import AsyncIterator, Mapping
from contextlib import aclosing, asynccontextmanager
from dataclasses import replace
from typing import Any

import httpx
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage

from app.clients.chat_model import create_chat_model
from app.config import Settings
from app.errors import AgentError, ModelUnavailable
from app.models.events import StreamEvent
from app.services.conversation_store import ConversationStore, InMemoryConversationStore
from app.services.orchestrator import RunResult, RunState, TurnOrchestrator
from app.services.prompts import LEARNING_SYSTEM_PROMPT, TRAVEL_SYSTEM_PROMPT
from app.services.streaming import StreamMultiplexer
from app.tools import ToolsRegistry, create_learning_registry, create_travel_registry
from app.utils.logging import get_logger
from app.utils.tokens import TokenCounter

logger = get_logger(__name__)


class ThreadLocks:
    """One asyncio lock per thread id, dropped once nobody holds or awaits it."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, thread_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(thread_id, asyncio.Lock())
        self._waiters[thread_id] = self._waiters.get(thread_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[thread_id] -= 1
            if self._waiters[thread_id] == 0:
                del self._waiters[thread_id]
                del self._locks[thread_id]

    def __len__(self) -> int:
        return len(self._locks)


def failure_payload(error: Exception) -> dict[str, Any]:
    """Final update event describing why a run failed."""
    if isinstance(error, ModelUnavailable):
        message = ModelUnavailable.user_message
    elif isinstance(error, AgentError):
        message = str(error)
    else:
        message = "I apologize, but I encountered an error. Please try again."

    return {
        "node": "run",
        "state": RunState.FAILED,
        "error": {"type": error.__class__.__name__, "message": message},
    }


class AgentRuntime:
    """Model, tools, store and per-thread locks shared by the runs of one agent."""

    def __init__(
        self,
        name: str,
        model: BaseChatModel,
        registry: ToolsRegistry,
        settings: Settings,
        *,
        store: ConversationStore | None = None,
        system_prompt: str | None = None,
    ):
        self.name = name
        self.model = model
        self.registry = registry
        self.settings = settings
        self.store = store or InMemoryConversationStore()
        self.locks = ThreadLocks()
        self.token_counter = TokenCounter(settings.agent.max_message_tokens)
        self.orchestrator = TurnOrchestrator(
            model,
            registry,
            settings.agent,
            system_prompt=system_prompt,
            store=self.store,
        )

    def validate_input(self, user_input: str) -> None:
        """Reject oversized messages before a run starts.

        Raises:
            ValueError: If the message exceeds the token limit
        """
        self.token_counter.validate(user_input)

    async def stream(
        self, user_input: str, thread_id: str, context: Mapping[str, Any] | None = None
    ) -> AsyncIterator[StreamEvent]:
        """Run one turn loop for a thread and yield its events.

        Runs of the same thread wait for each other. A failed run ends the
        stream with a ``failed`` update event instead of raising.
        """
        multiplexer = StreamMultiplexer()
        new_messages = [HumanMessage(content=user_input)]

        async def produce(emitter):
            return await self.orchestrator.run(new_messages, thread_id=thread_id, context=context, emitter=emitter)

        async with self.locks.hold(thread_id):
            logger.info(f"[{self.name}] Streaming run for thread {thread_id}: {user_input[:50]}...")
            try:
                async with aclosing(multiplexer.stream(produce)) as events:
                    async for event in events:
                        yield event
            except AgentError as e:
                logger.warning(f"[{self.name}] Run for thread {thread_id} failed: {e}")
                yield StreamEvent(channel="update", payload=failure_payload(e))
            except Exception as e:
                logger.error(f"[{self.name}] Run for thread {thread_id} crashed: {e}", exc_info=True)
                yield StreamEvent(channel="update", payload=failure_payload(e))

    async def invoke(
        self, user_input: str, thread_id: str, context: Mapping[str, Any] | None = None
    ) -> RunResult:
        """Run one turn loop for a thread without streaming; failures propagate."""
        async with self.locks.hold(thread_id):
            return await self.orchestrator.run(
                [HumanMessage(content=user_input)], thread_id=thread_id, context=context
            )

    async def history(self, thread_id: str) -> list[BaseMessage]:
        return await self.store.load(thread_id)


def create_travel_runtime(
    settings: Settings,
    model: BaseChatModel | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> AgentRuntime:
    """Travel planner with weather, search, budget, currency and MCP tools."""
    return AgentRuntime(
        "travel",
        model or create_chat_model(settings.model),
        create_travel_registry(settings.providers, http_client),
        settings,
        system_prompt=TRAVEL_SYSTEM_PROMPT,
    )


def create_learning_runtime(settings: Settings, model: BaseChatModel | None = None) -> AgentRuntime:
    """Deterministic learning tools with a zero-temperature model."""
    return AgentRuntime(
        "learning",
        model or create_chat_model(replace(settings.model, temperature=0.0)),
        create_learning_registry(),
        settings,
        system_prompt=LEARNING_SYSTEM_PROMPT,
    )
