"""Conversation thread storage."""

from collections.abc import Sequence
from typing import Protocol

from cuid2 import cuid_wrapper
from langchain_core.messages import BaseMessage, messages_from_dict, messages_to_dict
from langgraph.store.base import BaseStore
from langgraph.store.memory import InMemoryStore

from app.models.messages import validate_history
from app.utils.logging import get_logger

logger = get_logger(__name__)

cuid = cuid_wrapper()

THREADS_NAMESPACE = "threads"
MESSAGES_KEY = "messages"


def generate_thread_id() -> str:
    """Generate a new CUID-based thread ID."""
    return cuid()


class ConversationStore(Protocol):
    """Persistence for conversation threads, keyed by thread id."""

    async def load(self, thread_id: str) -> list[BaseMessage]: ...

    async def append(self, thread_id: str, messages: Sequence[BaseMessage]) -> None: ...


class InMemoryConversationStore:
    """Non-durable thread store on top of a LangGraph key-value store.

    Any ``BaseStore`` works; the default ``InMemoryStore`` lives only as long
    as the process.
    """

    def __init__(self, store: BaseStore | None = None):
        self.store = store or InMemoryStore()

    @staticmethod
    def _namespace(thread_id: str) -> tuple[str, str]:
        return (THREADS_NAMESPACE, thread_id)

    async def load(self, thread_id: str) -> list[BaseMessage]:
        """Load a thread's messages; unknown threads are empty."""
        item = await self.store.aget(self._namespace(thread_id), MESSAGES_KEY)
        if item is None:
            return []
        return messages_from_dict(item.value["messages"])

    async def append(self, thread_id: str, messages: Sequence[BaseMessage]) -> None:
        """Append messages to the end of a thread.

        Raises:
            InvalidHistory: If the combined thread would contain an orphan tool message
        """
        if not messages:
            return

        history = await self.load(thread_id)
        combined = [*history, *messages]
        validate_history(combined)

        await self.store.aput(self._namespace(thread_id), MESSAGES_KEY, {"messages": messages_to_dict(combined)})
        logger.debug(f"Thread {thread_id}: appended {len(messages)} message(s), {len(combined)} total")

    async def delete(self, thread_id: str) -> None:
        await self.store.adelete(self._namespace(thread_id), MESSAGES_KEY)
