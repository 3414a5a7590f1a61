"""Multiplexing of update, token and custom events into one ordered stream."""

import asyncio
import json
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

from pydantic_core import to_jsonable_python

from app.models.events import Channel, StreamEvent
from app.utils.logging import get_logger

logger = get_logger(__name__)

_DONE = object()

# Events a producer may run ahead of the consumer before emitting blocks
DEFAULT_MAX_PENDING = 256


class EventEmitter:
    """Producer-side handle: pushes channel-tagged events onto the shared queue.

    Emitting waits while the queue is full, so a slow consumer paces the
    producer instead of letting events pile up.
    """

    def __init__(self, queue: asyncio.Queue | None = None):
        self._queue = queue
        self.closed = queue is None

    async def emit(self, channel: Channel, payload: Any) -> None:
        if self.closed or self._queue is None:
            return
        await self._queue.put(StreamEvent(channel=channel, payload=payload))

    async def update(self, payload: Any) -> None:
        await self.emit("update", payload)

    async def token(self, payload: Any) -> None:
        await self.emit("token", payload)

    async def custom(self, payload: Any) -> None:
        await self.emit("custom", payload)

    def close(self) -> None:
        """Drop every later emission."""
        self.closed = True


class StreamMultiplexer:
    """Runs a producer and yields everything it emits, in emission order.

    All channels share one bounded FIFO queue, so per-channel order matches
    generation order and at most ``max_pending`` events wait for the
    consumer. The stream ends when the producer returns; a producer
    exception is raised to the consumer after the events emitted before it.
    """

    def __init__(self, max_pending: int = DEFAULT_MAX_PENDING) -> None:
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_pending)
        self.emitter = EventEmitter(self._queue)
        self.result: Any = None

    async def _run(self, producer: Callable[[EventEmitter], Awaitable[Any]]) -> Any:
        try:
            return await producer(self.emitter)
        finally:
            # A closed emitter means the consumer is gone and nobody drains the queue
            if not self.emitter.closed:
                await self._queue.put(_DONE)

    async def stream(self, producer: Callable[[EventEmitter], Awaitable[Any]]) -> AsyncIterator[StreamEvent]:
        task = asyncio.create_task(self._run(producer))
        try:
            while True:
                item = await self._queue.get()
                if item is _DONE:
                    break
                yield item
            self.result = await task
        finally:
            if not task.done():
                logger.info("Stream consumer went away, stopping producer")
                self.emitter.close()
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
                except Exception as e:
                    logger.debug(f"Producer ended with {e!r} after consumer left")


def encode_ndjson(event: StreamEvent) -> str:
    """Frame one event as a newline-terminated JSON object."""
    body = {"mode": event.mode, "chunk": to_jsonable_python(event.payload, fallback=str)}
    return json.dumps(body, ensure_ascii=False) + "\n"
