"""Tests for the stream multiplexer and ND-JSON framing."""

import asyncio
import json
from contextlib import aclosing

import pytest

from app.models.events import StreamEvent
from app.services.orchestrator import RunState
from app.services.streaming import EventEmitter, StreamMultiplexer, encode_ndjson


class TestMultiplexer:
    """Tests for ordering, completion and cancellation."""

    @pytest.mark.asyncio
    async def test_events_in_emission_order(self):
        """Test that interleaved channels come out in the order they were emitted."""

        async def producer(emitter):
            await emitter.update({"step": 1})
            await emitter.token({"content": "Hel"})
            await asyncio.sleep(0)
            await emitter.token({"content": "lo"})
            await emitter.custom({"progress": 100})
            await emitter.update({"step": 2})
            return "finished"

        multiplexer = StreamMultiplexer()
        events = [event async for event in multiplexer.stream(producer)]

        assert [(e.channel, e.payload) for e in events] == [
            ("update", {"step": 1}),
            ("token", {"content": "Hel"}),
            ("token", {"content": "lo"}),
            ("custom", {"progress": 100}),
            ("update", {"step": 2}),
        ]
        assert multiplexer.result == "finished"

    @pytest.mark.asyncio
    async def test_producer_error_after_events(self):
        """Test that a producer failure surfaces after the events emitted before it."""

        async def producer(emitter):
            await emitter.update({"step": 1})
            raise RuntimeError("boom")

        received = []
        with pytest.raises(RuntimeError, match="boom"):
            async for event in StreamMultiplexer().stream(producer):
                received.append(event)

        assert [e.payload for e in received] == [{"step": 1}]

    @pytest.mark.asyncio
    async def test_consumer_leaving_cancels_producer(self):
        """Test that closing the stream early cancels the producer task."""
        cancelled = asyncio.Event()

        async def producer(emitter):
            await emitter.update({"step": 1})
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        async with aclosing(StreamMultiplexer().stream(producer)) as events:
            async for _event in events:
                break

        assert cancelled.is_set()

    @pytest.mark.asyncio
    async def test_full_queue_pauses_producer(self):
        """Test that the producer waits once max_pending events are unread."""
        emitted = []

        async def producer(emitter):
            for step in range(5):
                await emitter.update({"step": step})
                emitted.append(step)
            return "finished"

        multiplexer = StreamMultiplexer(max_pending=2)
        async with aclosing(multiplexer.stream(producer)) as events:
            first = await anext(events)
            for _ in range(3):
                await asyncio.sleep(0)

            # One event taken, two waiting in the queue, the fourth emission blocked
            assert first.payload == {"step": 0}
            assert emitted == [0, 1, 2]

            rest = [event.payload async for event in events]

        assert rest == [{"step": 1}, {"step": 2}, {"step": 3}, {"step": 4}]
        assert emitted == [0, 1, 2, 3, 4]
        assert multiplexer.result == "finished"

    @pytest.mark.asyncio
    async def test_consumer_leaving_unblocks_full_queue(self):
        """Test that a producer waiting on a full queue is cancelled when the consumer leaves."""
        cancelled = asyncio.Event()

        async def producer(emitter):
            try:
                for step in range(10):
                    await emitter.update({"step": step})
            except asyncio.CancelledError:
                cancelled.set()
                raise

        async with aclosing(StreamMultiplexer(max_pending=1).stream(producer)) as events:
            async for _event in events:
                break

        assert cancelled.is_set()

    @pytest.mark.asyncio
    async def test_null_emitter_discards(self):
        """Test that an emitter without a queue accepts and drops events."""
        emitter = EventEmitter()

        await emitter.update({"ignored": True})

        assert emitter.closed

    @pytest.mark.asyncio
    async def test_closed_emitter_drops_events(self):
        """Test that nothing is queued after close."""
        queue: asyncio.Queue = asyncio.Queue()
        emitter = EventEmitter(queue)

        await emitter.token({"content": "a"})
        emitter.close()
        await emitter.token({"content": "b"})

        assert queue.qsize() == 1


class TestNdjson:
    """Tests for the wire framing."""

    def test_one_line_per_event_with_wire_modes(self):
        """Test that each channel maps to its wire mode on its own line."""
        events = [
            StreamEvent(channel="update", payload={"node": "agent"}),
            StreamEvent(channel="token", payload={"content": "Hi"}),
            StreamEvent(channel="custom", payload={"tool": "get_weather", "source": "mock"}),
        ]

        body = "".join(encode_ndjson(event) for event in events)
        lines = body.split("\n")

        assert lines[-1] == ""
        decoded = [json.loads(line) for line in lines[:-1]]
        assert [d["mode"] for d in decoded] == ["updates", "messages", "custom"]
        assert decoded[1]["chunk"] == {"content": "Hi"}

    def test_non_ascii_and_enums_serialized(self):
        """Test that text stays readable and non-JSON payload values are stringified."""
        line = encode_ndjson(StreamEvent(channel="update", payload={"state": RunState.COMPLETE, "answer": "28°C"}))

        assert "28°C" in line
        assert json.loads(line)["chunk"]["state"] == "complete"
