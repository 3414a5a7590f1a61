"""Tool-calling turn loop between a chat model and a tools registry."""

import asyncio
import json
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import (
    AIMessage,
    AIMessageChunk,
    BaseMessage,
    SystemMessage,
    ToolMessage,
    message_chunk_to_message,
)

from app.config import AgentConfig
from app.errors import HandlerError, InvalidArguments, MaxTurnsExceeded, ModelUnavailable, UnknownTool
from app.models.messages import ToolCallRequest, message_text
from app.services.conversation_store import ConversationStore
from app.services.streaming import EventEmitter
from app.tools.base import ToolContext
from app.tools.registry import ToolsRegistry
from app.utils.logging import get_logger

logger = get_logger(__name__)


class RunState(StrEnum):
    """States of one orchestration run."""

    AWAITING_MODEL = "awaiting_model"
    TOOLS_REQUESTED = "tools_requested"
    EXECUTING_TOOLS = "executing_tools"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass
class RunResult:
    """Result from executing an orchestration run."""

    answer: str
    messages: list[BaseMessage]
    turns: int


def tool_result_text(result: Any) -> str:
    """Render a handler result as tool message content."""
    if result is None:
        return ""
    if isinstance(result, str):
        return result
    return json.dumps(result, ensure_ascii=False, default=str)


def merge_chunks(chunks: Sequence[BaseMessage]) -> AIMessage:
    """Fold streamed chunks into the complete assistant message."""
    if not chunks:
        raise ValueError("Model returned an empty response")

    merged = chunks[0]
    for chunk in chunks[1:]:
        merged = merged + chunk  # type: ignore[operator]

    if isinstance(merged, AIMessageChunk):
        return message_chunk_to_message(merged)  # type: ignore[return-value]
    if isinstance(merged, AIMessage):
        return merged
    raise ValueError(f"Unexpected model output type: {type(merged).__name__}")


def normalize_tool_calls(message: AIMessage) -> tuple[AIMessage, dict[str, str]]:
    """Give every tool call an id and fold unparseable calls into ``tool_calls``.

    Returns:
        The normalized message and a map of tool call id to parse error for
        calls whose arguments could not be decoded.
    """
    if not message.invalid_tool_calls and all(tc["id"] for tc in message.tool_calls):
        return message, {}

    tool_calls = [{**tc, "id": tc["id"] or f"call_{uuid.uuid4().hex[:12]}"} for tc in message.tool_calls]
    parse_errors: dict[str, str] = {}
    for invalid in message.invalid_tool_calls:
        call_id = invalid["id"] or f"call_{uuid.uuid4().hex[:12]}"
        parse_errors[call_id] = invalid.get("error") or f"could not parse arguments: {invalid.get('args')!r}"
        tool_calls.append({"name": invalid["name"] or "", "args": {}, "id": call_id, "type": "tool_call"})

    return message.model_copy(update={"tool_calls": tool_calls, "invalid_tool_calls": []}), parse_errors


class TurnOrchestrator:
    """Drives model turns and tool execution until the model answers in text.

    Each turn sends the full history to the model. A response without tool
    calls completes the run. Otherwise every requested tool runs concurrently,
    one tool message per call is appended, and the model is asked again. At
    most ``config.max_turns`` model calls happen per run.
    """

    def __init__(
        self,
        model: BaseChatModel,
        registry: ToolsRegistry,
        config: AgentConfig | None = None,
        *,
        system_prompt: str | None = None,
        store: ConversationStore | None = None,
    ):
        self.model = model
        self.registry = registry
        self.config = config or AgentConfig()
        self.system_prompt = system_prompt
        self.store = store
        self.bound_model = model.bind_tools(registry.get_tool_schemas()) if len(registry) else model

    async def run(
        self,
        new_messages: Sequence[BaseMessage],
        *,
        thread_id: str | None = None,
        history: Sequence[BaseMessage] | None = None,
        context: Mapping[str, Any] | None = None,
        emitter: EventEmitter | None = None,
    ) -> RunResult:
        """Execute one orchestration run.

        Args:
            new_messages: Messages to add this run, typically the user input
            thread_id: Thread to load and persist; nothing is persisted without it
            history: Prior messages; loaded from the store when omitted
            context: Caller data handed read-only to every tool handler
            emitter: Receives update, token and custom events

        Returns:
            Final answer, messages produced by the run, and turns used

        Raises:
            MaxTurnsExceeded: If the model still requests tools on the last turn
            ModelUnavailable: If the model keeps failing
            UnknownTool: If the model requests an unregistered tool
        """
        emitter = emitter or EventEmitter()
        if history is None:
            history = await self.store.load(thread_id) if self.store and thread_id else []

        tool_context = ToolContext.create(thread_id, context, sink=emitter.custom)
        produced: list[BaseMessage] = list(new_messages)
        unsaved: list[BaseMessage] = list(new_messages)
        max_turns = self.config.max_turns

        logger.info(
            f"Starting run for thread {thread_id} with {len(history)} prior messages, "
            f"{len(self.registry)} tools, max_turns: {max_turns}"
        )

        for turn in range(1, max_turns + 1):
            await emitter.update({"node": "agent", "state": RunState.AWAITING_MODEL, "turn": turn})
            response = await self._call_model(self._model_input(history, produced), emitter, turn)
            response, parse_errors = normalize_tool_calls(response)
            requests = ToolCallRequest.from_message(response)

            if not requests:
                answer = message_text(response)
                produced.append(response)
                unsaved.append(response)
                await self._persist(thread_id, unsaved)
                await emitter.update({"node": "agent", "state": RunState.COMPLETE, "turn": turn, "answer": answer})
                logger.info(f"Run for thread {thread_id} completed in {turn} turn(s)")
                return RunResult(answer=answer, messages=produced, turns=turn)

            logger.info(f"Model requested {len(requests)} tool call(s) on turn {turn}")
            await emitter.update(
                {
                    "node": "agent",
                    "state": RunState.TOOLS_REQUESTED,
                    "turn": turn,
                    "content": message_text(response),
                    "tool_calls": [request.model_dump() for request in requests],
                }
            )

            if turn == max_turns:
                break

            for request in requests:
                if not self.registry.has_tool(request.name):
                    logger.error(f"Unknown tool requested: {request.name}")
                    raise UnknownTool(request.name, request.id)

            await emitter.update({"node": "tools", "state": RunState.EXECUTING_TOOLS, "turn": turn})
            tool_messages = await self._execute_tools(requests, parse_errors, tool_context, emitter, turn)

            produced.extend([response, *tool_messages])
            unsaved.extend([response, *tool_messages])
            await self._persist(thread_id, unsaved)
            unsaved = []

        logger.warning(f"Run for thread {thread_id} reached max turns ({max_turns})")
        raise MaxTurnsExceeded(max_turns)

    def _model_input(self, history: Sequence[BaseMessage], produced: Sequence[BaseMessage]) -> list[BaseMessage]:
        messages: list[BaseMessage] = [SystemMessage(content=self.system_prompt)] if self.system_prompt else []
        return [*messages, *history, *produced]

    async def _call_model(self, messages: list[BaseMessage], emitter: EventEmitter, turn: int) -> AIMessage:
        """Stream one model response, emitting text fragments as they arrive.

        Failed attempts are retried with exponential backoff as long as no
        fragment of that attempt reached the client.
        """
        attempt = 0
        while True:
            attempt += 1
            streamed = False
            try:
                chunks: list[BaseMessage] = []
                async with asyncio.timeout(self.config.model_timeout):
                    async for chunk in self.bound_model.astream(messages):
                        chunks.append(chunk)
                        text = message_text(chunk)
                        if text:
                            streamed = True
                            await emitter.token({"content": text, "turn": turn})
                return merge_chunks(chunks)

            except Exception as e:
                if streamed or attempt > self.config.max_model_retries:
                    logger.error(f"Model call failed on turn {turn} after {attempt} attempt(s): {e!r}")
                    raise ModelUnavailable(attempt, repr(e)) from e

                delay = self.config.retry_delay * (2 ** (attempt - 1))
                logger.warning(f"Model call failed on turn {turn} ({e!r}), retrying in {delay:.1f}s")
                await asyncio.sleep(delay)

    async def _execute_tools(
        self,
        requests: list[ToolCallRequest],
        parse_errors: dict[str, str],
        context: ToolContext,
        emitter: EventEmitter,
        turn: int,
    ) -> list[ToolMessage]:
        """Run all tool calls of a turn concurrently; results keep request order."""

        async def run_one(request: ToolCallRequest) -> ToolMessage:
            try:
                if request.id in parse_errors:
                    raise InvalidArguments(request.name, request.id, parse_errors[request.id])

                result = await self.registry.invoke(
                    request.name,
                    request.args,
                    context.for_call(request.id),
                    timeout=self.config.tool_timeout,
                )
                message = ToolMessage(content=tool_result_text(result), tool_call_id=request.id, name=request.name)

            except (InvalidArguments, HandlerError) as e:
                message = ToolMessage(
                    content=f"Error: {e}",
                    tool_call_id=request.id,
                    name=request.name,
                    status="error",
                )

            await emitter.update(
                {
                    "node": "tools",
                    "turn": turn,
                    "name": request.name,
                    "tool_call_id": request.id,
                    "status": message.status,
                    "content": message.content,
                }
            )
            return message

        return list(await asyncio.gather(*(run_one(request) for request in requests)))

    async def _persist(self, thread_id: str | None, messages: list[BaseMessage]) -> None:
        if self.store is None or thread_id is None or not messages:
            return
        await self.store.append(thread_id, messages)
