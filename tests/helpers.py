"""Test doubles shared by the test modules."""

import json
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, AIMessageChunk, BaseMessage
from langchain_core.outputs import ChatGeneration, ChatGenerationChunk, ChatResult
from pydantic import Field


def tool_call(name: str, args: dict[str, Any], call_id: str) -> dict[str, Any]:
    return {"name": name, "args": args, "id": call_id, "type": "tool_call"}


def tool_request(*calls: dict[str, Any], content: str = "") -> AIMessage:
    """Assistant message requesting the given tool calls."""
    return AIMessage(content=content, tool_calls=list(calls))


class ScriptedChatModel(BaseChatModel):
    """Chat model that replays scripted responses, one per call.

    A scripted ``Exception`` is raised instead of answering. Text answers are
    streamed word by word; tool calls arrive as a single chunk.
    """

    responses: list[Any] = Field(default_factory=list)
    received: list[list[BaseMessage]] = Field(default_factory=list)
    bound_tools: list[Any] = Field(default_factory=list)
    gate: Any = None

    @property
    def _llm_type(self) -> str:
        return "scripted"

    def bind_tools(self, tools, **kwargs):
        self.bound_tools = list(tools)
        return self

    def _next_response(self, messages: list[BaseMessage]) -> AIMessage:
        self.received.append(list(messages))
        if not self.responses:
            raise RuntimeError("Scripted model ran out of responses")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def _generate(self, messages, stop=None, run_manager=None, **kwargs) -> ChatResult:
        return ChatResult(generations=[ChatGeneration(message=self._next_response(messages))])

    async def _astream(self, messages, stop=None, run_manager=None, **kwargs):
        if self.gate is not None:
            await self.gate.wait()

        response = self._next_response(messages)

        if not response.tool_calls and not response.invalid_tool_calls:
            words = response.content.split(" ")
            for index, word in enumerate(words):
                piece = word if index == 0 else f" {word}"
                yield ChatGenerationChunk(message=AIMessageChunk(content=piece))
            return

        chunks = [
            {"name": tc["name"], "args": json.dumps(tc["args"]), "id": tc["id"], "index": index, "type": "tool_call_chunk"}
            for index, tc in enumerate(response.tool_calls)
        ]
        offset = len(chunks)
        chunks.extend(
            {"name": tc["name"], "args": tc["args"], "id": tc["id"], "index": offset + index, "type": "tool_call_chunk"}
            for index, tc in enumerate(response.invalid_tool_calls)
        )
        yield ChatGenerationChunk(message=AIMessageChunk(content=response.content, tool_call_chunks=chunks))
