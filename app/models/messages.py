"""Message helpers on top of LangChain core messages."""

from collections.abc import Sequence
from typing import Any

from langchain_core.messages import AIMessage, BaseMessage, ToolMessage
from pydantic import BaseModel

from app.errors import InvalidHistory


class ToolCallRequest(BaseModel):
    """A tool invocation requested by the model."""

    id: str
    name: str
    args: dict[str, Any]

    @classmethod
    def from_message(cls, message: AIMessage) -> list["ToolCallRequest"]:
        return [cls(id=tc["id"] or "", name=tc["name"], args=tc["args"]) for tc in message.tool_calls]


def validate_history(messages: Sequence[BaseMessage]) -> None:
    """Check that every tool message answers an earlier assistant tool call.

    Raises:
        InvalidHistory: If a tool message references an unknown tool call id
    """
    requested: set[str] = set()
    for index, message in enumerate(messages):
        if isinstance(message, AIMessage):
            requested.update(tc["id"] for tc in message.tool_calls if tc["id"])
        elif isinstance(message, ToolMessage) and message.tool_call_id not in requested:
            raise InvalidHistory(
                f"Tool message at position {index} answers unknown tool call {message.tool_call_id!r}"
            )


def message_role(message: BaseMessage) -> str:
    """Map LangChain message types onto chat roles."""
    return {"human": "user", "ai": "assistant", "system": "system", "tool": "tool"}.get(message.type, message.type)


def message_text(message: BaseMessage) -> str:
    """Flatten message content into plain text."""
    content = message.content
    if isinstance(content, str):
        return content

    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)
