"""Request and response models for the HTTP API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AgentRequest(BaseModel):
    """Request model for the streaming agent endpoints."""

    model_config = ConfigDict(populate_by_name=True)

    input: str = ""
    thread_id: str | None = Field(default=None, alias="threadId")
    context: dict[str, Any] = Field(default_factory=dict)

    @field_validator("context", mode="before")
    @classmethod
    def null_context_is_empty(cls, value: Any) -> Any:
        return {} if value is None else value


class ExampleResult(BaseModel):
    """Result of a learning scenario run."""

    result: str
    type: str


class ExampleInfo(BaseModel):
    """Catalogue entry for a learning scenario."""

    type: str
    label: str
    description: str
    category: str


class ErrorResponse(BaseModel):
    """Error body for the learning endpoints."""

    error: str


class ThreadMessage(BaseModel):
    """A persisted message as returned by the thread endpoint."""

    role: str
    content: str
    name: str | None = None
    tool_calls: list[dict[str, Any]] | None = None
    tool_call_id: str | None = None


class ThreadResponse(BaseModel):
    """Response model for the thread history endpoint."""

    thread_id: str
    messages: list[ThreadMessage]


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    timestamp: datetime
    version: str
