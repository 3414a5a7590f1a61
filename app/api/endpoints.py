"""API endpoints for the agent service."""

from collections.abc import AsyncIterator
from dataclasses import replace
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, StreamingResponse
from langchain_core.messages import AIMessage, BaseMessage, ToolMessage

from app import __version__
from app.clients.chat_model import create_chat_model
from app.config import Settings
from app.models.conversation import (
    AgentRequest,
    ErrorResponse,
    ExampleInfo,
    ExampleResult,
    HealthResponse,
    ThreadMessage,
    ThreadResponse,
)
from app.models.events import StreamEvent
from app.models.messages import message_role, message_text
from app.services.agent import AgentRuntime, create_learning_runtime, create_travel_runtime
from app.services.conversation_store import generate_thread_id
from app.services.examples import EXAMPLE_TYPES, ExampleRunner, UnknownExampleType
from app.services.streaming import encode_ndjson
from app.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()

NDJSON_MEDIA_TYPE = "application/x-ndjson"


async def get_settings(request: Request) -> Settings:
    """Settings are read from the environment once per application.

    The app-state dependencies are coroutines that never await, so FastAPI runs
    them on the event loop and a cold start builds each runtime exactly once.
    """
    if getattr(request.app.state, "settings", None) is None:
        request.app.state.settings = Settings.from_env()
    return request.app.state.settings


async def get_travel_runtime(request: Request, settings: Settings = Depends(get_settings)) -> AgentRuntime:
    if getattr(request.app.state, "travel_runtime", None) is None:
        logger.info("Creating travel agent runtime")
        request.app.state.travel_runtime = create_travel_runtime(settings)
    return request.app.state.travel_runtime


async def get_learning_runtime(request: Request, settings: Settings = Depends(get_settings)) -> AgentRuntime:
    if getattr(request.app.state, "learning_runtime", None) is None:
        logger.info("Creating learning agent runtime")
        request.app.state.learning_runtime = create_learning_runtime(settings)
    return request.app.state.learning_runtime


async def get_example_runner(request: Request, settings: Settings = Depends(get_settings)) -> ExampleRunner:
    if getattr(request.app.state, "example_runner", None) is None:
        model = create_chat_model(replace(settings.model, temperature=0.0))
        request.app.state.example_runner = ExampleRunner(model, settings.agent)
    return request.app.state.example_runner


async def _ndjson_lines(events: AsyncIterator[StreamEvent]) -> AsyncIterator[str]:
    async for event in events:
        yield encode_ndjson(event)


def _stream_agent(runtime: AgentRuntime, request: AgentRequest) -> StreamingResponse:
    thread_id = request.thread_id or generate_thread_id()

    try:
        runtime.validate_input(request.input)
    except ValueError as e:
        # Handle token validation errors with specific HTTP status
        logger.warning(f"Message validation error for thread {thread_id}: {e}")
        raise HTTPException(status_code=400, detail=str(e)) from e

    logger.info(f"Streaming {runtime.name} agent for thread {thread_id}: {request.input[:50]}...")
    events = runtime.stream(request.input, thread_id, request.context)
    return StreamingResponse(
        _ndjson_lines(events),
        media_type=NDJSON_MEDIA_TYPE,
        headers={"X-Thread-Id": thread_id},
    )


@router.post("/api/travel/agent", tags=["Agent"])
async def travel_agent(
    request: AgentRequest, runtime: AgentRuntime = Depends(get_travel_runtime)
) -> StreamingResponse:
    """Stream a travel planning run as newline-delimited JSON events."""
    return _stream_agent(runtime, request)


@router.post("/api/agent", tags=["Agent"], include_in_schema=False)
async def legacy_agent(
    request: AgentRequest, runtime: AgentRuntime = Depends(get_travel_runtime)
) -> StreamingResponse:
    """Legacy alias of the travel agent endpoint."""
    return _stream_agent(runtime, request)


@router.post("/api/learning/agent", tags=["Learning"])
async def learning_agent(
    request: AgentRequest, runtime: AgentRuntime = Depends(get_learning_runtime)
) -> StreamingResponse:
    """Stream a run of the learning agent (calculator, weather, knowledge, location tools)."""
    return _stream_agent(runtime, request)


@router.get("/api/learning/examples", response_model=list[ExampleInfo], tags=["Learning"])
async def list_examples() -> list[ExampleInfo]:
    return [ExampleInfo(type=example_type, **info) for example_type, info in EXAMPLE_TYPES.items()]


@router.post(
    "/api/learning/examples/{example_type}",
    response_model=ExampleResult,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    tags=["Learning"],
)
async def run_example(example_type: str, runner: ExampleRunner = Depends(get_example_runner)):
    """Run one learning scenario and return its transcript."""
    try:
        result = await runner.run(example_type)
    except UnknownExampleType as e:
        logger.warning(str(e))
        return JSONResponse(status_code=400, content={"error": str(e)})
    except Exception as e:
        logger.error(f"Learning example {example_type} failed: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": f"Example execution failed: {e}"})

    return ExampleResult(result=result, type=example_type)


def _thread_message(message: BaseMessage) -> ThreadMessage:
    thread_message = ThreadMessage(role=message_role(message), content=message_text(message))
    if isinstance(message, AIMessage) and message.tool_calls:
        thread_message.tool_calls = [
            {"id": tool_call["id"], "name": tool_call["name"], "args": tool_call["args"]}
            for tool_call in message.tool_calls
        ]
    elif isinstance(message, ToolMessage):
        thread_message.name = message.name
        thread_message.tool_call_id = message.tool_call_id
    return thread_message


@router.get("/api/threads/{thread_id}", response_model=ThreadResponse, tags=["Agent"])
async def get_thread(thread_id: str, runtime: AgentRuntime = Depends(get_travel_runtime)) -> ThreadResponse:
    """Persisted messages of a travel thread; unknown threads are empty."""
    messages = await runtime.history(thread_id)
    return ThreadResponse(thread_id=thread_id, messages=[_thread_message(message) for message in messages])


@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC),
        version=__version__,
    )
