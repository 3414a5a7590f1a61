"""Canned learning scenarios run synchronously against the chat model."""

import json
from collections.abc import Awaitable, Callable

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage, ToolMessage
from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, Field

from app.config import AgentConfig
from app.models.messages import message_text
from app.services.orchestrator import RunResult, TurnOrchestrator
from app.services.prompts import LEARNING_SYSTEM_PROMPT, RESEARCH_SYSTEM_PROMPT
from app.tools.calculator import create_calculator_tool
from app.tools.demo import create_city_weather_tool, create_knowledge_search_tool
from app.tools.registry import ToolsRegistry
from app.utils.logging import get_logger

logger = get_logger(__name__)

EXAMPLE_TYPES: dict[str, dict[str, str]] = {
    "test-connection": {
        "label": "Test connection",
        "description": "Verify the model provider configuration",
        "category": "basic",
    },
    "simple-chat": {
        "label": "Simple chat",
        "description": "Basic single-turn conversation",
        "category": "basic",
    },
    "simple-history": {
        "label": "Chat with history",
        "description": "Answer with earlier turns as context",
        "category": "basic",
    },
    "tool-calling": {
        "label": "Tool calling",
        "description": "The model calls calculator and weather tools",
        "category": "advanced",
    },
    "structured-output": {
        "label": "Structured output",
        "description": "Return data matching a JSON schema",
        "category": "advanced",
    },
    "conversation": {
        "label": "Multi-turn conversation",
        "description": "Context carried across several turns",
        "category": "advanced",
    },
    "prompt-template": {
        "label": "Prompt template",
        "description": "Fill a reusable prompt with variables",
        "category": "advanced",
    },
    "simple-agent": {
        "label": "Simple agent",
        "description": "Reasoning plus tool use",
        "category": "advanced",
    },
}

SAMPLE_CODE = """
function calculateTotal(items) {
    var total = 0;
    for (var i = 0; i < items.length; i++) {
        total = total + items[i].price;
    }
    return total;
}"""

CODE_REVIEW_PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", "You are a senior {language} engineer focused on code quality and best practices."),
        (
            "human",
            "Review the following {language} code, point out potential problems and suggest improvements:"
            "\n\n```{language}\n{code}\n```",
        ),
    ]
)


class UnknownExampleType(ValueError):
    """The requested scenario is not in the catalogue."""


class PersonInfo(BaseModel):
    """Person details extracted from free text."""

    name: str = Field(description="Person's name")
    age: int = Field(description="Age in years")
    occupation: str = Field(description="Job title")
    skills: list[str] = Field(description="List of skills")
    bio: str = Field(description="Short biography")


def describe_run(result: RunResult) -> str:
    """Render the tool calls, tool results and answer of a run."""
    lines: list[str] = []
    for message in result.messages:
        if isinstance(message, AIMessage) and message.tool_calls:
            for tool_call in message.tool_calls:
                lines.append(f"Tool: {tool_call['name']}")
                lines.append(f"Arguments: {json.dumps(tool_call['args'], ensure_ascii=False)}")
        elif isinstance(message, ToolMessage):
            lines.append(f"Result: {message_text(message)}")
            lines.append("")

    lines.append(f"Final answer ({result.turns} turn(s)):")
    lines.append(result.answer)
    return "\n".join(lines)


class ExampleRunner:
    """Runs one learning scenario and returns its transcript."""

    def __init__(self, model: BaseChatModel, config: AgentConfig | None = None):
        self.model = model
        self.config = config or AgentConfig()
        self._scenarios: dict[str, Callable[[], Awaitable[str]]] = {
            "test-connection": self.test_connection,
            "simple-chat": self.simple_chat,
            "simple-history": self.simple_history,
            "tool-calling": self.tool_calling,
            "structured-output": self.structured_output,
            "conversation": self.conversation,
            "prompt-template": self.prompt_template,
            "simple-agent": self.simple_agent,
        }

    async def run(self, example_type: str) -> str:
        """Run a scenario by type.

        Raises:
            UnknownExampleType: If the type is not in ``EXAMPLE_TYPES``
        """
        scenario = self._scenarios.get(example_type)
        if scenario is None:
            raise UnknownExampleType(f"Unknown example type: {example_type}")

        logger.info(f"Running learning example: {example_type}")
        return await scenario()

    async def _ask(self, messages: str | list[BaseMessage]) -> str:
        return message_text(await self.model.ainvoke(messages))

    async def test_connection(self) -> str:
        reply = await self._ask("Please reply with: connection successful")
        return f"Model connection successful! Reply: {reply}"

    async def simple_chat(self) -> str:
        return await self._ask("Hello! Please briefly introduce what LangChain is.")

    async def simple_history(self) -> str:
        return await self._ask(
            [
                SystemMessage(content="You are a friendly AI assistant."),
                HumanMessage(content="What is LangChain?"),
                AIMessage(content="LangChain is a framework for building AI applications."),
                HumanMessage(content="What are its main features?"),
            ]
        )

    async def tool_calling(self) -> str:
        registry = ToolsRegistry([create_calculator_tool(), create_city_weather_tool()])
        orchestrator = TurnOrchestrator(self.model, registry, self.config, system_prompt=LEARNING_SYSTEM_PROMPT)
        result = await orchestrator.run(
            [HumanMessage(content="Please calculate 123 times 456, then tell me the weather in Beijing.")]
        )
        return "Tool calling:\n\n" + describe_run(result)

    async def structured_output(self) -> str:
        structured_model = self.model.with_structured_output(PersonInfo)
        person = await structured_model.ainvoke(
            [
                SystemMessage(content="You are a data extraction assistant that pulls structured facts from text."),
                HumanMessage(
                    content=(
                        "Extract the details: Li Ming is a 32-year-old software engineer skilled in Python, "
                        "TypeScript and AI application development. He has worked in tech for 8 years, "
                        "focusing on intelligent systems."
                    )
                ),
            ]
        )
        data = person.model_dump() if isinstance(person, BaseModel) else person
        return "Structured output:\n\n" + json.dumps(data, indent=2, ensure_ascii=False)

    async def conversation(self) -> str:
        messages: list[BaseMessage] = [
            SystemMessage(content="You are a friendly programming mentor who explains technical concepts well.")
        ]
        transcript = ["Conversation transcript:", ""]

        for question in (
            "What is LangChain?",
            "How is it different from LangGraph?",
            "Give me an example use case.",
        ):
            messages.append(HumanMessage(content=question))
            response = await self.model.ainvoke(messages)
            messages.append(response)
            transcript.append(f"User: {question}")
            transcript.append(f"AI: {message_text(response)}")
            transcript.append("")

        return "\n".join(transcript).rstrip()

    async def prompt_template(self) -> str:
        messages = CODE_REVIEW_PROMPT.format_messages(language="javascript", code=SAMPLE_CODE)
        return "Code review:\n\n" + await self._ask(messages)

    async def simple_agent(self) -> str:
        registry = ToolsRegistry([create_knowledge_search_tool()])
        orchestrator = TurnOrchestrator(self.model, registry, self.config, system_prompt=RESEARCH_SYSTEM_PROMPT)
        result = await orchestrator.run(
            [HumanMessage(content="What are LangChain and FastAPI? Can they be used together?")]
        )
        return "Agent workflow:\n\n" + describe_run(result)
