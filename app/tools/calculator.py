"""Arithmetic tools for budget calculations."""

from typing import Literal

from pydantic import BaseModel, Field

from app.tools.base import ToolContext, ToolDefinition


def format_number(value: float) -> str:
    """Render integral floats without a trailing ``.0``."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class MultiplyInput(BaseModel):
    """Input schema for the multiply tool."""

    a: float = Field(..., description="First number")
    b: float = Field(..., description="Second number")


class AdditionInput(BaseModel):
    """Input schema for the addition tool."""

    numbers: list[float] = Field(..., min_length=1, description="Numbers to add up")


class CalculatorInput(BaseModel):
    """Input schema for the general calculator tool."""

    operation: Literal["add", "subtract", "multiply", "divide"] = Field(..., description="Operation to perform")
    a: float = Field(..., description="First number")
    b: float = Field(..., description="Second number")


def calculate(operation: str, a: float, b: float) -> str:
    left, right = format_number(a), format_number(b)
    match operation:
        case "add":
            return f"{left} + {right} = {format_number(a + b)}"
        case "subtract":
            return f"{left} - {right} = {format_number(a - b)}"
        case "multiply":
            return f"{left} × {right} = {format_number(a * b)}"
        case "divide":
            if b == 0:
                return "Error: division by zero"
            return f"{left} ÷ {right} = {format_number(a / b)}"
    return f"Unsupported operation: {operation}"


async def multiply_handler(params: MultiplyInput, context: ToolContext) -> str:  # noqa: RUF029
    return calculate("multiply", params.a, params.b)


async def addition_handler(params: AdditionInput, context: ToolContext) -> str:  # noqa: RUF029
    calculation = " + ".join(format_number(n) for n in params.numbers)
    return f"{calculation} = {format_number(sum(params.numbers))}"


async def calculator_handler(params: CalculatorInput, context: ToolContext) -> str:  # noqa: RUF029
    return calculate(params.operation, params.a, params.b)


def create_multiply_tool() -> ToolDefinition:
    return ToolDefinition(
        name="multiply",
        description="Multiply two numbers, e.g. nightly price × number of nights.",
        input_schema_class=MultiplyInput,
        handler=multiply_handler,
    )


def create_addition_tool() -> ToolDefinition:
    return ToolDefinition(
        name="addition",
        description="Add up a list of numbers, e.g. hotel + food + tickets for a total budget.",
        input_schema_class=AdditionInput,
        handler=addition_handler,
    )


def create_calculator_tool() -> ToolDefinition:
    return ToolDefinition(
        name="calculator",
        description="Perform basic arithmetic: add, subtract, multiply or divide two numbers.",
        input_schema_class=CalculatorInput,
        handler=calculator_handler,
    )
