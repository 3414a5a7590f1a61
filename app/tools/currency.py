"""Currency conversion tool using built-in or configured rates."""

import json
from dataclasses import dataclass

from pydantic import BaseModel, Field

from app.config import ProviderConfig
from app.tools.base import ToolContext, ToolDefinition
from app.utils.logging import get_logger

logger = get_logger(__name__)

# Value of one unit in CNY
DEFAULT_RATES: dict[str, float] = {
    "CNY": 1,
    "USD": 7.2,
    "EUR": 7.9,
    "THB": 0.2,
    "JPY": 0.048,
    "HKD": 0.92,
}


@dataclass(frozen=True)
class Conversion:
    """Outcome of a currency conversion."""

    value: float
    from_code: str
    to_code: str


def load_rates(raw: str | None) -> dict[str, float]:
    """Merge rates from a JSON object over the defaults; invalid input is ignored."""
    rates = dict(DEFAULT_RATES)
    if not raw:
        return rates

    try:
        custom = json.loads(raw)
        if not isinstance(custom, dict):
            raise ValueError("expected a JSON object")
        rates.update({code.strip().upper(): float(rate) for code, rate in custom.items()})
    except (ValueError, TypeError, AttributeError) as e:
        logger.warning(f"Ignoring TRAVEL_CURRENCY_RATES: {e}")
        return dict(DEFAULT_RATES)

    return rates


def convert(amount: float, from_code: str, to_code: str, rates: dict[str, float] | None = None) -> Conversion:
    """Convert an amount between currencies; unknown codes fall back to the CNY rate."""
    rates = rates or DEFAULT_RATES
    normalized_from = from_code.strip().upper()
    normalized_to = to_code.strip().upper()
    from_rate = rates.get(normalized_from, rates["CNY"])
    to_rate = rates.get(normalized_to, rates["CNY"])

    return Conversion(
        value=round(amount * from_rate / to_rate, 2),
        from_code=normalized_from,
        to_code=normalized_to,
    )


class CurrencyInput(BaseModel):
    """Input schema for the currency conversion tool."""

    amount: float = Field(..., description="Amount of money")
    from_: str = Field(..., alias="from", min_length=1, max_length=10, description="Source currency, e.g. CNY, USD")
    to: str = Field(..., min_length=1, max_length=10, description="Target currency, e.g. THB, EUR")


def create_currency_tool(config: ProviderConfig) -> ToolDefinition:
    rates = load_rates(config.currency_rates)

    async def convert_currency_handler(params: CurrencyInput, context: ToolContext) -> str:  # noqa: RUF029
        result = convert(params.amount, params.from_, params.to, rates)
        amount = int(params.amount) if params.amount.is_integer() else params.amount
        return (
            f"{amount} {result.from_code} ≈ {result.value:.2f} {result.to_code} "
            "(built-in rates; set TRAVEL_CURRENCY_RATES for current data)"
        )

    return ToolDefinition(
        name="convert_currency",
        description=(
            "Convert an amount between currencies so budgets can be compared in the destination's currency."
        ),
        input_schema_class=CurrencyInput,
        handler=convert_currency_handler,
    )
