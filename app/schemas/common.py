"""Common Pydantic schemas used across the application"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Annotated, Union
from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel


COST_QUANTUM = Decimal("0.0001")


def to_decimal(value: Union[Decimal, int, float, str, None]) -> Decimal:
    """Convert a cost to Decimal without passing through binary float arithmetic"""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def format_cost(value: Union[Decimal, int, float, str, None]) -> str:
    """
    Render a cost as a fixed-point string.

    Rounded to four fractional digits, trailing zeros dropped down to a
    minimum of two: 0.05 -> "0.05", 0.0025 -> "0.0025", 0 -> "0.00".
    """
    amount = to_decimal(value).quantize(COST_QUANTUM, rounding=ROUND_HALF_UP)
    whole, _, fraction = f"{amount:f}".partition(".")
    fraction = fraction.rstrip("0").ljust(2, "0")
    return f"{whole}.{fraction}"


# Decimal on the way in, fixed-point string on the way out
CostAmount = Annotated[Decimal, PlainSerializer(format_cost, return_type=str)]


class CamelModel(BaseModel):
    """Base schema serialized with camelCase keys, the shape the dashboard UI uses"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
