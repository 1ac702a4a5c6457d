"""
Numeric helpers shared by the aggregation services.

Money stays in Decimal end to end. Whole-number rounding matches
JavaScript Math.round used by dashboard clients (halves go toward +inf).
"""

from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP
from typing import Optional, Union

Number = Union[int, float, Decimal]


def to_decimal(value: Optional[Union[Number, str]]) -> Decimal:
    """Convert a number (or numeric string) to Decimal without float noise."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_half_up(value: Number) -> int:
    """
    Round to the nearest integer, halves toward positive infinity.

    round_half_up(2.5) == 3, round_half_up(-2.5) == -2.
    """
    d = to_decimal(value)
    return int((d + Decimal("0.5")).to_integral_value(rounding=ROUND_FLOOR))


def round_decimal(value: Decimal, places: int = 2) -> Decimal:
    """Round Decimal to specified decimal places."""
    if places == 0:
        return value.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return value.quantize(Decimal(f"0.{'0' * places}"), rounding=ROUND_HALF_UP)
