"""
Semantic types shared by the ledger.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import NewType, Union

ParticipantId = NewType("ParticipantId", str)
ExpenseId = NewType("ExpenseId", str)
FolderId = NewType("FolderId", str)

CENT = Decimal("0.01")


def to_money(value: Union[Decimal, int, float, str]) -> Decimal:
    """Convert a numeric value to Decimal without binary float noise."""
    if isinstance(value, Decimal):
        return value
    # str() first so 0.1 becomes Decimal("0.1"), not its float expansion
    return Decimal(str(value))


def round_money(value: Decimal) -> Decimal:
    """Round to cents, half away from zero."""
    rounded = value.quantize(CENT, rounding=ROUND_HALF_UP)
    # Drop the sign of a negative zero so it renders as 0.00
    return abs(rounded) if rounded == 0 else rounded
