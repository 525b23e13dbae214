"""
Pydantic schemas for Settlement entity.
"""
from pydantic import BaseModel
from typing import List, Dict, Optional
from decimal import Decimal
from wanderlust.core.types import ParticipantId


class Settlement(BaseModel):
    """One directed payment: from_id owes amount to to_id."""
    from_id: ParticipantId
    to_id: ParticipantId
    amount: Decimal

    class Config:
        frozen = True


class Transfer(BaseModel):
    """Schema for a single transfer in settlement, with display names."""
    from_id: str
    from_name: str
    to_id: str
    to_name: str
    amount: Decimal


class BalancesResponse(BaseModel):
    """Schema for per-traveler net balances (positive = is owed money)."""
    trip_id: int
    currency: str
    folder_id: Optional[int] = None  # None when all folders are included
    balances: Dict[str, Decimal]  # traveler id -> unrounded net balance


class BalanceItem(BaseModel):
    """Schema for one traveler's net balance in a settlement summary."""
    id: str
    name: str
    balance: Decimal  # Rounded to cents


class SettlementSummary(BaseModel):
    """Schema for settlement summary."""
    trip_id: int
    currency: str
    folder_id: Optional[int] = None
    net_balances: List[BalanceItem]
    transfers: List[Transfer]
    total_spent: Decimal
    participant_count: int
    summary: str
