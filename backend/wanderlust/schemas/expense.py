"""
Pydantic schemas for Expense entity.
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional, Tuple
from datetime import date as dt_date, datetime
from decimal import Decimal
from wanderlust.core.types import ParticipantId, ExpenseId, FolderId


class Participant(BaseModel):
    """Immutable ledger participant as seen by the settlement engine."""
    id: ParticipantId
    name: str = ""

    class Config:
        frozen = True


class ExpenseRecord(BaseModel):
    """Immutable snapshot of one expense as seen by the settlement engine."""
    id: ExpenseId
    amount: Decimal = Field(ge=0)
    payer_id: ParticipantId
    split_between: Tuple[ParticipantId, ...]
    category: Optional[str] = None
    description: Optional[str] = None
    date: Optional[dt_date] = None
    folder_id: Optional[FolderId] = None

    class Config:
        frozen = True

    @field_validator("split_between")
    @classmethod
    def check_split_not_empty(cls, v):
        """An expense must be divided among at least one participant."""
        if not v:
            raise ValueError("split_between must name at least one participant")
        return v


class ExpenseCreate(BaseModel):
    """Schema for expense creation."""
    description: str = Field(min_length=1)
    amount: Decimal = Field(gt=0)
    date: Optional[dt_date] = None  # Defaults to today
    payer_id: Optional[int] = None  # Defaults to the trip's first traveler
    split_between: Optional[List[int]] = None  # Empty or omitted: all travelers
    category: Optional[str] = None  # Defaults to the trip's first category
    folder_id: Optional[int] = None  # Defaults to the trip's default folder


class ExpenseUpdate(BaseModel):
    """Schema for expense update."""
    description: Optional[str] = Field(default=None, min_length=1)
    amount: Optional[Decimal] = Field(default=None, gt=0)
    date: Optional[dt_date] = None
    payer_id: Optional[int] = None
    split_between: Optional[List[int]] = None
    category: Optional[str] = None
    folder_id: Optional[int] = None


class ExpenseResponse(BaseModel):
    """Schema for expense response."""
    id: int
    trip_id: int
    folder_id: Optional[int] = None
    payer_id: int
    payer_name: str
    date: dt_date
    amount: Decimal
    description: str
    category: Optional[str] = None
    split_between: List[int] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class FolderCreate(BaseModel):
    """Schema for folder creation."""
    name: str = Field(min_length=1, max_length=100)


class FolderResponse(BaseModel):
    """Schema for folder response."""
    id: int
    name: str
    is_default: bool

    class Config:
        from_attributes = True


class CategoryCreate(BaseModel):
    """Schema for adding a category to a trip."""
    name: str = Field(min_length=1, max_length=50)


class CategoryExpenseItem(BaseModel):
    """Schema for category expense item in summary."""
    category: str
    total_amount: Decimal  # Total amount spent in this category
    expense_count: int  # Number of expenses in this category
    percentage: float  # Percentage of total expenses (0-100)


class CategorySummaryResponse(BaseModel):
    """Schema for category summary response."""
    trip_id: int
    currency: str
    folder_id: Optional[int] = None  # None when all folders are included
    total_spent: Decimal
    categories: List[CategoryExpenseItem]  # Sorted by total, descending


class ReceiptScanPreview(BaseModel):
    """Expense fields extracted from a receipt image, for preview before saving."""
    amount: Optional[Decimal] = None
    description: Optional[str] = None
    date: Optional[dt_date] = None
    category: Optional[str] = None
