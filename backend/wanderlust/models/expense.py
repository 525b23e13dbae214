"""
Expense models for the shared ledger.
"""
from sqlalchemy import Column, String, Numeric, Date, ForeignKey, Integer, Text, Boolean
from sqlalchemy.orm import relationship
from wanderlust.db.base import BaseModel


class ExpenseFolder(BaseModel):
    """User-defined grouping of expenses within one trip."""
    __tablename__ = "expense_folders"

    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    is_default = Column(Boolean, default=False, nullable=False)  # Holds expenses with no folder

    # Relationships
    trip = relationship("Trip", back_populates="folders")
    expenses = relationship("Expense", back_populates="folder")


class Expense(BaseModel):
    """Expense model representing one shared outlay."""
    __tablename__ = "expenses"

    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    folder_id = Column(Integer, ForeignKey("expense_folders.id"), nullable=True, index=True)
    payer_id = Column(Integer, ForeignKey("travelers.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(50), nullable=True)

    # Relationships
    trip = relationship("Trip", back_populates="expenses")
    folder = relationship("ExpenseFolder", back_populates="expenses")
    payer = relationship("Traveler", foreign_keys=[payer_id], back_populates="expenses_paid")
    shares = relationship("ExpenseShare", back_populates="expense", cascade="all, delete-orphan", order_by="ExpenseShare.id")

    @property
    def split_between(self) -> list:
        """Traveler ids the cost is divided among, in insertion order."""
        return [share.traveler_id for share in self.shares]


class ExpenseShare(BaseModel):
    """Junction table: one traveler assessed an equal share of an expense."""
    __tablename__ = "expense_shares"

    expense_id = Column(Integer, ForeignKey("expenses.id"), nullable=False, index=True)
    traveler_id = Column(Integer, ForeignKey("travelers.id"), nullable=False, index=True)

    # Relationships
    expense = relationship("Expense", back_populates="shares")
    traveler = relationship("Traveler", back_populates="expense_shares")
