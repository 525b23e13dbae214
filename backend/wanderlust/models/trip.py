"""
Trip model for travel planning and shared expenses.
"""
from sqlalchemy import Column, String, Date, Numeric, ForeignKey, Integer, JSON
from sqlalchemy.orm import relationship
from wanderlust.db.base import BaseModel


class Trip(BaseModel):
    """Trip model: the saved "project" holding itinerary, travelers and ledger."""
    __tablename__ = "trips"

    name = Column(String(200), nullable=False)
    destination = Column(String(200), nullable=True)
    duration = Column(Integer, nullable=True)  # Days
    start_date = Column(Date, nullable=True)
    budget = Column(String(50), nullable=True)  # Free-text level, e.g. "Moderate"
    target_budget = Column(Numeric(15, 2), nullable=True)
    currency = Column(String(3), nullable=False, default="USD")
    categories = Column(JSON, nullable=False, default=list)  # Ordered list of category names
    itinerary = Column(JSON, nullable=False, default=list)  # List of day plans
    insights = Column(JSON, nullable=True)  # Markdown content, sources, last_fetched

    # Relationships
    travelers = relationship("Traveler", back_populates="trip", cascade="all, delete-orphan", order_by="Traveler.id")
    folders = relationship("ExpenseFolder", back_populates="trip", cascade="all, delete-orphan", order_by="ExpenseFolder.id")
    expenses = relationship("Expense", back_populates="trip", cascade="all, delete-orphan")
    flights = relationship("Flight", back_populates="trip", cascade="all, delete-orphan", order_by="Flight.id")

    @property
    def traveler_count(self) -> int:
        return len(self.travelers)


class Traveler(BaseModel):
    """A person sharing the trip's expenses."""
    __tablename__ = "travelers"

    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)

    # Relationships
    trip = relationship("Trip", back_populates="travelers")
    expenses_paid = relationship("Expense", foreign_keys="Expense.payer_id", back_populates="payer")
    expense_shares = relationship("ExpenseShare", back_populates="traveler")
