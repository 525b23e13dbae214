"""Models package - Import all models for SQLAlchemy registration."""
from wanderlust.models.trip import Trip, Traveler
from wanderlust.models.expense import Expense, ExpenseFolder, ExpenseShare
from wanderlust.models.flight import Flight

__all__ = [
    "Trip",
    "Traveler",
    "Expense",
    "ExpenseFolder",
    "ExpenseShare",
    "Flight",
]
