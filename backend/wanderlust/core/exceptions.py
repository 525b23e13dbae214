"""
Exceptions raised by the ledger and its collaborators.
"""
from typing import Optional


class LedgerError(ValueError):
    """Base class for ledger data errors."""


class ReferentialIntegrityError(LedgerError):
    """An expense refers to a participant that is not part of the ledger."""

    def __init__(self, participant_id: str, expense_id: Optional[str] = None):
        self.participant_id = participant_id
        self.expense_id = expense_id
        if expense_id is not None:
            message = f"Expense {expense_id} references unknown participant {participant_id!r}"
        else:
            message = f"Unknown participant {participant_id!r}"
        super().__init__(message)


class InvariantViolation(LedgerError):
    """A ledger record broke an invariant its constructor should have enforced."""


class TravelerInUseError(LedgerError):
    """A traveler cannot be removed while expenses still reference them."""


class LastTravelerError(LedgerError):
    """A trip must keep at least one traveler."""


class AIServiceError(RuntimeError):
    """The generative AI service failed or returned unusable content."""
