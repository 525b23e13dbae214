"""
Expense service for ledger business logic.

Owns every state transition of a trip's ledger (travelers, folders,
categories, expenses) and produces the immutable snapshot the settlement
engine runs on.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session, selectinload
from wanderlust.core.config import settings
from wanderlust.core.exceptions import (
    LastTravelerError, LedgerError, ReferentialIntegrityError, TravelerInUseError
)
from wanderlust.models.expense import Expense, ExpenseFolder, ExpenseShare
from wanderlust.models.trip import Trip, Traveler
from wanderlust.schemas.expense import (
    CategoryExpenseItem, CategorySummaryResponse, ExpenseCreate, ExpenseRecord,
    ExpenseUpdate, Participant
)
from wanderlust.schemas.trip import BudgetStatus, TripCreate

logger = logging.getLogger(__name__)


def create_trip(trip_data: TripCreate, db: Session) -> Trip:
    """Create a trip seeded with default categories, the default folder and its travelers."""
    currency = (trip_data.currency or settings.DEFAULT_CURRENCY).upper()

    trip = Trip(
        name=trip_data.name,
        destination=trip_data.destination,
        duration=trip_data.duration,
        start_date=trip_data.start_date,
        budget=trip_data.budget,
        target_budget=trip_data.target_budget,
        currency=currency,
        categories=list(settings.DEFAULT_CATEGORIES),
        itinerary=[]
    )
    db.add(trip)
    db.flush()

    db.add(ExpenseFolder(trip_id=trip.id, name=settings.DEFAULT_FOLDER_NAME, is_default=True))
    for name in trip_data.traveler_names:
        if name.strip():
            db.add(Traveler(trip_id=trip.id, name=name.strip()))

    db.commit()
    db.refresh(trip)
    return trip


def get_default_folder(trip: Trip) -> Optional[ExpenseFolder]:
    """Get the folder that holds expenses with no explicit folder."""
    for folder in trip.folders:
        if folder.is_default:
            return folder
    return None


def create_folder(trip: Trip, name: str, db: Session) -> ExpenseFolder:
    """Create an expense folder for a trip."""
    folder = ExpenseFolder(trip_id=trip.id, name=name.strip(), is_default=False)
    db.add(folder)
    db.commit()
    db.refresh(folder)
    return folder


def add_category(trip: Trip, name: str, db: Session) -> List[str]:
    """Append a category to the trip; existing names are left as they are."""
    name = name.strip()
    categories = list(trip.categories or [])
    if name and name not in categories:
        # Assign a new list so SQLAlchemy detects the JSON change
        trip.categories = categories + [name]
        db.commit()
        db.refresh(trip)
    return list(trip.categories)


def add_traveler(trip: Trip, name: str, db: Session) -> Traveler:
    """Add a traveler to a trip."""
    traveler = Traveler(trip_id=trip.id, name=name.strip())
    db.add(traveler)
    db.commit()
    db.refresh(traveler)
    return traveler


def remove_traveler(trip: Trip, traveler: Traveler, db: Session):
    """
    Remove a traveler from a trip.

    The last traveler cannot be removed, and neither can one who paid for or
    shares in any expense: those expenses must be reassigned or deleted first.
    """
    if len(trip.travelers) <= 1:
        raise LastTravelerError("A trip must keep at least one traveler")

    paid = db.query(Expense).filter(
        Expense.trip_id == trip.id,
        Expense.payer_id == traveler.id
    ).count()
    shared = db.query(ExpenseShare).join(Expense).filter(
        Expense.trip_id == trip.id,
        ExpenseShare.traveler_id == traveler.id
    ).count()
    if paid or shared:
        raise TravelerInUseError(
            f"Traveler {traveler.name!r} is referenced by {paid + shared} expense record(s); "
            f"reassign or delete them first"
        )

    db.delete(traveler)
    db.commit()
    db.refresh(trip)


def _resolve_references(
    trip: Trip,
    payer_id: int,
    split_between: List[int],
    folder_id: Optional[int]
):
    """Check that payer, split members and folder belong to the trip."""
    traveler_ids = {t.id for t in trip.travelers}
    if payer_id not in traveler_ids:
        raise ReferentialIntegrityError(str(payer_id))
    for traveler_id in split_between:
        if traveler_id not in traveler_ids:
            raise ReferentialIntegrityError(str(traveler_id))
    if folder_id is not None and folder_id not in {f.id for f in trip.folders}:
        raise LedgerError(f"Folder {folder_id} does not belong to this trip")


def _dedupe(ids: List[int]) -> List[int]:
    # split_between is a set; keep first-seen order
    return list(dict.fromkeys(ids))


def create_expense(trip: Trip, expense_data: ExpenseCreate, db: Session) -> Expense:
    """
    Create an expense, filling in defaults.

    Payer defaults to the first traveler, the split to every traveler, the
    category to the trip's first category and the folder to the default one.
    """
    if not trip.travelers:
        raise LedgerError("Add a traveler before recording expenses")

    payer_id = expense_data.payer_id if expense_data.payer_id is not None else trip.travelers[0].id
    split_between = _dedupe(expense_data.split_between or [t.id for t in trip.travelers])

    folder_id = expense_data.folder_id
    if folder_id is None:
        default_folder = get_default_folder(trip)
        folder_id = default_folder.id if default_folder else None

    _resolve_references(trip, payer_id, split_between, folder_id)

    categories = trip.categories or []
    category = expense_data.category or (categories[0] if categories else "Other")

    expense = Expense(
        trip_id=trip.id,
        folder_id=folder_id,
        payer_id=payer_id,
        date=expense_data.date or date.today(),
        amount=expense_data.amount,
        description=expense_data.description,
        category=category
    )
    db.add(expense)
    db.flush()

    for traveler_id in split_between:
        db.add(ExpenseShare(expense_id=expense.id, traveler_id=traveler_id))

    db.commit()
    db.refresh(expense)

    logger.info(f"Created expense {expense.id} on trip {trip.id}: {expense.amount} split {len(split_between)} ways")
    return expense


def update_expense(expense: Expense, expense_data: ExpenseUpdate, db: Session) -> Expense:
    """Update an expense; an empty split_between resets the split to every traveler."""
    trip = expense.trip

    payer_id = expense_data.payer_id if expense_data.payer_id is not None else expense.payer_id
    folder_id = expense_data.folder_id if expense_data.folder_id is not None else expense.folder_id
    if expense_data.split_between is not None:
        split_between = _dedupe(expense_data.split_between or [t.id for t in trip.travelers])
    else:
        split_between = expense.split_between

    _resolve_references(trip, payer_id, split_between, folder_id)

    expense.payer_id = payer_id
    expense.folder_id = folder_id
    if expense_data.description is not None:
        expense.description = expense_data.description
    if expense_data.amount is not None:
        expense.amount = expense_data.amount
    if expense_data.date is not None:
        expense.date = expense_data.date
    if expense_data.category is not None:
        expense.category = expense_data.category

    if expense_data.split_between is not None:
        # Replace existing shares
        expense.shares.clear()
        db.flush()
        for traveler_id in split_between:
            expense.shares.append(ExpenseShare(traveler_id=traveler_id))

    db.commit()
    db.refresh(expense)
    return expense


def get_trip_expenses(trip: Trip, db: Session, folder_id: Optional[int] = None) -> List[Expense]:
    """
    Get a trip's expenses, oldest first.

    folder_id restricts to one folder; expenses with no folder count as part
    of the default folder. None returns every folder.
    """
    query = db.query(Expense).options(selectinload(Expense.shares)).filter(
        Expense.trip_id == trip.id
    ).order_by(Expense.id)
    expenses = query.all()

    if folder_id is None:
        return expenses

    default_folder = get_default_folder(trip)
    default_id = default_folder.id if default_folder else None
    return [e for e in expenses if (e.folder_id if e.folder_id is not None else default_id) == folder_id]


def load_ledger(
    trip: Trip,
    db: Session,
    folder_id: Optional[int] = None
) -> Tuple[List[Participant], List[ExpenseRecord]]:
    """Snapshot a trip's travelers and (optionally folder-filtered) expenses."""
    participants = [Participant(id=str(t.id), name=t.name) for t in trip.travelers]
    records = [
        ExpenseRecord(
            id=str(e.id),
            amount=e.amount,
            payer_id=str(e.payer_id),
            split_between=tuple(str(tid) for tid in e.split_between),
            category=e.category,
            description=e.description,
            date=e.date,
            folder_id=str(e.folder_id) if e.folder_id is not None else None
        )
        for e in get_trip_expenses(trip, db, folder_id=folder_id)
    ]
    return participants, records


def get_category_summary(
    trip: Trip,
    db: Session,
    folder_id: Optional[int] = None
) -> CategorySummaryResponse:
    """Total spent per category, largest first, over one folder or all of them."""
    expenses = get_trip_expenses(trip, db, folder_id=folder_id)

    total_spent = sum((e.amount for e in expenses), Decimal(0))

    # Group expenses by category
    category_totals = {}
    category_counts = {}
    for expense in expenses:
        category = expense.category or "Other"
        if category not in category_totals:
            category_totals[category] = Decimal(0)
            category_counts[category] = 0
        category_totals[category] += expense.amount
        category_counts[category] += 1

    # Build category items with percentage
    category_items = []
    for category, total_amount in category_totals.items():
        percentage = float((total_amount / total_spent * 100) if total_spent > 0 else 0)
        category_items.append(CategoryExpenseItem(
            category=category,
            total_amount=total_amount,
            expense_count=category_counts[category],
            percentage=percentage
        ))

    # Sort by total amount (descending)
    category_items.sort(key=lambda x: x.total_amount, reverse=True)

    return CategorySummaryResponse(
        trip_id=trip.id,
        currency=trip.currency,
        folder_id=folder_id,
        total_spent=total_spent,
        categories=category_items
    )


def get_budget_status(trip: Trip, db: Session) -> BudgetStatus:
    """Compare total spending across all folders with the trip's target budget."""
    expenses = get_trip_expenses(trip, db)
    total_spent = sum((e.amount for e in expenses), Decimal(0))

    target = trip.target_budget or Decimal(0)
    remaining = max(Decimal(0), target - total_spent)
    fill_ratio = float((total_spent / target * 100) if target > 0 else 0)

    return BudgetStatus(
        trip_id=trip.id,
        currency=trip.currency,
        target_budget=trip.target_budget,
        total_spent=total_spent,
        remaining=remaining,
        fill_ratio=fill_ratio,
        is_over_budget=target > 0 and total_spent > target
    )
