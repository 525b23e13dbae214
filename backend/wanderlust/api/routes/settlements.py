"""
Settlement routes: net balances and the transfers that settle them.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional
from wanderlust.db.session import get_db
from wanderlust.schemas.settlement import BalancesResponse, SettlementSummary
from wanderlust.services import expense_service
from wanderlust.services.settlement_service import calculate_settlement, compute_balances
from wanderlust.api.routes.trips import get_trip_or_404
from wanderlust.api.routes.expenses import resolve_folder_selection

router = APIRouter(prefix="/settlement", tags=["settlement"])


@router.get("/{trip_id}/balances", response_model=BalancesResponse)
async def get_balances(
    trip_id: int,
    folder_id: Optional[int] = None,
    all_folders: bool = False,
    db: Session = Depends(get_db)
):
    """Get each traveler's net balance (positive = is owed money)."""
    trip = get_trip_or_404(trip_id, db)
    selected = resolve_folder_selection(trip, folder_id, all_folders)

    participants, expenses = expense_service.load_ledger(trip, db, folder_id=selected)
    balances = compute_balances(participants, expenses)

    return BalancesResponse(
        trip_id=trip.id,
        currency=trip.currency,
        folder_id=selected,
        balances=balances
    )


@router.get("/{trip_id}", response_model=SettlementSummary)
async def get_settlement(
    trip_id: int,
    folder_id: Optional[int] = None,
    all_folders: bool = False,
    db: Session = Depends(get_db)
):
    """
    Calculate who pays whom.
    Recomputed on every request from the current ledger; nothing is stored.
    """
    trip = get_trip_or_404(trip_id, db)
    selected = resolve_folder_selection(trip, folder_id, all_folders)
    return calculate_settlement(trip, db, folder_id=selected)
