"""
Expense management routes: expenses, folders, categories and receipt scanning.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File
from sqlalchemy.orm import Session
from typing import List, Optional
from wanderlust.core.config import settings
from wanderlust.core.exceptions import LedgerError
from wanderlust.db.session import get_db
from wanderlust.models.expense import Expense, ExpenseFolder
from wanderlust.models.trip import Trip
from wanderlust.schemas.expense import (
    ExpenseCreate, ExpenseUpdate, ExpenseResponse, FolderCreate, FolderResponse,
    CategoryCreate, CategorySummaryResponse, ReceiptScanPreview
)
from wanderlust.services import expense_service, gemini_service
from wanderlust.api.routes.trips import get_trip_or_404

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/expenses", tags=["expenses"])


def get_folder_or_404(trip: Trip, folder_id: int) -> ExpenseFolder:
    """Find one of the trip's folders or fail with 404."""
    for folder in trip.folders:
        if folder.id == folder_id:
            return folder
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Folder not found"
    )


def resolve_folder_selection(trip: Trip, folder_id: Optional[int], all_folders: bool) -> Optional[int]:
    """
    Turn folder query parameters into the folder to filter on.

    Returns None when every folder is selected.
    """
    if all_folders:
        return None
    if folder_id is not None:
        return get_folder_or_404(trip, folder_id).id
    default_folder = expense_service.get_default_folder(trip)
    return default_folder.id if default_folder else None


def get_expense_or_404(expense_id: int, db: Session) -> Expense:
    expense = db.query(Expense).filter(Expense.id == expense_id).first()
    if not expense:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Expense not found"
        )
    return expense


def build_expense_response(expense: Expense) -> ExpenseResponse:
    """Build an expense response with the payer's display name."""
    return ExpenseResponse(
        id=expense.id,
        trip_id=expense.trip_id,
        folder_id=expense.folder_id,
        payer_id=expense.payer_id,
        payer_name=expense.payer.name if expense.payer else "",
        date=expense.date,
        amount=expense.amount,
        description=expense.description,
        category=expense.category,
        split_between=expense.split_between,
        created_at=expense.created_at,
        updated_at=expense.updated_at
    )


@router.get("/{trip_id}", response_model=List[ExpenseResponse])
async def list_expenses(
    trip_id: int,
    folder_id: Optional[int] = None,
    db: Session = Depends(get_db)
):
    """List expenses of a trip, newest first, optionally for one folder."""
    trip = get_trip_or_404(trip_id, db)
    if folder_id is not None:
        get_folder_or_404(trip, folder_id)

    expenses = expense_service.get_trip_expenses(trip, db, folder_id=folder_id)
    return [build_expense_response(e) for e in reversed(expenses)]


@router.post("/{trip_id}", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    trip_id: int,
    expense_data: ExpenseCreate,
    db: Session = Depends(get_db)
):
    """
    Create a new expense.

    Omitted payer, split, category and folder fall back to the trip's first
    traveler, all travelers, first category and default folder.
    """
    trip = get_trip_or_404(trip_id, db)

    try:
        expense = expense_service.create_expense(trip, expense_data, db)
    except LedgerError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return build_expense_response(expense)


@router.put("/{expense_id}", response_model=ExpenseResponse)
async def update_expense(
    expense_id: int,
    expense_data: ExpenseUpdate,
    db: Session = Depends(get_db)
):
    """Update an expense."""
    expense = get_expense_or_404(expense_id, db)

    try:
        expense = expense_service.update_expense(expense, expense_data, db)
    except LedgerError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return build_expense_response(expense)


@router.delete("/{expense_id}")
async def delete_expense(
    expense_id: int,
    db: Session = Depends(get_db)
):
    """Delete an expense."""
    expense = get_expense_or_404(expense_id, db)

    db.delete(expense)
    db.commit()

    return {"message": "Expense deleted successfully"}


@router.get("/{trip_id}/folders", response_model=List[FolderResponse])
async def list_folders(
    trip_id: int,
    db: Session = Depends(get_db)
):
    """List the trip's expense folders."""
    return get_trip_or_404(trip_id, db).folders


@router.post("/{trip_id}/folders", response_model=FolderResponse, status_code=status.HTTP_201_CREATED)
async def create_folder(
    trip_id: int,
    folder_data: FolderCreate,
    db: Session = Depends(get_db)
):
    """Create an expense folder."""
    trip = get_trip_or_404(trip_id, db)
    return expense_service.create_folder(trip, folder_data.name, db)


@router.get("/{trip_id}/categories", response_model=List[str])
async def list_categories(
    trip_id: int,
    db: Session = Depends(get_db)
):
    """List the trip's expense categories."""
    return get_trip_or_404(trip_id, db).categories or []


@router.post("/{trip_id}/categories", response_model=List[str])
async def add_category(
    trip_id: int,
    category_data: CategoryCreate,
    db: Session = Depends(get_db)
):
    """Add a category; adding an existing name is a no-op."""
    trip = get_trip_or_404(trip_id, db)
    return expense_service.add_category(trip, category_data.name, db)


@router.get("/{trip_id}/category-summary", response_model=CategorySummaryResponse)
async def get_category_summary(
    trip_id: int,
    folder_id: Optional[int] = None,
    all_folders: bool = False,
    db: Session = Depends(get_db)
):
    """
    Get spending by category.
    Covers one folder (the default folder unless folder_id is given) or,
    with all_folders, the whole trip.
    """
    trip = get_trip_or_404(trip_id, db)
    selected = resolve_folder_selection(trip, folder_id, all_folders)
    return expense_service.get_category_summary(trip, db, folder_id=selected)


@router.post("/{trip_id}/receipt", response_model=ReceiptScanPreview)
async def scan_receipt(
    trip_id: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db)
):
    """Extract expense fields from a receipt photo (preview only, nothing is saved)."""
    trip = get_trip_or_404(trip_id, db)

    if file.content_type not in settings.ALLOWED_IMAGE_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported image type: {file.content_type}"
        )
    content = await file.read()
    if len(content) > settings.MAX_UPLOAD_SIZE:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="Image is too large"
        )

    preview = await gemini_service.parse_receipt_image(content, file.content_type)

    # Unknown categories fall back to the trip's first category
    categories = trip.categories or []
    if preview.category not in categories:
        preview.category = categories[0] if categories else None

    return preview

