"""
Trip management routes.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from wanderlust.db.session import get_db
from wanderlust.core.exceptions import LastTravelerError, TravelerInUseError
from wanderlust.models.trip import Trip, Traveler
from wanderlust.schemas.trip import (
    TripCreate, TripUpdate, TripResponse, TripDetailResponse,
    TravelerCreate, TravelerResponse, ItineraryRequest, TripInsights, BudgetStatus
)
from wanderlust.services import expense_service, gemini_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trips", tags=["trips"])


def get_trip_or_404(trip_id: int, db: Session) -> Trip:
    """Load a trip or fail with 404."""
    trip = db.query(Trip).filter(Trip.id == trip_id).first()
    if not trip:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Trip not found"
        )
    return trip


@router.post("", response_model=TripDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_trip(
    trip_data: TripCreate,
    db: Session = Depends(get_db)
):
    """Create a new trip with the default folder and categories."""
    return expense_service.create_trip(trip_data, db)


@router.get("", response_model=List[TripResponse])
async def list_trips(db: Session = Depends(get_db)):
    """List all trips, most recently updated first."""
    return db.query(Trip).order_by(Trip.updated_at.desc(), Trip.id.desc()).all()


@router.get("/{trip_id}", response_model=TripDetailResponse)
async def get_trip(
    trip_id: int,
    db: Session = Depends(get_db)
):
    """Get trip details with travelers, folders, flights and plans."""
    return get_trip_or_404(trip_id, db)


@router.put("/{trip_id}", response_model=TripDetailResponse)
async def update_trip(
    trip_id: int,
    trip_data: TripUpdate,
    db: Session = Depends(get_db)
):
    """Update trip details."""
    trip = get_trip_or_404(trip_id, db)

    if trip_data.name is not None:
        trip.name = trip_data.name
    if trip_data.destination is not None:
        trip.destination = trip_data.destination
    if trip_data.duration is not None:
        trip.duration = trip_data.duration
    if trip_data.start_date is not None:
        trip.start_date = trip_data.start_date
    if trip_data.budget is not None:
        trip.budget = trip_data.budget
    if trip_data.target_budget is not None:
        trip.target_budget = trip_data.target_budget
    if trip_data.currency is not None:
        trip.currency = trip_data.currency.upper()
    if trip_data.itinerary is not None:
        trip.itinerary = [day.model_dump() for day in trip_data.itinerary]

    db.commit()
    db.refresh(trip)
    return trip


@router.delete("/{trip_id}")
async def delete_trip(
    trip_id: int,
    db: Session = Depends(get_db)
):
    """Delete a trip and everything in it."""
    trip = get_trip_or_404(trip_id, db)
    db.delete(trip)
    db.commit()
    return {"message": "Trip deleted successfully"}


@router.get("/{trip_id}/budget", response_model=BudgetStatus)
async def get_budget_status(
    trip_id: int,
    db: Session = Depends(get_db)
):
    """Get total spending against the trip's target budget."""
    trip = get_trip_or_404(trip_id, db)
    return expense_service.get_budget_status(trip, db)


@router.get("/{trip_id}/travelers", response_model=List[TravelerResponse])
async def list_travelers(
    trip_id: int,
    db: Session = Depends(get_db)
):
    """List the trip's travelers."""
    return get_trip_or_404(trip_id, db).travelers


@router.post("/{trip_id}/travelers", response_model=TravelerResponse, status_code=status.HTTP_201_CREATED)
async def add_traveler(
    trip_id: int,
    traveler_data: TravelerCreate,
    db: Session = Depends(get_db)
):
    """Add a traveler to the trip."""
    trip = get_trip_or_404(trip_id, db)
    return expense_service.add_traveler(trip, traveler_data.name, db)


@router.delete("/{trip_id}/travelers/{traveler_id}")
async def remove_traveler(
    trip_id: int,
    traveler_id: int,
    db: Session = Depends(get_db)
):
    """
    Remove a traveler from the trip.

    Refused for the last traveler, and for travelers still referenced by an
    expense as payer or split member.
    """
    trip = get_trip_or_404(trip_id, db)

    traveler = db.query(Traveler).filter(
        Traveler.id == traveler_id,
        Traveler.trip_id == trip_id
    ).first()
    if not traveler:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Traveler not found"
        )

    try:
        expense_service.remove_traveler(trip, traveler, db)
    except LastTravelerError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except TravelerInUseError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return {"message": "Traveler removed successfully"}


@router.post("/{trip_id}/itinerary", response_model=TripDetailResponse)
async def generate_itinerary(
    trip_id: int,
    request: ItineraryRequest,
    db: Session = Depends(get_db)
):
    """Generate an itinerary with the AI service and store it on the trip."""
    trip = get_trip_or_404(trip_id, db)

    destination = request.destination or trip.destination
    days = request.days or trip.duration
    if not destination or not days:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Destination and number of days are required"
        )

    generated = await gemini_service.generate_itinerary(
        destination=destination,
        days=days,
        interests=request.interests,
        budget=request.budget or trip.budget or "Moderate",
        currency=trip.currency,
        target_budget=trip.target_budget
    )

    trip.destination = generated.destination
    trip.duration = generated.duration
    trip.itinerary = [day.model_dump() for day in generated.itinerary]
    db.commit()
    db.refresh(trip)
    return trip


@router.post("/{trip_id}/insights", response_model=TripInsights)
async def refresh_insights(
    trip_id: int,
    db: Session = Depends(get_db)
):
    """Fetch weather, safety and tips for the trip's destination."""
    trip = get_trip_or_404(trip_id, db)
    if not trip.destination:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Trip has no destination"
        )

    insights = await gemini_service.generate_trip_insights(trip.destination, trip.start_date)

    trip.insights = insights.model_dump(mode="json")
    db.commit()
    return insights
