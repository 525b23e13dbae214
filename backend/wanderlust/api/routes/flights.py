"""
Flight tracking routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from wanderlust.db.session import get_db
from wanderlust.models.flight import Flight
from wanderlust.schemas.flight import FlightCreate, FlightUpdate, FlightResponse, FlightEmailParse
from wanderlust.services import gemini_service
from wanderlust.api.routes.trips import get_trip_or_404

router = APIRouter(prefix="/flights", tags=["flights"])


def get_flight_or_404(flight_id: int, db: Session) -> Flight:
    flight = db.query(Flight).filter(Flight.id == flight_id).first()
    if not flight:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Flight not found"
        )
    return flight


def add_flight(trip_id: int, flight_data: FlightCreate, db: Session) -> Flight:
    flight = Flight(trip_id=trip_id, **flight_data.model_dump())
    db.add(flight)
    db.commit()
    db.refresh(flight)
    return flight


@router.get("/{trip_id}", response_model=List[FlightResponse])
async def list_flights(
    trip_id: int,
    db: Session = Depends(get_db)
):
    """List the trip's flights."""
    return get_trip_or_404(trip_id, db).flights


@router.post("/{trip_id}", response_model=FlightResponse, status_code=status.HTTP_201_CREATED)
async def create_flight(
    trip_id: int,
    flight_data: FlightCreate,
    db: Session = Depends(get_db)
):
    """Add a flight manually."""
    get_trip_or_404(trip_id, db)
    return add_flight(trip_id, flight_data, db)


@router.post("/{trip_id}/parse-email", response_model=FlightResponse, status_code=status.HTTP_201_CREATED)
async def create_flight_from_email(
    trip_id: int,
    email: FlightEmailParse,
    db: Session = Depends(get_db)
):
    """Extract a flight from a pasted confirmation email and add it as Scheduled."""
    get_trip_or_404(trip_id, db)
    if not email.email_text.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email text is empty"
        )

    flight_data = await gemini_service.parse_flight_email(email.email_text)
    return add_flight(trip_id, flight_data, db)


@router.put("/{flight_id}", response_model=FlightResponse)
async def update_flight(
    flight_id: int,
    flight_data: FlightUpdate,
    db: Session = Depends(get_db)
):
    """Update a flight; only provided fields change."""
    flight = get_flight_or_404(flight_id, db)

    for field, value in flight_data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(flight, field, value)

    db.commit()
    db.refresh(flight)
    return flight


@router.delete("/{flight_id}")
async def delete_flight(
    flight_id: int,
    db: Session = Depends(get_db)
):
    """Delete a flight."""
    flight = get_flight_or_404(flight_id, db)
    db.delete(flight)
    db.commit()
    return {"message": "Flight deleted successfully"}
