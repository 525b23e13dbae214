"""
Pydantic schemas for Flight entity.
"""
from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from decimal import Decimal


class FlightBase(BaseModel):
    """Base flight schema."""
    airline: Optional[str] = None
    flight_number: str
    departure_time: Optional[str] = None  # ISO datetime or HH:MM
    arrival_time: Optional[str] = None
    departure_airport: Optional[str] = None  # IATA code, e.g. JFK
    arrival_airport: Optional[str] = None
    price: Optional[Decimal] = None
    status: str = "Scheduled"


class FlightCreate(FlightBase):
    """Schema for flight creation."""
    pass


class FlightUpdate(BaseModel):
    """Schema for flight update."""
    airline: Optional[str] = None
    flight_number: Optional[str] = None
    departure_time: Optional[str] = None
    arrival_time: Optional[str] = None
    departure_airport: Optional[str] = None
    arrival_airport: Optional[str] = None
    price: Optional[Decimal] = None
    status: Optional[str] = None


class FlightResponse(FlightBase):
    """Schema for flight response."""
    id: int
    trip_id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class FlightEmailParse(BaseModel):
    """Schema for a pasted flight confirmation email."""
    email_text: str
