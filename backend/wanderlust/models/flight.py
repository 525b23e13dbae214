"""
Flight model for tracked trip flights.
"""
from sqlalchemy import Column, String, Numeric, ForeignKey, Integer
from sqlalchemy.orm import relationship
from wanderlust.db.base import BaseModel


class Flight(BaseModel):
    """A flight attached to a trip."""
    __tablename__ = "flights"

    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    airline = Column(String(100), nullable=True)
    flight_number = Column(String(20), nullable=False)
    departure_time = Column(String(40), nullable=True)  # ISO datetime or HH:MM
    arrival_time = Column(String(40), nullable=True)
    departure_airport = Column(String(10), nullable=True)  # IATA code
    arrival_airport = Column(String(10), nullable=True)
    price = Column(Numeric(15, 2), nullable=True)
    status = Column(String(30), nullable=False, default="Scheduled")

    # Relationships
    trip = relationship("Trip", back_populates="flights")
