"""
Pydantic schemas for Trip entity.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from wanderlust.schemas.expense import FolderResponse
from wanderlust.schemas.flight import FlightResponse


class Activity(BaseModel):
    """One scheduled activity of an itinerary day."""
    time: str = ""
    activity: str = ""
    location: str = ""
    description: str = ""
    estimated_cost: Optional[str] = None


class DayPlan(BaseModel):
    """Itinerary for a single day."""
    day: int
    theme: str = ""
    activities: List[Activity] = []


class InsightSource(BaseModel):
    """Web page the travel insights were grounded on."""
    title: str = ""
    uri: str


class TripInsights(BaseModel):
    """Weather, safety and practical tips for a destination."""
    content: str  # Markdown
    sources: List[InsightSource] = []
    last_fetched: datetime


class GeneratedItinerary(BaseModel):
    """Itinerary returned by the AI service."""
    destination: str
    duration: int
    itinerary: List[DayPlan] = []


class TripBase(BaseModel):
    """Base trip schema."""
    name: str = Field(min_length=1, max_length=200)
    destination: Optional[str] = None
    duration: Optional[int] = Field(default=None, ge=1)
    start_date: Optional[date] = None
    budget: Optional[str] = None  # Free-text level, e.g. "Moderate"
    target_budget: Optional[Decimal] = Field(default=None, ge=0)


class TripCreate(TripBase):
    """Schema for trip creation."""
    currency: Optional[str] = None  # Defaults to settings.DEFAULT_CURRENCY
    traveler_names: List[str] = []


class TripUpdate(BaseModel):
    """Schema for trip update."""
    name: Optional[str] = None
    destination: Optional[str] = None
    duration: Optional[int] = Field(default=None, ge=1)
    start_date: Optional[date] = None
    budget: Optional[str] = None
    target_budget: Optional[Decimal] = Field(default=None, ge=0)
    currency: Optional[str] = None
    itinerary: Optional[List[DayPlan]] = None


class TripResponse(TripBase):
    """Schema for trip response."""
    id: int
    currency: str
    categories: List[str] = []
    traveler_count: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TravelerCreate(BaseModel):
    """Schema for adding a traveler."""
    name: str = Field(min_length=1, max_length=100)


class TravelerResponse(BaseModel):
    """Schema for traveler response."""
    id: int
    name: str

    class Config:
        from_attributes = True


class TripDetailResponse(TripResponse):
    """Schema for detailed trip response with travelers, folders and plans."""
    travelers: List[TravelerResponse] = []
    folders: List[FolderResponse] = []
    flights: List[FlightResponse] = []
    itinerary: List[DayPlan] = []
    insights: Optional[TripInsights] = None


class ItineraryRequest(BaseModel):
    """Schema for requesting an AI-generated itinerary."""
    destination: Optional[str] = None  # Defaults to the trip's destination
    days: Optional[int] = Field(default=None, ge=1, le=30)  # Defaults to the trip's duration
    interests: str = ""
    budget: Optional[str] = None  # Defaults to the trip's budget level


class BudgetStatus(BaseModel):
    """Spending against the trip's target budget."""
    trip_id: int
    currency: str
    target_budget: Optional[Decimal] = None  # None when no target is set
    total_spent: Decimal  # Across all folders
    remaining: Decimal  # Never below zero
    fill_ratio: float  # Percentage of target used (0 when no target)
    is_over_budget: bool
