"""
Pydantic models for API request/response serialization.
"""
from typing import List
from pydantic import BaseModel


class ListingOut(BaseModel):
    """Output model for listing data. Unresolved fields carry "N/A"."""
    id: str
    url: str
    date_saved: str
    title: str = "N/A"
    price: str = "N/A"
    location: str = "N/A"
    date_posted: str = "N/A"
    seller_name: str = "N/A"
    year: str = "N/A"
    make: str = "N/A"
    model: str = "N/A"
    mileage: str = "N/A"
    transmission: str = "N/A"
    body_type: str = "N/A"
    colour: str = "N/A"
    drivetrain: str = "N/A"
    condition: str = "N/A"
    seats: str = "N/A"
    fuel: str = "N/A"
    has_snapshot: bool = False


class ListingsResponse(BaseModel):
    """Response model for paginated listings."""
    total: int
    items: List[ListingOut]


class StatsOut(BaseModel):
    """Model for statistics data."""
    total_listings: int
    with_snapshots: int
