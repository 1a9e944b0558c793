"""
Saved-listing statistics.
"""
from fastapi import APIRouter

from ..database import get_statistics
from ..models import StatsOut

router = APIRouter(prefix="/api", tags=["statistics"])


@router.get("/stats", response_model=StatsOut)
async def read_stats():
    """Listing count (the saved-count badge) and how many carry a snapshot."""
    return StatsOut(**get_statistics())
