"""
Listing, snapshot and CSV export endpoints.
"""
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import Response, StreamingResponse

from kijiji_scraper.export import listings_csv

from ..config import config
from ..database import get_all_listings, get_listing_by_id, get_listings, get_snapshot
from ..models import ListingOut, ListingsResponse

router = APIRouter(prefix="/api", tags=["listings"])


@router.get("/listings", response_model=ListingsResponse)
async def list_listings(
    q: Optional[str] = Query(None, description="Substring of title, make or model"),
    limit: int = Query(config.DEFAULT_API_LIMIT, ge=1, le=config.MAX_API_LIMIT),
    offset: int = Query(0, ge=0),
):
    """Saved listings in the order they were captured."""
    data = get_listings(q, limit, offset)
    return ListingsResponse(total=data["total"], items=[ListingOut(**x) for x in data["items"]])


@router.get("/listings/{listing_id}", response_model=ListingOut)
async def read_listing(listing_id: str):
    listing = get_listing_by_id(listing_id)
    if listing is None:
        raise HTTPException(status_code=404, detail="Listing not found")
    return ListingOut(**listing)


@router.get("/listings/{listing_id}/snapshot")
async def read_snapshot(listing_id: str):
    data = get_snapshot(listing_id)
    if data is None:
        raise HTTPException(status_code=404, detail="Snapshot not found")
    return Response(content=data, media_type="image/png")


@router.get("/export/csv")
async def export_csv():
    """All listings in the spreadsheet column layout, as CSV."""
    body = listings_csv(get_all_listings()).encode("utf-8")
    return StreamingResponse(
        iter([body]),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="kijiji_vehicles.csv"'},
    )
