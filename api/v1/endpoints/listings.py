# api/v1/endpoints/listings.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from models.listing_request import ListingRequest, SourceMode
from services.listings.listing_service import ListingService

router = APIRouter()


def get_listing_service(request: Request) -> ListingService:
    return request.app.state.listing_service


@router.get("/finn")
@router.get("/cars")
async def list_dealer_cars(
    org_id: Optional[str] = Query(default=None, alias="orgId"),
    source: SourceMode = Query(default=SourceMode.AUTO),
    service: ListingService = Depends(get_listing_service),
):
    """Car listings for one dealer organisation, as ``{ok, items, count, ...}``."""
    return await service.get_listings(ListingRequest(org_id=org_id, source=source))
