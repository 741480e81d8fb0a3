"""
Reverse geocoding route. Public, no token required.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from kalikascan_admin.core.geocoding import GeocodeService
from kalikascan_admin.infrastructure.dependencies import get_geocode_service, handle_exceptions

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/reverse", summary="Address for a coordinate pair")
@handle_exceptions
def reverse_geocode(
    lat: Optional[str] = Query(None, description="Latitude"),
    lon: Optional[str] = Query(None, description="Longitude"),
    service: GeocodeService = Depends(get_geocode_service)
):
    return service.reverse(lat, lon)
