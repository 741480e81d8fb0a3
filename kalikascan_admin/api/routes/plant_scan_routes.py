"""
Plant scan routes.
"""
import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel, Field

from kalikascan_admin.api.routes.csv_response import csv_attachment
from kalikascan_admin.core.reports import ReportService
from kalikascan_admin.core.scans import PlantScanService
from kalikascan_admin.infrastructure.dependencies import (
    get_plant_scan_service,
    get_report_service,
    handle_exceptions,
    require_admin,
)

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])


class DeleteScanRequest(BaseModel):
    scanId: str = Field(..., min_length=1, pattern=r"^[^/]+$", description="Plant scan document id")


class SetScanAddressRequest(BaseModel):
    scanId: str = Field(..., min_length=1, pattern=r"^[^/]+$", description="Plant scan document id")
    addressText: Optional[Any] = Field(None, description="Human readable address")


@router.get("", summary="List plant scans")
@handle_exceptions
def list_plant_scans(service: PlantScanService = Depends(get_plant_scan_service)):
    """Newest scans first, each with its owner's profile."""
    return {"scans": service.list_scans()}


@router.post("/delete", summary="Delete a plant scan")
@handle_exceptions
def delete_plant_scan(
    payload: DeleteScanRequest = Body(...),
    service: PlantScanService = Depends(get_plant_scan_service)
):
    """
    Delete the scan and its user copy, remove it from Plant.id and roll back
    the analytics counters.
    """
    return service.delete_scan(payload.scanId)


@router.post("/set-address", summary="Set the address of a plant scan")
@handle_exceptions
def set_plant_scan_address(
    payload: SetScanAddressRequest = Body(...),
    service: PlantScanService = Depends(get_plant_scan_service)
):
    return service.set_address(payload.scanId, payload.addressText)


@router.get("/export", summary="Download plant scans as CSV")
@handle_exceptions
def export_plant_scans(service: ReportService = Depends(get_report_service)):
    filename, content = service.plant_scans_report()
    return csv_attachment(filename, content)
