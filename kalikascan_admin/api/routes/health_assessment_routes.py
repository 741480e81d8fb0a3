"""
Health assessment routes.
"""
import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel, Field

from kalikascan_admin.api.routes.csv_response import csv_attachment
from kalikascan_admin.core.health import HealthAssessmentService
from kalikascan_admin.core.reports import ReportService
from kalikascan_admin.infrastructure.dependencies import (
    get_health_assessment_service,
    get_report_service,
    handle_exceptions,
    require_admin,
)

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])


class DeleteAssessmentRequest(BaseModel):
    assessmentId: str = Field(..., min_length=1, pattern=r"^[^/]+$", description="Health assessment document id")


class SetAssessmentAddressRequest(BaseModel):
    assessmentId: Optional[str] = Field(None, pattern=r"^[^/]*$", description="Health assessment document id")
    addressText: Optional[Any] = Field(None, description="Human readable address, may be empty")


@router.get("", summary="List health assessments")
@handle_exceptions
def list_health_assessments(service: HealthAssessmentService = Depends(get_health_assessment_service)):
    return {"assessments": service.list_assessments()}


@router.post("/delete", summary="Delete a health assessment")
@handle_exceptions
def delete_health_assessment(
    payload: DeleteAssessmentRequest = Body(...),
    service: HealthAssessmentService = Depends(get_health_assessment_service)
):
    return service.delete_assessment(payload.assessmentId)


@router.post("/set-address", summary="Set the address of a health assessment")
@handle_exceptions
def set_health_assessment_address(
    payload: SetAssessmentAddressRequest = Body(...),
    service: HealthAssessmentService = Depends(get_health_assessment_service)
):
    return service.set_address(payload.assessmentId, payload.addressText)


@router.get("/export", summary="Download health assessments as CSV")
@handle_exceptions
def export_health_assessments(service: ReportService = Depends(get_report_service)):
    filename, content = service.health_assessments_report()
    return csv_attachment(filename, content)
