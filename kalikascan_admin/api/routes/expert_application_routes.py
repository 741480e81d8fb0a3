"""
Expert application routes.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel, Field

from kalikascan_admin.core.experts import ExpertApplicationService
from kalikascan_admin.infrastructure.dependencies import (
    get_expert_application_service,
    handle_exceptions,
    require_admin,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class ReviewRequest(BaseModel):
    applicationId: Optional[str] = Field(None, pattern=r"^[^/]*$", description="Expert application document id")
    uid: Optional[str] = Field(None, pattern=r"^[^/]*$", description="Applicant uid")
    status: Optional[str] = Field(None, description="'approved' or 'rejected'")
    adminNote: Optional[str] = Field(None, description="Note for the applicant")


@router.get("/list", summary="List expert applications")
@handle_exceptions
def list_expert_applications(
    caller: Dict[str, Any] = Depends(require_admin),
    service: ExpertApplicationService = Depends(get_expert_application_service)
):
    return {"applications": service.list_applications()}


@router.post("/review", summary="Approve or reject an expert application")
@handle_exceptions
def review_expert_application(
    payload: ReviewRequest = Body(...),
    caller: Dict[str, Any] = Depends(require_admin),
    service: ExpertApplicationService = Depends(get_expert_application_service)
):
    """
    Review a pending application. Both copies of the application and the
    applicant's role change in one transaction; a second review gets 409.
    """
    return service.review(
        payload.applicationId,
        payload.uid,
        payload.status,
        payload.adminNote,
        reviewer_uid=caller["uid"]
    )
