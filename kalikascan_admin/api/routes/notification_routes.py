"""
Notification badge routes.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel, Field

from kalikascan_admin.core.notifications import NotificationService
from kalikascan_admin.infrastructure.dependencies import (
    get_notification_service,
    handle_exceptions,
    require_admin,
)

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])


class SummaryRequest(BaseModel):
    lastSeen: Optional[Dict[str, Any]] = Field(
        None,
        description="Last seen markers: plant_scans/map_posts in epoch ms, "
                    "health_assessments/expert_applications as ISO strings"
    )


@router.post("/summary", summary="Count records created since last seen")
@handle_exceptions
def notification_summary(
    payload: Optional[SummaryRequest] = Body(None),
    service: NotificationService = Depends(get_notification_service)
):
    return service.summary(payload.lastSeen if payload else None)
