"""
Map post routes.
"""
import logging

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel, Field

from kalikascan_admin.api.routes.csv_response import csv_attachment
from kalikascan_admin.core.map_posts import MapPostService
from kalikascan_admin.core.reports import ReportService
from kalikascan_admin.infrastructure.dependencies import (
    get_map_post_service,
    get_report_service,
    handle_exceptions,
    require_admin,
)

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])


class DeletePostRequest(BaseModel):
    postId: str = Field(..., min_length=1, pattern=r"^[^/]+$", description="Map post document id")


@router.get("", summary="List map posts")
@handle_exceptions
def list_map_posts(service: MapPostService = Depends(get_map_post_service)):
    return {"posts": service.list_posts()}


@router.post("/delete", summary="Delete a map post")
@handle_exceptions
def delete_map_post(
    payload: DeletePostRequest = Body(...),
    service: MapPostService = Depends(get_map_post_service)
):
    """
    Delete the post with all comments and replies, its user copy, and roll
    back the map post counters.
    """
    return service.delete_post(payload.postId)


@router.get("/export", summary="Download map posts as CSV")
@handle_exceptions
def export_map_posts(service: ReportService = Depends(get_report_service)):
    filename, content = service.map_posts_report()
    return csv_attachment(filename, content)
