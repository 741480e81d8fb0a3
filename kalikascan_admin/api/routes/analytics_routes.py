"""
Analytics routes.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from kalikascan_admin.api.routes.csv_response import csv_attachment
from kalikascan_admin.core.analytics import AnalyticsService
from kalikascan_admin.core.reports import ReportService
from kalikascan_admin.infrastructure.dependencies import (
    get_analytics_service,
    get_report_service,
    handle_exceptions,
    require_admin,
)

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/global", summary="Global counters")
@handle_exceptions
def get_global(service: AnalyticsService = Depends(get_analytics_service)):
    return service.global_summary()


@router.get("/daily", summary="Daily activity")
@handle_exceptions
def get_daily(
    days: Optional[str] = Query(None, description="Number of days (1-365, default 30)"),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.daily(days)


@router.get("/users-last-active", summary="Most recently active users")
@handle_exceptions
def get_users_last_active(
    take: Optional[str] = Query(None, description="Number of users (1-50, default 10)"),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.users_last_active(take)


@router.get("/disease-top", summary="Top diseases of the latest day")
@handle_exceptions
def get_disease_top(service: AnalyticsService = Depends(get_analytics_service)):
    return service.disease_top()


@router.get("/disease-top-timeseries", summary="Disease detections per day")
@handle_exceptions
def get_disease_top_timeseries(
    days: Optional[str] = Query(None, description="Number of dates (1-365, default 30)"),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.disease_top_timeseries(days)


@router.get("/export", summary="Download the dashboard report as CSV")
@handle_exceptions
def export_dashboard(service: ReportService = Depends(get_report_service)):
    filename, content = service.dashboard_report()
    return csv_attachment(filename, content)
