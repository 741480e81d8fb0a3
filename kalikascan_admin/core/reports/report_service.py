"""
Builds the downloadable CSV reports from the admin listings and analytics.
"""
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Tuple

from kalikascan_admin.core.records.normalizers import to_datetime, to_iso
from kalikascan_admin.core.reports import csv_export

logger = logging.getLogger(__name__)

DASHBOARD_DAYS = 30
DASHBOARD_USERS = 10


class ReportService:

    def __init__(self, plant_scans, map_posts, health_assessments, analytics,
                 clock: Callable[[], float] = time.time):
        self.plant_scans = plant_scans
        self.map_posts = map_posts
        self.health_assessments = health_assessments
        self.analytics = analytics
        self.clock = clock

    def _now(self) -> datetime:
        return datetime.fromtimestamp(self.clock(), tz=timezone.utc)

    def _filename(self, prefix: str) -> str:
        return csv_export.export_filename(prefix, self._now().date())

    def plant_scans_report(self) -> Tuple[str, str]:
        """Returns (filename, csv text)."""
        scans = self.plant_scans.list_scans()
        logger.info(f"Exporting {len(scans)} plant scans")
        return self._filename("plant_scans_report"), csv_export.plant_scans_csv(scans)

    def map_posts_report(self) -> Tuple[str, str]:
        posts = self.map_posts.list_posts()
        logger.info(f"Exporting {len(posts)} map posts")
        return self._filename("map_posts_report"), csv_export.map_posts_csv(posts)

    def health_assessments_report(self) -> Tuple[str, str]:
        items = self.health_assessments.list_assessments()
        logger.info(f"Exporting {len(items)} health assessments")
        return self._filename("health_assessments_report"), csv_export.health_assessments_csv(items)

    def _user_rows(self, users: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        now = self._now()
        rows = []
        for user in users:
            last_active = to_datetime(user.get("lastActiveAt"))
            hours_ago = int((now - last_active).total_seconds() // 3600) if last_active else 0
            rows.append({
                "fullName": user.get("displayName") or user.get("username") or "Unknown",
                "email": user.get("email"),
                "lastActiveLabel": to_iso(user.get("lastActiveAt")) or "",
                "hoursAgo": max(hours_ago, 0),
            })
        return rows

    def dashboard_report(self) -> Tuple[str, str]:
        global_data = self.analytics.global_summary()["data"]
        daily = self.analytics.daily(DASHBOARD_DAYS)["data"]
        users = self._user_rows(self.analytics.users_last_active(DASHBOARD_USERS)["data"])
        diseases = self.analytics.disease_top_timeseries(DASHBOARD_DAYS)["data"]

        content = csv_export.dashboard_csv(global_data, daily, users, diseases)
        return self._filename("kalikascan_dashboard_report"), content
