"""
Read side of the analytics documents maintained by the mobile app.
"""
import logging
from typing import Any, Dict, List, Optional

from firebase_admin import firestore

from kalikascan_admin.core.records.normalizers import safe_int, to_jsonable
from kalikascan_admin.infrastructure.config.firestore_config import (
    ANALYTICS_DAILY,
    ANALYTICS_DISEASE_TOP,
    ANALYTICS_DISEASES,
)

logger = logging.getLogger(__name__)


def disease_path_parts(path: str) -> Optional[tuple]:
    """
    Split ``analytics/global/diseaseTop/{date}/diseases/{name}`` into (date, name).

    Returns:
        None for paths outside the diseaseTop tree
    """
    parts = path.split("/")
    if ANALYTICS_DISEASE_TOP not in parts or ANALYTICS_DISEASES not in parts:
        return None
    top_index = parts.index(ANALYTICS_DISEASE_TOP)
    diseases_index = parts.index(ANALYTICS_DISEASES)
    if top_index + 1 >= len(parts) or diseases_index + 1 >= len(parts):
        return None
    return parts[top_index + 1], parts[diseases_index + 1]


class AnalyticsService:

    def __init__(self, firestore_client, reconciler, config_loader):
        self.firestore = firestore_client
        self.reconciler = reconciler
        self.config = config_loader
        self.users_collection = config_loader.collection("users")
        self.top_size = config_loader.get("limits.disease_top_size", 10)

    def global_summary(self) -> Dict[str, Any]:
        data = self.firestore.get_data(self.reconciler.global_ref())
        return {"ok": True, "data": to_jsonable(data)}

    def daily(self, days: Any = None) -> Dict[str, Any]:
        """
        The most recent daily buckets, oldest first.

        Documents are read without an orderBy so no composite index is needed;
        ids are ``YYYY-MM-DD`` and sort as strings.
        """
        take = self.config.clamp("daily_days", days)
        collection = self.reconciler.global_ref().collection(ANALYTICS_DAILY)
        docs = [{"id": snap.id, **(snap.to_dict() or {})} for snap in collection.stream()]
        docs.sort(key=lambda d: d["id"])
        return {"ok": True, "data": to_jsonable(docs[-take:])}

    def users_last_active(self, take: Any = None) -> Dict[str, Any]:
        limit = self.config.clamp("users_take", take)
        query = (
            self.firestore.collection(self.users_collection)
            .order_by("lastActiveAt", direction=firestore.Query.DESCENDING)
            .limit(limit)
        )
        data = [{"uid": snap.id, **(snap.to_dict() or {})} for snap in query.stream()]
        return {"ok": True, "data": to_jsonable(data)}

    def disease_top(self) -> Dict[str, Any]:
        """Top diseases of the most recent day that has any."""
        top_collection = self.reconciler.global_ref().collection(ANALYTICS_DISEASE_TOP)
        dates = sorted((ref.id for ref in self.firestore.list_document_refs(top_collection)), reverse=True)
        if not dates:
            return {"ok": True, "date": "", "data": []}

        latest = dates[0]
        rows = []
        for snap in top_collection.document(latest).collection(ANALYTICS_DISEASES).stream():
            data = snap.to_dict() or {}
            count = safe_int(data.get("count"))
            if count > 0:
                rows.append({"name": snap.id, "count": count, "lastUpdatedAt": data.get("lastUpdatedAt")})

        rows.sort(key=lambda r: r["count"], reverse=True)
        return {"ok": True, "date": latest, "data": to_jsonable(rows[:self.top_size])}

    def disease_top_timeseries(self, days: Any = None) -> Dict[str, Any]:
        """
        Per-day disease totals and the leading disease of each day.

        The last N dates that have data are returned, not N calendar days.
        """
        max_days = self.config.clamp("disease_days", days)
        by_date: Dict[str, Dict[str, Any]] = {}

        for snap in self.firestore.collection_group(ANALYTICS_DISEASES).stream():
            parsed = disease_path_parts(snap.reference.path)
            if not parsed or not parsed[0]:
                continue
            date, name = parsed
            count = safe_int((snap.to_dict() or {}).get("count"))

            current = by_date.setdefault(date, {"total": 0, "best_name": None, "best_count": 0})
            current["total"] += count
            if count > current["best_count"]:
                current["best_count"] = count
                current["best_name"] = name

        series: List[Dict[str, Any]] = [
            {
                "date": date,
                "totalDiseaseCount": values["total"],
                "topDisease": values["best_name"],
                "topDiseaseCount": values["best_count"],
            }
            for date, values in sorted(by_date.items())
        ]
        return {"ok": True, "data": series[-max_days:]}
