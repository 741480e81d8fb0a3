"""
"What's new since I last looked" counters for the dashboard badges.
"""
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from kalikascan_admin.core.records.normalizers import as_num, isoformat, to_datetime

logger = logging.getLogger(__name__)


class NotificationService:
    """
    Counts records created after the caller's last-seen markers.

    Plant scans and map posts are compared on ``createdAtLocal`` (epoch ms),
    health assessments and expert applications on the ``createdAt``
    timestamp. A missing marker means "now", so nothing is reported as new
    on first load.
    """

    # badge key -> (logical collection, last-seen marker kind)
    SOURCES = {
        "plant_scans": ("plant_scans", "ms"),
        "map_posts": ("map_posts", "ms"),
        "health_assessments": ("health_assessments", "iso"),
        "expert_applications": ("expert_applications", "iso"),
    }

    def __init__(self, firestore_client, config_loader, clock: Callable[[], float] = time.time):
        self.firestore = firestore_client
        self.config = config_loader
        self.clock = clock

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    def count_new(self, collection: str, last_seen_ms: Optional[float] = None,
                  last_seen_iso: Optional[str] = None) -> int:
        now_ms = self._now_ms()
        after_ms = last_seen_ms if last_seen_ms is not None else now_ms

        try:
            count = self.firestore.count_where(collection, "createdAtLocal", ">", after_ms)
            if count > 0:
                return count
        except Exception as e:
            logger.warning(f"createdAtLocal count failed on {collection}, falling back to createdAt: {e}")

        # Zero can also mean the field is missing on this collection
        after_ts = to_datetime(last_seen_iso) if isinstance(last_seen_iso, str) else None
        if after_ts is None:
            after_ts = datetime.fromtimestamp(now_ms / 1000, tz=timezone.utc)

        try:
            return self.firestore.count_where(collection, "createdAt", ">", after_ts)
        except Exception as e:
            logger.warning(f"createdAt count failed on {collection}: {e}")
            return 0

    def summary(self, last_seen: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        last_seen = last_seen if isinstance(last_seen, dict) else {}

        counts = {}
        for key, (logical, marker) in self.SOURCES.items():
            collection = self.config.collection(logical)
            value = last_seen.get(key)
            if marker == "ms":
                counts[key] = self.count_new(collection, last_seen_ms=as_num(value))
            else:
                counts[key] = self.count_new(collection, last_seen_iso=value if isinstance(value, str) else None)

        now_ms = self._now_ms()
        return {
            "counts": counts,
            "serverNow": {
                "ms": now_ms,
                "iso": isoformat(datetime.fromtimestamp(now_ms / 1000, tz=timezone.utc)),
            },
        }
