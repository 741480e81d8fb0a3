"""
Keeps the denormalised analytics counters in step when records are deleted.

The mobile app increments ``analytics/global`` and
``analytics/global/daily/{day}`` whenever it creates a plant scan, map
post or health assessment. Deleting a record from the dashboard has to
undo those increments and refresh the matching "last activity"
timestamp. This is best-effort: reads and writes are not transactional,
so concurrent deletes can drift, but a counter is never pushed below zero.
"""
import logging
from typing import Any, Dict, List, Optional

from firebase_admin import firestore

from kalikascan_admin.core.records.normalizers import as_bool, day_key_from_data, safe_int

logger = logging.getLogger(__name__)


class CounterReconciler:

    def __init__(self, firestore_client, counter_fields: Dict[str, Dict[str, str]],
                 analytics_collection: str = "analytics", global_doc: str = "global",
                 daily_collection: str = "daily", source_field: str = "createdAt"):
        self.firestore = firestore_client
        self.counter_fields = counter_fields
        self.analytics_collection = analytics_collection
        self.global_doc = global_doc
        self.daily_collection = daily_collection
        self.source_field = source_field

    def global_ref(self):
        return self.firestore.collection(self.analytics_collection).document(self.global_doc)

    def daily_ref(self, day: str):
        return self.global_ref().collection(self.daily_collection).document(day)

    @staticmethod
    def _decrement(patch: Dict[str, Any], current: Dict[str, Any], field: Optional[str]) -> None:
        if field and safe_int(current.get(field)) > 0:
            patch[field] = firestore.Increment(-1)

    def _outcome_fields(self, fields: Dict[str, str], prefix: str, success: Optional[bool]) -> List[str]:
        """Counter fields to decrement for one scope: total always, success/fail only for a real flag."""
        names = [fields.get(f"{prefix}_total")]
        if success is True:
            names.append(fields.get(f"{prefix}_success"))
        elif success is False:
            names.append(fields.get(f"{prefix}_fail"))
        return [name for name in names if name]

    def decrement_writes(self, kind: str, data: Dict[str, Any], user_ref=None) -> List[tuple]:
        """
        Build the writes that undo the counters of a deleted record.

        Args:
            kind: 'plant_scans', 'map_posts' or 'health_assessments'
            data: The deleted document's data
            user_ref: Owner's profile document, for per-user counters

        Returns:
            ("set", ref, patch, True) operations, ready for a batch
        """
        fields = self.counter_fields[kind]
        success = as_bool(data.get("success"))
        operations = []

        global_ref = self.global_ref()
        global_current = self.firestore.get_data(global_ref) or {}
        global_patch: Dict[str, Any] = {}
        for name in self._outcome_fields(fields, "global", success):
            self._decrement(global_patch, global_current, name)
        if global_patch:
            operations.append(("set", global_ref, global_patch, True))

        day = day_key_from_data(data)
        if day and fields.get("daily_total"):
            daily_ref = self.daily_ref(day)
            daily_current = self.firestore.get_data(daily_ref)
            # A missing bucket is never created just to hold negative counts
            if daily_current is not None:
                daily_patch: Dict[str, Any] = {}
                for name in self._outcome_fields(fields, "daily", success):
                    self._decrement(daily_patch, daily_current, name)
                if daily_patch:
                    daily_patch["lastUpdatedAt"] = firestore.SERVER_TIMESTAMP
                    operations.append(("set", daily_ref, daily_patch, True))

        user_counter = fields.get("user_counter")
        if user_ref is not None and user_counter:
            user_current = self.firestore.get_data(user_ref)
            if user_current is not None:
                user_patch: Dict[str, Any] = {}
                self._decrement(user_patch, user_current, user_counter)
                if user_patch:
                    user_patch["updatedAt"] = firestore.SERVER_TIMESTAMP
                    operations.append(("set", user_ref, user_patch, True))

        logger.debug(f"Counter writes for deleted {kind} (day={day}, success={success}): {len(operations)}")
        return operations

    def recompute_last_activity(self, kind: str, collection: str) -> Any:
        """
        Point the "last activity" timestamp at the newest remaining record.

        Returns:
            The new timestamp, or None when the collection is now empty
        """
        field = self.counter_fields[kind]["last_activity"]
        latest = self.firestore.latest_value(collection, self.source_field)
        self.global_ref().set({field: latest}, merge=True)
        logger.info(f"Recomputed {field} from {collection}: {latest}")
        return latest
