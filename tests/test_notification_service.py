#!/usr/bin/env python
# tests/test_notification_service.py

import os
import sys
import unittest
from datetime import datetime, timezone

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from kalikascan_admin.core.notifications import NotificationService
from kalikascan_admin.infrastructure.config import ConfigLoader
from tests.mocks.firestore_mock import FakeFirestore, InMemoryFirestoreClient

NOW = datetime(2025, 3, 3, tzinfo=timezone.utc)
NOW_MS = int(NOW.timestamp() * 1000)


def ms(day):
    return int(datetime(2025, 3, day, tzinfo=timezone.utc).timestamp() * 1000)


class TestNotificationService(unittest.TestCase):

    def setUp(self):
        self.db = FakeFirestore({
            "plant_scans/s1": {"createdAtLocal": ms(1)},
            "plant_scans/s2": {"createdAtLocal": ms(2)},
            "plant_scans/s3": {"createdAtLocal": ms(2) + 1},
            "map_scans/p1": {"createdAtLocal": ms(1), "createdAt": datetime(2025, 3, 1, tzinfo=timezone.utc)},
            "health_assessments/h1": {"createdAt": datetime(2025, 3, 1, tzinfo=timezone.utc)},
            "health_assessments/h2": {"createdAt": datetime(2025, 3, 2, 12, tzinfo=timezone.utc)},
            "expert_applications/a1": {"createdAt": datetime(2025, 3, 2, tzinfo=timezone.utc)},
        })
        self.service = NotificationService(
            InMemoryFirestoreClient(self.db),
            ConfigLoader(load_env=False),
            clock=lambda: NOW.timestamp(),
        )

    def test_summary(self):
        result = self.service.summary({
            "plant_scans": ms(2),
            "map_posts": ms(1),
            "health_assessments": "2025-03-01T06:00:00.000Z",
        })

        self.assertEqual(result["counts"], {
            "plant_scans": 1,
            "map_posts": 0,
            "health_assessments": 1,
            "expert_applications": 0,
        })
        self.assertEqual(result["serverNow"], {"ms": NOW_MS, "iso": "2025-03-03T00:00:00.000Z"})

    def test_missing_markers_mean_nothing_new(self):
        result = self.service.summary(None)
        self.assertEqual(set(result["counts"].values()), {0})

    def test_non_numeric_marker_treated_as_missing(self):
        result = self.service.summary({"plant_scans": "yesterday"})
        self.assertEqual(result["counts"]["plant_scans"], 0)

    def test_falls_back_to_created_at_when_local_count_fails(self):
        self.db.fail_queries.append(RuntimeError("index missing"))

        count = self.service.count_new("health_assessments", last_seen_iso="2025-02-28T00:00:00Z")

        self.assertEqual(count, 2)

    def test_both_counts_failing_reports_zero(self):
        self.db.fail_queries.extend([RuntimeError("first"), RuntimeError("second")])
        self.assertEqual(self.service.count_new("plant_scans", last_seen_ms=0), 0)


if __name__ == "__main__":
    unittest.main()
