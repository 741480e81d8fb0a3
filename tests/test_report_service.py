#!/usr/bin/env python
# tests/test_report_service.py

import os
import sys
import unittest
from datetime import datetime, timezone
from unittest.mock import MagicMock

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from kalikascan_admin.core.reports import ReportService
from kalikascan_admin.core.reports.csv_export import BOM

NOW = datetime(2025, 3, 3, tzinfo=timezone.utc)


class TestReportService(unittest.TestCase):

    def setUp(self):
        self.plant_scans = MagicMock()
        self.map_posts = MagicMock()
        self.health = MagicMock()
        self.analytics = MagicMock()
        self.service = ReportService(self.plant_scans, self.map_posts, self.health, self.analytics,
                                     clock=lambda: NOW.timestamp())

    def test_listing_reports(self):
        self.plant_scans.list_scans.return_value = [{"plantName": "Moss"}]
        self.map_posts.list_posts.return_value = []
        self.health.list_assessments.return_value = []

        filename, content = self.service.plant_scans_report()
        self.assertEqual(filename, "plant_scans_report_2025-03-03.csv")
        self.assertTrue(content.startswith(BOM + "Scanned By,"))
        self.assertIn("Moss", content)

        self.assertEqual(self.service.map_posts_report()[0], "map_posts_report_2025-03-03.csv")
        self.assertEqual(self.service.health_assessments_report()[0], "health_assessments_report_2025-03-03.csv")

    def test_dashboard_report(self):
        self.analytics.global_summary.return_value = {"ok": True, "data": {"totalPlantScans": 1}}
        self.analytics.daily.return_value = {"ok": True, "data": []}
        self.analytics.users_last_active.return_value = {"ok": True, "data": [
            {"uid": "u1", "displayName": "Ana", "email": "ana@example.com",
             "lastActiveAt": "2025-03-02T21:00:00.000Z"},
            {"uid": "u2", "username": "ben"},
        ]}
        self.analytics.disease_top_timeseries.return_value = {"ok": True, "data": []}

        filename, content = self.service.dashboard_report()

        self.assertEqual(filename, "kalikascan_dashboard_report_2025-03-03.csv")
        lines = content[len(BOM):].split("\n")
        self.assertIn("Ana,ana@example.com,2025-03-02T21:00:00.000Z,3", lines)
        self.assertIn("ben,,,0", lines)
        self.analytics.daily.assert_called_once_with(30)
        self.analytics.users_last_active.assert_called_once_with(10)
        self.analytics.disease_top_timeseries.assert_called_once_with(30)


if __name__ == "__main__":
    unittest.main()
