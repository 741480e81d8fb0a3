#!/usr/bin/env python
# tests/test_expert_application_service.py

import os
import sys
import unittest
from datetime import datetime, timezone

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from kalikascan_admin.core.experts import ExpertApplicationService
from kalikascan_admin.infrastructure.config import ConfigLoader
from kalikascan_admin.infrastructure.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from tests.mocks.firestore_mock import FakeFirestore, InMemoryFirestoreClient


class TestExpertApplicationService(unittest.TestCase):

    def setUp(self):
        application = {
            "uid": "u1",
            "displayName": "Dr. Cruz",
            "status": "pending",
            "yearsExperience": 12,
            "createdAt": datetime(2025, 2, 1, tzinfo=timezone.utc),
        }
        self.db = FakeFirestore({
            "expert_applications/a1": application,
            "users/u1/expert_applications/a1": application,
            "users/u1": {"role": "regular", "displayName": "Dr. Cruz"},
            "expert_applications/a0": {"uid": "u9", "status": "rejected",
                                       "createdAt": datetime(2025, 1, 1, tzinfo=timezone.utc)},
        })
        self.client = InMemoryFirestoreClient(self.db)
        self.service = ExpertApplicationService(self.client, ConfigLoader(load_env=False))

    def test_list_newest_first(self):
        rows = self.service.list_applications()

        self.assertEqual([r["id"] for r in rows], ["a1", "a0"])
        self.assertEqual(rows[0]["createdAt"], "2025-02-01T00:00:00.000Z")
        self.assertEqual(rows[0]["yearsExperience"], 12)
        # reviewedAt falls back to the document update time
        self.assertEqual(rows[0]["reviewedAt"], "2025-01-01T01:00:00.000Z")

    def test_approve_updates_both_copies_and_role(self):
        result = self.service.review("a1", "u1", "approved", "Welcome", "admin-1")

        self.assertEqual(result, {"ok": True})
        for path in ("expert_applications/a1", "users/u1/expert_applications/a1"):
            doc = self.db.data(path)
            self.assertEqual(doc["status"], "approved")
            self.assertEqual(doc["adminNote"], "Welcome")
            self.assertEqual(doc["reviewedBy"], "admin-1")
            self.assertIsInstance(doc["reviewedAt"], datetime)
        self.assertEqual(self.db.data("users/u1")["role"], "expert")
        self.assertEqual(self.db.data("users/u1")["displayName"], "Dr. Cruz")
        self.assertEqual(self.client.transactions, 1)

    def test_reject_sets_regular_role(self):
        self.db.seed("users/u1", {"role": "expert"})
        self.service.review("a1", "u1", "rejected", None, "admin-1")
        self.assertEqual(self.db.data("users/u1")["role"], "regular")

    def test_second_review_conflicts(self):
        self.service.review("a1", "u1", "approved", None, "admin-1")

        with self.assertRaises(ConflictError) as ctx:
            self.service.review("a1", "u1", "rejected", None, "admin-2")
        self.assertEqual(ctx.exception.message, "Already reviewed (approved)")
        self.assertEqual(self.db.data("users/u1")["role"], "expert")

    def test_uid_mismatch(self):
        self.db.seed("users/u2", {})
        self.db.seed("users/u2/expert_applications/a1", {"uid": "u2"})

        with self.assertRaises(ValidationError):
            self.service.review("a1", "u2", "approved", None, "admin-1")
        self.assertEqual(self.db.data("expert_applications/a1")["status"], "pending")

    def test_missing_user_copy(self):
        self.db.apply_delete("users/u1/expert_applications/a1")

        with self.assertRaises(ResourceNotFoundError) as ctx:
            self.service.review("a1", "u1", "approved", None, "admin-1")
        self.assertEqual(ctx.exception.message, "User application doc not found")
        self.assertEqual(self.db.data("expert_applications/a1")["status"], "pending")

    def test_missing_application(self):
        with self.assertRaises(ResourceNotFoundError):
            self.service.review("zzz", "u1", "approved", None, "admin-1")

    def test_input_validation(self):
        with self.assertRaises(ValidationError) as ctx:
            self.service.review("a1", "", "approved", None, "admin-1")
        self.assertEqual(ctx.exception.message, "Missing fields")

        with self.assertRaises(ValidationError) as ctx:
            self.service.review("a1", "u1", "maybe", None, "admin-1")
        self.assertEqual(ctx.exception.message, "Invalid status")
        self.assertEqual(self.client.transactions, 0)


if __name__ == "__main__":
    unittest.main()
