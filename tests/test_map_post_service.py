#!/usr/bin/env python
# tests/test_map_post_service.py

import os
import sys
import unittest
from datetime import datetime, timezone

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from kalikascan_admin.core.analytics import CounterReconciler
from kalikascan_admin.core.map_posts import MapPostService
from kalikascan_admin.core.users import UserDirectory
from kalikascan_admin.infrastructure.config import ConfigLoader
from kalikascan_admin.infrastructure.config.firestore_config import COUNTER_FIELDS
from kalikascan_admin.infrastructure.exceptions import ResourceNotFoundError
from tests.mocks.firestore_mock import FakeFirestore, InMemoryFirestoreClient


class TestMapPostService(unittest.TestCase):

    def setUp(self):
        self.db = FakeFirestore({
            "map_scans/p1": {
                "uid": "u1",
                "caption": "Found this",
                "createdAtLocal": 5000,
                "createdDay": "2025-03-02",
                "createdAt": datetime(2025, 3, 2, tzinfo=timezone.utc),
                "userSnapshot": {"displayName": "Old name", "avatarColor": "green"},
            },
            "map_scans/p2": {"uid": "u2", "createdAtLocal": "not a number",
                             "createdAt": datetime(2025, 3, 1, tzinfo=timezone.utc)},
            "map_scans/p3": {"uid": "u1", "createdAtLocal": 9000},
            "map_scans/p1/comments/c1": {"text": "nice"},
            "map_scans/p1/comments/c2": {"text": "wow"},
            "map_scans/p1/comments/c1/replies/r1": {"text": "thanks"},
            "map_scans/p1/comments/c1/replies/r2": {"text": "+1"},
            "map_scans/p1/comments/c2/replies/r3": {"text": "agreed"},
            "map_scans/p3/comments/c9": {"text": "other post"},
            "users/u1": {"displayName": "Ana", "username": "ana", "email": "ana@example.com", "scanCount": 7},
            "users/u1/map_scans/p1": {"uid": "u1"},
            "analytics/global": {"totalMapPosts": 3},
            "analytics/global/daily/2025-03-02": {"mapPosts": 1},
        })
        self.client = InMemoryFirestoreClient(self.db, batch_write_limit=3)
        self.service = MapPostService(
            self.client,
            UserDirectory(self.client),
            CounterReconciler(self.client, COUNTER_FIELDS),
            ConfigLoader(load_env=False),
        )

    def test_list_posts_sorted_with_user_merged_into_snapshot(self):
        posts = self.service.list_posts()

        self.assertEqual([p["id"] for p in posts], ["p3", "p1", "p2"])
        p1 = posts[1]
        self.assertEqual(p1["caption"], "Found this")
        self.assertEqual(p1["user"], {"displayName": "Ana", "username": "ana",
                                      "email": "ana@example.com", "photoURL": None})
        self.assertEqual(p1["userSnapshot"]["displayName"], "Ana")
        self.assertEqual(p1["userSnapshot"]["avatarColor"], "green")
        self.assertEqual(p1["createdAt"], "2025-03-02T00:00:00.000Z")
        self.assertIsNone(posts[2]["user"])

    def test_delete_post_cascades_comments_and_replies(self):
        result = self.service.delete_post("p1")

        self.assertEqual(result, {
            "ok": True,
            "deletedId": "p1",
            "deletedFromUser": True,
            "uid": "u1",
            "deletedComments": 2,
            "deletedReplies": 3,
        })
        remaining = [path for path in self.db.docs if path.startswith("map_scans/p1")]
        self.assertEqual(remaining, [])
        self.assertIsNone(self.db.data("users/u1/map_scans/p1"))
        # Other posts keep their comments
        self.assertIsNotNone(self.db.data("map_scans/p3/comments/c9"))
        # Writes were split over batches of at most 3
        self.assertTrue(all(size <= 3 for size in self.db.batch_sizes))

    def test_delete_post_updates_counters(self):
        self.service.delete_post("p1")

        global_doc = self.db.data("analytics/global")
        self.assertEqual(global_doc["totalMapPosts"], 2)
        self.assertEqual(global_doc["lastMapPostAt"], datetime(2025, 3, 1, tzinfo=timezone.utc))
        self.assertEqual(self.db.data("analytics/global/daily/2025-03-02")["mapPosts"], 0)
        # Map posts have no per-user counter
        self.assertEqual(self.db.data("users/u1")["scanCount"], 7)

    def test_delete_post_without_owner(self):
        self.db.seed("map_scans/orphan", {"caption": "?"})

        result = self.service.delete_post("orphan")

        self.assertFalse(result["deletedFromUser"])
        self.assertIsNone(result["uid"])
        self.assertEqual(result["deletedComments"], 0)

    def test_delete_post_removes_replies_of_deleted_comments(self):
        self.db.seed("map_scans/p4", {"uid": "u2", "createdAtLocal": 100})
        self.db.seed("map_scans/p4/comments/gone/replies/r9", {"text": "still here"})

        result = self.service.delete_post("p4")

        self.assertEqual(result["deletedComments"], 0)
        self.assertEqual(result["deletedReplies"], 1)
        remaining = [path for path in self.db.docs if path.startswith("map_scans/p4")]
        self.assertEqual(remaining, [])

    def test_delete_missing_post(self):
        with self.assertRaises(ResourceNotFoundError) as ctx:
            self.service.delete_post("nope")
        self.assertEqual(ctx.exception.message, "Post not found")


if __name__ == "__main__":
    unittest.main()
