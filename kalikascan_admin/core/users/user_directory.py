"""
Look up app user profiles to decorate admin listings.
"""
import logging
from typing import Any, Dict, Iterable, Optional

from kalikascan_admin.core.records.normalizers import as_str
from kalikascan_admin.infrastructure.database.firestore_client import chunked

logger = logging.getLogger(__name__)


def scan_user_summary(uid: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """User block attached to plant scans; falls back to imageUrl for the photo."""
    return {
        "uid": uid,
        "displayName": data.get("displayName"),
        "email": data.get("email"),
        "photoURL": data.get("photoURL") or data.get("imageUrl"),
        "username": data.get("username"),
    }


def post_user_summary(data: Dict[str, Any]) -> Dict[str, Optional[str]]:
    """User block attached to map posts and health assessments (strings only)."""
    return {
        "displayName": as_str(data.get("displayName")),
        "username": as_str(data.get("username")),
        "email": as_str(data.get("email")),
        "photoURL": as_str(data.get("photoURL")),
    }


class UserDirectory:
    """Batched reads of ``users/{uid}`` documents."""

    def __init__(self, firestore_client, users_collection: str = "users"):
        self.firestore = firestore_client
        self.users_collection = users_collection

    def fetch_profiles(self, uids: Iterable[Optional[str]], chunk_size: int = 30) -> Dict[str, Dict[str, Any]]:
        """
        Read the profile documents of the given users.

        Duplicates and empty ids are ignored, missing users are left out.

        Args:
            uids: User ids
            chunk_size: Documents fetched per round trip

        Returns:
            Dict mapping uid to profile data
        """
        unique = list(dict.fromkeys(uid for uid in uids if uid))
        profiles: Dict[str, Dict[str, Any]] = {}

        users = self.firestore.collection(self.users_collection)
        for group in chunked(unique, chunk_size):
            refs = [users.document(uid) for uid in group]
            for snap in self.firestore.get_snapshots(refs):
                if not snap.exists:
                    continue
                profiles[snap.id] = snap.to_dict() or {}

        logger.debug(f"Resolved {len(profiles)} of {len(unique)} user profiles")
        return profiles
