"""
Map post administration.

A map post lives at ``map_scans/{postId}`` with a copy under the author's
profile and a comment tree (``comments/{id}/replies/{id}``) below it.
"""
import logging
from typing import Any, Dict, List

from kalikascan_admin.core.records.normalizers import as_num, as_str, to_jsonable
from kalikascan_admin.core.users.user_directory import post_user_summary
from kalikascan_admin.infrastructure.config.firestore_config import MAP_POST_COMMENTS, MAP_POST_REPLIES
from kalikascan_admin.infrastructure.exceptions import ResourceNotFoundError

logger = logging.getLogger(__name__)


def _created_local(post: Dict[str, Any]) -> float:
    return as_num(post.get("createdAtLocal")) or 0


class MapPostService:

    KIND = "map_posts"

    def __init__(self, firestore_client, user_directory, reconciler, config_loader):
        self.firestore = firestore_client
        self.users = user_directory
        self.reconciler = reconciler
        self.collection_name = config_loader.collection("map_posts")
        self.users_collection = config_loader.collection("users")
        self.user_chunk = config_loader.get("limits.user_lookup_chunk.by_in_query", 10)

    def list_posts(self) -> List[Dict[str, Any]]:
        """
        Every map post with its raw fields, newest first.

        The author's profile is attached as ``user`` and merged over the
        ``userSnapshot`` the app stored when the post was made.
        """
        posts = []
        for snap in self.firestore.collection(self.collection_name).stream():
            data = snap.to_dict() or {}
            posts.append({"id": snap.id, **data, "user": None})

        profiles = self.users.fetch_profiles((as_str(p.get("uid")) for p in posts), chunk_size=self.user_chunk)
        for post in posts:
            uid = as_str(post.get("uid"))
            user = post_user_summary(profiles[uid]) if uid in profiles else None
            post["user"] = user
            snapshot = post.get("userSnapshot") if isinstance(post.get("userSnapshot"), dict) else {}
            post["userSnapshot"] = {**snapshot, **(user or {})}

        # Sorted here because not every post has createdAtLocal
        posts.sort(key=_created_local, reverse=True)
        return to_jsonable(posts)

    def _comment_tree_refs(self, post_ref):
        """
        References of every reply and comment below a post.

        Replies are also collected under comment ids whose document is gone,
        since deleting a comment does not delete its replies.
        """
        comments = post_ref.collection(MAP_POST_COMMENTS)
        comment_refs = self.firestore.list_document_refs(comments)
        reply_refs = []
        for comment_ref in self.firestore.list_document_refs(comments, include_missing=True):
            reply_refs.extend(self.firestore.list_document_refs(comment_ref.collection(MAP_POST_REPLIES)))
        return comment_refs, reply_refs

    def delete_post(self, post_id: str) -> Dict[str, Any]:
        """
        Delete a post together with its comments, replies and user mirror,
        then roll back the map post counters.
        """
        post_ref = self.firestore.collection(self.collection_name).document(post_id)
        data = self.firestore.get_data(post_ref)
        if data is None:
            raise ResourceNotFoundError("Post not found", resource_type="map_post", resource_id=post_id)

        uid = data.get("uid") or None
        comment_refs, reply_refs = self._comment_tree_refs(post_ref)

        # Children first so a partial failure never leaves orphaned replies behind a deleted post
        operations = [("delete", ref) for ref in reply_refs]
        operations.extend(("delete", ref) for ref in comment_refs)
        operations.append(("delete", post_ref))
        if uid:
            mirror_ref = (
                self.firestore.collection(self.users_collection).document(uid)
                .collection(self.collection_name).document(post_id)
            )
            operations.append(("delete", mirror_ref))

        operations.extend(self.reconciler.decrement_writes(self.KIND, data))

        self.firestore.commit_in_chunks(operations)
        self.reconciler.recompute_last_activity(self.KIND, self.collection_name)

        logger.info(
            f"Deleted map post {post_id} with {len(comment_refs)} comments "
            f"and {len(reply_refs)} replies (uid={uid})"
        )
        return {
            "ok": True,
            "deletedId": post_id,
            "deletedFromUser": bool(uid),
            "uid": uid,
            "deletedComments": len(comment_refs),
            "deletedReplies": len(reply_refs),
        }
