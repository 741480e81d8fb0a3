"""
Helpers for working with Cloud Firestore through the Firebase Admin SDK.
"""
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple
from firebase_admin import firestore

logger = logging.getLogger(__name__)

# ("delete", ref) or ("set", ref, data, merge)
WriteOperation = Tuple[Any, ...]


def chunked(items: List[Any], size: int) -> List[List[Any]]:
    """Split a list into consecutive chunks of at most ``size`` items."""
    return [items[i:i + size] for i in range(0, len(items), size)]


class FirestoreClient:
    """
    Wraps a Firestore client with the batched and transactional helpers the admin API needs.
    """

    def __init__(self, db, batch_write_limit: int = 450):
        """
        Args:
            db: google.cloud.firestore.Client (or a compatible object)
            batch_write_limit: Maximum writes committed per batch
        """
        self.db = db
        self.batch_write_limit = batch_write_limit

    def collection(self, path: str):
        return self.db.collection(path)

    def document(self, path: str):
        return self.db.document(path)

    def collection_group(self, name: str):
        return self.db.collection_group(name)

    def get_data(self, ref) -> Optional[Dict[str, Any]]:
        """
        Read a document.

        Args:
            ref: DocumentReference

        Returns:
            The document data, or None when it does not exist
        """
        try:
            snap = ref.get()
        except Exception as e:
            logger.error(f"Firestore get error at {ref.path}: {str(e)}")
            raise
        return (snap.to_dict() or {}) if snap.exists else None

    def get_snapshots(self, refs: List[Any]) -> List[Any]:
        """Read several documents in one round trip."""
        if not refs:
            return []
        return list(self.db.get_all(refs))

    def commit_in_chunks(self, operations: Iterable[WriteOperation]) -> int:
        """
        Commit writes in batches no larger than the Firestore limit.

        Args:
            operations: ("delete", ref) or ("set", ref, data, merge) tuples

        Returns:
            Number of writes committed
        """
        operations = list(operations)
        committed = 0

        for group in chunked(operations, self.batch_write_limit):
            batch = self.db.batch()
            for op in group:
                kind, ref = op[0], op[1]
                if kind == "delete":
                    batch.delete(ref)
                elif kind == "set":
                    batch.set(ref, op[2], merge=op[3] if len(op) > 3 else False)
                else:
                    raise ValueError(f"Unknown write operation: {kind}")
            try:
                batch.commit()
            except Exception as e:
                logger.error(f"Firestore batch commit failed after {committed} writes: {str(e)}")
                raise
            committed += len(group)
            logger.debug(f"Committed batch of {len(group)} writes")

        return committed

    def delete_in_chunks(self, refs: Iterable[Any]) -> int:
        return self.commit_in_chunks(("delete", ref) for ref in refs)

    def list_document_refs(self, collection_ref, include_missing: bool = False) -> List[Any]:
        """
        List the document references of a (sub)collection.

        Args:
            collection_ref: CollectionReference
            include_missing: Also return ids whose document was deleted but
                which still hold subcollections
        """
        if include_missing:
            return list(collection_ref.list_documents())
        return [snap.reference for snap in collection_ref.stream()]

    def latest_value(self, collection: str, field: str) -> Any:
        """
        Value of ``field`` on the newest document of a collection ordered by that field.

        Returns:
            The value, or None when the collection is empty
        """
        query = (
            self.db.collection(collection)
            .order_by(field, direction=firestore.Query.DESCENDING)
            .limit(1)
        )
        for snap in query.stream():
            return (snap.to_dict() or {}).get(field)
        return None

    def count_where(self, collection: str, field: str, op: str, value: Any) -> int:
        """
        Count documents matching a single field filter with an aggregation query.
        """
        query = self.db.collection(collection).where(filter=firestore.FieldFilter(field, op, value))
        results = query.count().get()
        for result in results:
            for aggregation in result:
                return int(aggregation.value or 0)
        return 0

    def run_in_transaction(self, func: Callable, *args, **kwargs) -> Any:
        """
        Run ``func(transaction, *args, **kwargs)`` inside a Firestore transaction.

        The SDK retries the function when the transaction is contended.
        """
        transaction = self.db.transaction()
        return firestore.transactional(func)(transaction, *args, **kwargs)
