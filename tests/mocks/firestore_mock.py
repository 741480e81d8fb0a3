# tests/mocks/firestore_mock.py
"""
In-memory stand-in for the parts of the Firestore client the services use.

Documents are kept in a dict keyed by their full path
(``map_scans/p1/comments/c1``). Writes understand merge, Increment and
SERVER_TIMESTAMP, queries understand where/order_by/limit/count, and
batches and transactions apply their writes on commit.
"""
import copy
import operator
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from firebase_admin import firestore
from google.api_core.exceptions import NotFound

from kalikascan_admin.infrastructure.database.firestore_client import FirestoreClient

FIXED_CREATE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)

OPERATORS = {
    "==": operator.eq,
    "!=": operator.ne,
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
}


def _resolve(value, current):
    if value is firestore.SERVER_TIMESTAMP:
        return datetime.now(timezone.utc)
    if isinstance(value, firestore.Increment):
        base = current if isinstance(current, (int, float)) and not isinstance(current, bool) else 0
        return base + value.value
    if isinstance(value, dict):
        return {k: _resolve(v, None) for k, v in value.items()}
    return value


def _merge(target, patch):
    for key, value in patch.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _merge(target[key], value)
        else:
            target[key] = _resolve(value, target.get(key))


class FakeSnapshot:

    def __init__(self, reference, data, create_time=None, update_time=None):
        self.reference = reference
        self.id = reference.id
        self._data = data
        self.exists = data is not None
        self.create_time = create_time
        self.update_time = update_time

    def to_dict(self):
        return copy.deepcopy(self._data) if self._data is not None else None

    def get(self, field):
        return (self._data or {}).get(field)


class FakeDocumentRef:

    def __init__(self, db, path):
        self._db = db
        self.path = path
        self.id = path.rsplit("/", 1)[-1]

    def __eq__(self, other):
        return isinstance(other, FakeDocumentRef) and other.path == self.path

    def __hash__(self):
        return hash(self.path)

    def __repr__(self):
        return f"FakeDocumentRef({self.path!r})"

    @property
    def parent(self):
        return FakeCollectionRef(self._db, self.path.rsplit("/", 1)[0])

    def collection(self, name):
        return FakeCollectionRef(self._db, f"{self.path}/{name}")

    def get(self, transaction=None):
        self._db.reads.append(self.path)
        return self._db.snapshot(self)

    def set(self, data, merge=False):
        self._db.apply_set(self.path, data, merge)

    def update(self, data):
        self._db.apply_update(self.path, data)

    def delete(self):
        self._db.apply_delete(self.path)


class FakeQuery:

    def __init__(self, db, matcher, filters=None, orders=None, limit_count=None):
        self._db = db
        self._matcher = matcher
        self._filters = filters or []
        self._orders = orders or []
        self._limit = limit_count

    def _copy(self, **changes):
        params = {
            "filters": list(self._filters),
            "orders": list(self._orders),
            "limit_count": self._limit,
        }
        params.update(changes)
        return FakeQuery(self._db, self._matcher, **params)

    def where(self, field_path=None, op_string=None, value=None, filter=None):
        if filter is not None:
            field_path, op_string, value = filter.field_path, filter.op_string, filter.value
        return self._copy(filters=self._filters + [(field_path, op_string, value)])

    def order_by(self, field_path, direction="ASCENDING"):
        return self._copy(orders=self._orders + [(field_path, direction)])

    def limit(self, count):
        return self._copy(limit_count=count)

    def _matches(self, data):
        for field, op, value in self._filters:
            if field not in data:
                return False
            try:
                if not OPERATORS[op](data[field], value):
                    return False
            except TypeError:
                # Firestore only compares values of the same type
                return False
        return True

    def _results(self):
        if self._db.fail_queries:
            raise self._db.fail_queries.pop(0)

        docs = [(path, data) for path, data in self._db.docs.items() if self._matcher(path)]
        docs = [(path, data) for path, data in docs if self._matches(data)]

        for field, direction in reversed(self._orders):
            # Documents without the ordered field are excluded, as in Firestore
            docs = [(path, data) for path, data in docs if field in data and data[field] is not None]
            docs.sort(key=lambda item: item[1][field], reverse=direction == firestore.Query.DESCENDING)

        if self._limit is not None:
            docs = docs[:self._limit]
        return [self._db.snapshot(FakeDocumentRef(self._db, path)) for path, _ in docs]

    def stream(self):
        return iter(self._results())

    def get(self):
        return self._results()

    def count(self):
        query = self

        class _Aggregation:
            def get(self):
                return [[SimpleNamespace(alias="count", value=len(query._results()))]]

        return _Aggregation()


class FakeCollectionRef(FakeQuery):

    def __init__(self, db, path):
        self.path = path
        self.id = path.rsplit("/", 1)[-1]
        super().__init__(db, lambda doc_path: doc_path.rsplit("/", 1)[0] == path)

    def document(self, doc_id):
        return FakeDocumentRef(self._db, f"{self.path}/{doc_id}")

    def list_documents(self):
        # Ids with data or with subcollections, whether or not the document exists
        prefix = f"{self.path}/"
        ids = sorted({
            doc_path[len(prefix):].split("/", 1)[0]
            for doc_path in self._db.docs
            if doc_path.startswith(prefix)
        })
        return iter(self.document(doc_id) for doc_id in ids)


class FakeWriteBatch:

    def __init__(self, db):
        self._db = db
        self._writes = []

    def set(self, ref, data, merge=False):
        self._writes.append(("set", ref.path, data, merge))

    def update(self, ref, data):
        self._writes.append(("update", ref.path, data, False))

    def delete(self, ref):
        self._writes.append(("delete", ref.path, None, False))

    def commit(self):
        if len(self._writes) > 500:
            raise ValueError("Firestore batches are limited to 500 writes")
        self._db.batch_sizes.append(len(self._writes))
        for kind, path, data, merge in self._writes:
            if kind == "set":
                self._db.apply_set(path, data, merge)
            elif kind == "update":
                self._db.apply_update(path, data)
            else:
                self._db.apply_delete(path)
        self._writes = []


class FakeTransaction(FakeWriteBatch):
    """Buffers writes like a batch; reads go straight to the store."""


class FakeFirestore:

    def __init__(self, docs=None):
        self.docs = {}
        self.create_times = {}
        self.update_times = {}
        self.batch_sizes = []
        self.reads = []
        # Exceptions raised by the next queries, in order
        self.fail_queries = []
        for path, data in (docs or {}).items():
            self.seed(path, data)

    def seed(self, path, data):
        self.docs[path] = copy.deepcopy(data)
        self.create_times.setdefault(path, FIXED_CREATE_TIME)
        self.update_times[path] = FIXED_CREATE_TIME + timedelta(hours=1)

    def data(self, path):
        return self.docs.get(path)

    def collection(self, path):
        return FakeCollectionRef(self, path)

    def document(self, path):
        return FakeDocumentRef(self, path)

    def collection_group(self, name):
        return FakeQuery(self, lambda doc_path: doc_path.split("/")[-2] == name)

    def batch(self):
        return FakeWriteBatch(self)

    def transaction(self):
        return FakeTransaction(self)

    def get_all(self, refs):
        return [self.snapshot(ref) for ref in refs]

    def snapshot(self, ref):
        data = self.docs.get(ref.path)
        return FakeSnapshot(
            ref,
            copy.deepcopy(data) if data is not None else None,
            create_time=self.create_times.get(ref.path),
            update_time=self.update_times.get(ref.path),
        )

    def apply_set(self, path, data, merge):
        now = datetime.now(timezone.utc)
        if merge and path in self.docs:
            _merge(self.docs[path], data)
        else:
            current = self.docs.get(path, {}) if merge else {}
            target = dict(current)
            _merge(target, data)
            self.docs[path] = target
            self.create_times.setdefault(path, now)
        self.update_times[path] = now

    def apply_update(self, path, data):
        if path not in self.docs:
            raise NotFound(f"No document to update: {path}")
        _merge(self.docs[path], data)
        self.update_times[path] = datetime.now(timezone.utc)

    def apply_delete(self, path):
        self.docs.pop(path, None)


class InMemoryFirestoreClient(FirestoreClient):
    """FirestoreClient whose transactions run directly against FakeFirestore."""

    def __init__(self, db=None, batch_write_limit=450):
        super().__init__(db if db is not None else FakeFirestore(), batch_write_limit=batch_write_limit)
        self.transactions = 0

    def run_in_transaction(self, func, *args, **kwargs):
        transaction = self.db.transaction()
        result = func(transaction, *args, **kwargs)
        transaction.commit()
        self.transactions += 1
        return result
