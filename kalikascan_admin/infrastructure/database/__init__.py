from .connections import (
    init_database_connections,
    get_firebase_app,
    get_firestore_db,
    get_redis_client
)
from .redis_client import RedisClient
from .firestore_client import FirestoreClient, chunked

__all__ = [
    "init_database_connections",
    "get_firebase_app",
    "get_firestore_db",
    "get_redis_client",
    "RedisClient",
    "FirestoreClient",
    "chunked"
]
