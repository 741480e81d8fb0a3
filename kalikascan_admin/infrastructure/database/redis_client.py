"""
Redis connection holding JSON encoded values.
"""
import json
import logging
from typing import Any, Optional

import redis

logger = logging.getLogger(__name__)


class RedisClient:
    """
    Wraps redis.Redis. Dicts and lists are stored as JSON and decoded on read;
    Redis errors are logged and reported as a miss or a failed write.
    """

    def __init__(self, host: str, port: int, db: int = 0, password: Optional[str] = None):
        params = {"host": host, "port": port, "db": db, "decode_responses": True}
        if password:
            params["password"] = password

        self.redis = redis.Redis(**params)
        try:
            self.redis.ping()
        except redis.ConnectionError as e:
            logger.error(f"Redis at {host}:{port} is not answering: {str(e)}")
            raise

    def set(self, key: str, value: Any, expire: Optional[int] = None) -> bool:
        """
        Store a value.

        Args:
            key: Key
            value: Value, JSON encoded when it is a dict or list
            expire: Expiry in seconds, none when omitted

        Returns:
            Whether Redis accepted the write
        """
        payload = json.dumps(value) if isinstance(value, (dict, list)) else value
        try:
            return bool(self.redis.set(key, payload, ex=expire))
        except redis.RedisError as e:
            logger.error(f"Redis set error on {key}: {str(e)}")
            return False

    def get(self, key: str, default: Any = None) -> Any:
        try:
            raw = self.redis.get(key)
        except redis.RedisError as e:
            logger.error(f"Redis get error on {key}: {str(e)}")
            return default

        if raw is None:
            return default
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            return raw
