"""
Redis client wrapper with error handling.
"""

from typing import Any

from redis import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from ..exceptions import KVStoreError, StoreUnavailableError
from ..logging_config import get_logger
from ..models import Value
from ..utils import to_wire

logger = get_logger(__name__)

# Delete KEYS[1] only while it still holds ARGV[1]
COMPARE_AND_DELETE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""


def _decode(value: Any) -> Any:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


class RedisClient:
    """Redis client wrapper with error handling."""

    def __init__(self, redis: Redis, key_prefix: str | None = None):
        """
        Initialize Redis client.

        Args:
            redis: redis-py client (a fakeredis instance works too)
            key_prefix: Optional string prepended to every key
        """
        self.redis = redis
        self.key_prefix = key_prefix or ""
        self._compare_and_delete = self.redis.register_script(COMPARE_AND_DELETE_SCRIPT)

    @classmethod
    def from_url(
        cls,
        url: str,
        key_prefix: str | None = None,
        socket_timeout: float | None = None,
    ) -> "RedisClient":
        """Create a client for a redis://, rediss:// or unix:// URL."""
        redis = Redis.from_url(url, decode_responses=True, socket_timeout=socket_timeout)
        return cls(redis, key_prefix=key_prefix)

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def set_if_absent(self, key: str, value: Value, ttl: int) -> bool:
        """
        Set key to value with an expiry, only if the key does not exist.

        Issued as a single SET NX EX command so the key is never visible
        without its expiry.

        Returns:
            True if the key was set, False if it already existed
        """
        logger.debug(f"SET {key} NX EX {ttl}")
        try:
            return bool(self.redis.set(self._key(key), to_wire(value), nx=True, ex=ttl))
        except RedisError as e:
            self._handle_error(e)
            raise  # For type checker

    def set(self, key: str, value: Value) -> None:
        logger.debug(f"SET {key}")
        try:
            self.redis.set(self._key(key), to_wire(value))
        except RedisError as e:
            self._handle_error(e)
            raise  # For type checker

    def get(self, key: str) -> str | None:
        try:
            return _decode(self.redis.get(self._key(key)))
        except RedisError as e:
            self._handle_error(e)
            raise  # For type checker

    def delete(self, key: str) -> int:
        logger.debug(f"DEL {key}")
        try:
            return int(self.redis.delete(self._key(key)))
        except RedisError as e:
            self._handle_error(e)
            raise  # For type checker

    def compare_and_delete(self, key: str, value: Value) -> bool:
        """
        Delete key only if it currently holds value.

        Returns:
            True if the key was deleted
        """
        logger.debug(f"compare-and-delete {key}")
        try:
            return int(self._compare_and_delete(keys=[self._key(key)], args=[to_wire(value)])) == 1
        except RedisError as e:
            self._handle_error(e)
            raise  # For type checker

    def increment_by(self, key: str, amount: int) -> int:
        logger.debug(f"INCRBY {key} {amount}")
        try:
            return int(self.redis.incrby(self._key(key), amount))
        except RedisError as e:
            self._handle_error(e)
            raise  # For type checker

    def decrement_by(self, key: str, amount: int) -> int:
        logger.debug(f"DECRBY {key} {amount}")
        try:
            return int(self.redis.decrby(self._key(key), amount))
        except RedisError as e:
            self._handle_error(e)
            raise  # For type checker

    def expire(self, key: str, ttl: int) -> bool:
        logger.debug(f"EXPIRE {key} {ttl}")
        try:
            return bool(self.redis.expire(self._key(key), ttl))
        except RedisError as e:
            self._handle_error(e)
            raise  # For type checker

    def hash_increment_by(self, hash_key: str, field: str, amount: int) -> int:
        logger.debug(f"HINCRBY {hash_key} {field} {amount}")
        try:
            return int(self.redis.hincrby(self._key(hash_key), field, amount))
        except RedisError as e:
            self._handle_error(e)
            raise  # For type checker

    def hash_get(self, hash_key: str, field: str) -> str | None:
        try:
            return _decode(self.redis.hget(self._key(hash_key), field))
        except RedisError as e:
            self._handle_error(e)
            raise  # For type checker

    def hash_get_all(self, hash_key: str) -> dict[str, str]:
        try:
            raw = self.redis.hgetall(self._key(hash_key))
        except RedisError as e:
            self._handle_error(e)
            raise  # For type checker
        return {_decode(field): _decode(value) for field, value in raw.items()}

    def close(self) -> None:
        self.redis.close()

    def _handle_error(self, error: RedisError) -> None:
        """
        Convert redis-py errors to kvstore exceptions.

        Raises:
            StoreUnavailableError: If the server cannot be reached or timed out
            KVStoreError: For other errors (wrong type, non-integer value)
        """
        if isinstance(error, (RedisConnectionError, RedisTimeoutError)):
            raise StoreUnavailableError(f"Redis unavailable: {error}") from error
        raise KVStoreError(f"Redis error: {error}") from error
