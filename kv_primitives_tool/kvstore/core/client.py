"""
Store handle contract and connection factory.

Every primitive talks to the store through a ``StoreHandle``: a small set of
single-key commands the store executes atomically. Any object with these
methods can stand in for the real store, which is how tests run against an
in-memory Redis.
"""

from typing import Protocol, runtime_checkable

from ..config import StoreConfig
from ..constants import DYNAMODB_SCHEME
from ..logging_config import get_logger
from ..models import Value
from .dynamodb_client import DynamoDBClient
from .redis_client import RedisClient

logger = get_logger(__name__)


@runtime_checkable
class StoreHandle(Protocol):
    """Atomic single-key commands consumed by the primitives."""

    def set_if_absent(self, key: str, value: Value, ttl: int) -> bool: ...

    def set(self, key: str, value: Value) -> None: ...

    def get(self, key: str) -> str | None: ...

    def delete(self, key: str) -> int: ...

    def compare_and_delete(self, key: str, value: Value) -> bool: ...

    def increment_by(self, key: str, amount: int) -> int: ...

    def decrement_by(self, key: str, amount: int) -> int: ...

    def expire(self, key: str, ttl: int) -> bool: ...

    def hash_increment_by(self, hash_key: str, field: str, amount: int) -> int: ...

    def hash_get(self, hash_key: str, field: str) -> str | None: ...

    def hash_get_all(self, hash_key: str) -> dict[str, str]: ...

    def close(self) -> None: ...


def connect(config: StoreConfig | None = None) -> StoreHandle:
    """
    Open a store handle for the configured URL.

    Args:
        config: Store configuration (defaults to StoreConfig.from_env())

    Returns:
        RedisClient for redis://, rediss:// and unix:// URLs,
        DynamoDBClient for dynamodb://<table> URLs

    Raises:
        InvalidArgumentError: If the URL scheme is not supported
    """
    if config is None:
        config = StoreConfig.from_env()

    if config.scheme == DYNAMODB_SCHEME:
        logger.debug(f"Connecting to DynamoDB table '{config.table_name}'")
        return DynamoDBClient(
            config.table_name,
            region=config.region,
            profile=config.profile,
            key_prefix=config.key_prefix,
        )

    logger.debug(f"Connecting to Redis at {config.scheme}:// target")
    return RedisClient.from_url(
        config.url,
        key_prefix=config.key_prefix,
        socket_timeout=config.socket_timeout,
    )
