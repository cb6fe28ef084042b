"""Coordination primitives (lock, throttle, counter, serial numbers) on a remote key-value store."""

from kv_primitives_tool.kvstore.config import StoreConfig
from kv_primitives_tool.kvstore.core.client import StoreHandle, connect
from kv_primitives_tool.kvstore.core.counter_operations import AtomicCounter
from kv_primitives_tool.kvstore.core.lock_operations import DistributedLock
from kv_primitives_tool.kvstore.core.serial_operations import SerialNumberAllocator
from kv_primitives_tool.kvstore.core.throttle_operations import ThrottleLimiter
from kv_primitives_tool.kvstore.exceptions import (
    InvalidArgumentError,
    KVStoreError,
    LockUnavailableError,
    StoreUnavailableError,
)
from kv_primitives_tool.kvstore.models import LockHandle

__version__ = "0.1.0"

__all__ = [
    "AtomicCounter",
    "DistributedLock",
    "InvalidArgumentError",
    "KVStoreError",
    "LockHandle",
    "LockUnavailableError",
    "SerialNumberAllocator",
    "StoreConfig",
    "StoreHandle",
    "StoreUnavailableError",
    "ThrottleLimiter",
    "connect",
]
