"""
Counter operations for kvstore.
"""

from ..logging_config import get_logger
from ..utils import parse_int, validate_int, validate_key
from .client import StoreHandle

logger = get_logger(__name__)


class AtomicCounter:
    """
    A single integer bound to a key.

    Increments and decrements are applied by the store, so concurrent
    callers in any number of processes never lose an update.
    """

    def __init__(self, store: StoreHandle, key: str, value: int = 0, initialize: bool = True):
        """
        Args:
            store: Store handle
            key: Counter key
            value: Initial value (default: 0)
            initialize: If True, overwrite the key with value now. Pass False
                to bind to an existing counter without touching it.
        """
        validate_key(key)
        validate_int("value", value)
        self.store = store
        self.key = key
        if initialize:
            self.reset(value)

    def get(self) -> int:
        """Current value; an absent key reads as 0."""
        return parse_int(self.store.get(self.key), self.key)

    def incr(self, amount: int = 1) -> int:
        """Atomically add amount and return the new value."""
        validate_int("amount", amount)
        return self.store.increment_by(self.key, amount)

    def decr(self, amount: int = 1) -> int:
        """Atomically subtract amount and return the new value."""
        validate_int("amount", amount)
        return self.store.decrement_by(self.key, amount)

    def reset(self, value: int = 0) -> None:
        """Unconditionally overwrite the counter with value."""
        validate_int("value", value)
        logger.debug(f"Resetting counter '{self.key}' to {value}")
        self.store.set(self.key, value)
