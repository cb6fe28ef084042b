"""
Throttle (fixed-window rate limit) operations for kvstore.
"""

from ..constants import DEFAULT_THROTTLE_WINDOW
from ..logging_config import get_logger
from ..utils import parse_int, validate_key, validate_positive
from .client import StoreHandle

logger = get_logger(__name__)


class ThrottleLimiter:
    """
    Bound the number of increments accepted for a key within a fixed window.

    The window starts with the increment that creates the key and ends when
    the key expires ``window_seconds`` later; the next increment then starts a
    fresh window. Increment and expire are two separate commands: if the
    caller dies between them the key keeps counting with no expiry until it
    is deleted.
    """

    def __init__(
        self,
        store: StoreHandle,
        key: str,
        capacity: int,
        window_seconds: int = DEFAULT_THROTTLE_WINDOW,
    ):
        """
        Args:
            store: Store handle
            key: Throttle key
            capacity: Increments allowed per window
            window_seconds: Window length in seconds (default: 60)

        Raises:
            InvalidArgumentError: If capacity or window_seconds is not positive
        """
        validate_key(key)
        self.store = store
        self.key = key
        self.capacity = validate_positive("capacity", capacity)
        self.window_seconds = validate_positive("window_seconds", window_seconds)

    def get(self) -> int:
        """Current count in the window, 0 when no window is open."""
        return parse_int(self.store.get(self.key), self.key)

    def record(self, amount: int = 1) -> int:
        """
        Record amount against the window and return the post-increment count.

        The increment always applies, even when over the limit.
        """
        validate_positive("amount", amount)
        count = self.store.increment_by(self.key, amount)
        if count == amount:
            # This increment created the key and opens a new window
            self.store.expire(self.key, self.window_seconds)
        return count

    def incr(self, amount: int = 1) -> bool:
        """
        Record amount against the window.

        Returns:
            True if the post-increment count exceeds capacity
        """
        count = self.record(amount)
        over = count > self.capacity
        if over:
            logger.info(f"Throttle '{self.key}' over limit: {count}/{self.capacity}")
        return over

    def remaining(self) -> int:
        return max(self.capacity - self.get(), 0)
