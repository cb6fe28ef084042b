"""
Lock operations for kvstore.

A lock is a key written with set-if-absent plus an expiry in one command, so
a crashed holder can keep the lock for at most ``ttl`` seconds. Each
acquisition writes a random token; release deletes the key only while it
still holds that token, so a holder whose lock expired and was re-acquired
by someone else cannot delete the new holder's lock.
"""

import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager

from ..constants import DEFAULT_LOCK_TTL
from ..exceptions import LockUnavailableError
from ..logging_config import get_logger
from ..models import LockHandle
from ..utils import validate_key, validate_positive
from .client import StoreHandle

logger = get_logger(__name__)


def generate_token() -> str:
    """Generate a random per-acquisition lock token."""
    return uuid.uuid4().hex


class DistributedLock:
    """Mutual-exclusion locks keyed by name."""

    def __init__(self, store: StoreHandle, default_ttl: int = DEFAULT_LOCK_TTL):
        """
        Args:
            store: Store handle
            default_ttl: TTL in seconds used when acquire() is given none

        Raises:
            InvalidArgumentError: If default_ttl is not positive
        """
        self.store = store
        self.default_ttl = validate_positive("ttl", default_ttl)

    def acquire(self, key: str, ttl: int | None = None) -> LockHandle | None:
        """
        Try once to acquire the lock.

        Args:
            key: Lock name
            ttl: Lock TTL in seconds (default: default_ttl)

        Returns:
            LockHandle if acquired, None if the lock is held by someone else

        Raises:
            InvalidArgumentError: If ttl is not positive
            StoreUnavailableError: If the store cannot be reached
        """
        validate_key(key)
        ttl = self.default_ttl if ttl is None else validate_positive("ttl", ttl)
        token = generate_token()

        if not self.store.set_if_absent(key, token, ttl):
            logger.debug(f"Lock '{key}' is busy")
            return None

        logger.info(f"Acquired lock '{key}' for {ttl}s")
        return LockHandle(key=key, token=token, ttl=ttl, acquired_at=int(time.time()), lock=self)

    def release(self, handle: LockHandle) -> bool:
        """
        Release a lock acquired through this handle.

        Returns:
            True if the lock was released, False if it had already expired
            or now belongs to another holder
        """
        released = self.store.compare_and_delete(handle.key, handle.token)
        if released:
            logger.info(f"Released lock '{handle.key}'")
        else:
            logger.warning(f"Lock '{handle.key}' was no longer held by this handle")
        return released

    def force_release(self, key: str) -> bool:
        """
        Delete the lock regardless of who holds it.

        Returns:
            True if a lock was deleted
        """
        validate_key(key)
        deleted = self.store.delete(key) > 0
        logger.info(f"Force released lock '{key}' (held: {deleted})")
        return deleted

    def holder(self, key: str) -> str | None:
        """Return the token of the current holder, or None if the lock is free."""
        validate_key(key)
        return self.store.get(key)

    @contextmanager
    def hold(self, key: str, ttl: int | None = None) -> Iterator[LockHandle]:
        """
        Hold the lock for the duration of a with-block.

        Raises:
            LockUnavailableError: If the lock is held by someone else
        """
        handle = self.acquire(key, ttl)
        if handle is None:
            raise LockUnavailableError(
                f"Lock '{key}' is held by another owner. Wait for release or TTL expiration."
            )
        try:
            yield handle
        finally:
            self.release(handle)
