"""
Type models for kvstore operations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import TracebackType
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from .core.lock_operations import DistributedLock

# Scalar kinds accepted as stored values
Value = Union[str, int, bytes]


@dataclass
class LockHandle:
    """Proof of a successful lock acquisition.

    The token is the random value written to the lock key; release deletes
    the key only while it still holds this token.
    """

    key: str
    token: str
    ttl: int = 0
    acquired_at: int = 0
    lock: DistributedLock | None = field(default=None, repr=False, compare=False)

    def release(self) -> bool:
        if self.lock is None:
            raise RuntimeError(f"Lock handle for '{self.key}' is not bound to a lock")
        return self.lock.release(self)

    def __enter__(self) -> LockHandle:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.release()

    def to_dict(self) -> dict[str, str | int]:
        return {
            "lock": self.key,
            "token": self.token,
            "ttl": self.ttl,
            "acquired_at": self.acquired_at,
        }
