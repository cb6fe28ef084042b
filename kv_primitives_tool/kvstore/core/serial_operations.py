"""
Serial number operations for kvstore.

Each sequence is a field of one hash. Allocation is a single hash-increment,
so the store hands out non-overlapping ranges to concurrent callers.
"""

from ..utils import parse_int, validate_key, validate_positive
from .client import StoreHandle


class SerialNumberAllocator:
    """Strictly increasing integers per named sequence."""

    def __init__(self, store: StoreHandle, hash_key: str):
        validate_key(hash_key)
        self.store = store
        self.hash_key = hash_key

    def get_one(self, field: str) -> int:
        """Next number in the sequence; a fresh sequence starts at 1."""
        validate_key(field)
        return self.store.hash_increment_by(self.hash_key, field, 1)

    def get_many(self, field: str, count: int) -> list[int]:
        """
        Allocate count consecutive numbers.

        Returns:
            The allocated numbers in ascending order
        """
        start = self.reserve(field, count)
        return list(range(start, start + count))

    def reserve(self, field: str, count: int) -> int:
        """
        Allocate count consecutive numbers and return the first one.

        Raises:
            InvalidArgumentError: If count is not positive
        """
        validate_key(field)
        validate_positive("count", count)
        end = self.store.hash_increment_by(self.hash_key, field, count)
        return end - count + 1

    def current(self, field: str) -> int:
        """Last number issued for the sequence, 0 if none."""
        validate_key(field)
        return parse_int(self.store.hash_get(self.hash_key, field), field)

    def sequences(self) -> dict[str, int]:
        return {
            field: parse_int(value, field)
            for field, value in self.store.hash_get_all(self.hash_key).items()
        }
