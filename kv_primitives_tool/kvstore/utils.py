"""
Utility functions for kvstore operations.
"""

import json
from typing import Any

from .exceptions import InvalidArgumentError, KVStoreError


def format_key(prefix: str, key: str) -> str:
    """
    Format a key with namespace prefix.

    Args:
        prefix: Namespace prefix (e.g., 'kv', 'hash')
        key: User-provided key

    Returns:
        Formatted key with prefix (e.g., 'kv:mykey')
    """
    return f"{prefix}:{key}"


def to_wire(value: Any) -> str:
    """
    Convert a stored value to its wire representation.

    Integers serialize to their decimal form and byte strings are decoded
    as UTF-8. Booleans are rejected even though they are ints.

    Raises:
        InvalidArgumentError: If the value is not str, int or bytes
    """
    if isinstance(value, bool):
        raise InvalidArgumentError(f"Unsupported value type: {type(value).__name__}")
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidArgumentError(f"Byte values must be valid UTF-8: {e}") from e
    raise InvalidArgumentError(f"Unsupported value type: {type(value).__name__}")


def parse_int(raw: str | None, key: str) -> int:
    """
    Parse a stored value as an integer, treating an absent key as 0.

    Raises:
        KVStoreError: If the stored value is not an integer
    """
    if raw is None:
        return 0
    try:
        return int(raw)
    except ValueError:
        raise KVStoreError(f"Value at '{key}' is not an integer: {raw!r}") from None


def validate_key(key: str) -> bool:
    """
    Validate key name.

    Raises:
        InvalidArgumentError: If key is invalid
    """
    if not key:
        raise InvalidArgumentError("Key cannot be empty")
    if len(key) > 1024:
        raise InvalidArgumentError("Key cannot exceed 1024 characters")
    return True


def validate_int(name: str, value: int) -> int:
    """Validate that a counter value or amount is an integer (bools rejected)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"{name} must be an integer, got {value!r}")
    return value


def validate_positive(name: str, value: int) -> int:
    """
    Validate that a TTL, capacity, window or count is a positive integer.

    Raises:
        InvalidArgumentError: If value is not a positive integer
    """
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidArgumentError(f"{name} must be a positive integer, got {value!r}")
    return value


def output_json(data: Any, quiet: bool = False) -> None:
    """
    Output JSON to stdout.

    Args:
        data: Data to output as JSON
        quiet: If True, suppress output
    """
    if not quiet:
        print(json.dumps(data))


def output_text(message: str, quiet: bool = False) -> None:
    """
    Output text to stdout.

    Args:
        message: Message to output
        quiet: If True, suppress output
    """
    if not quiet:
        print(message)


def error_json(error: str, solution: str, exit_code: int) -> str:
    """Format error as a JSON line."""
    return json.dumps({"error": error, "solution": solution, "exit_code": exit_code})


def error_text(error: str, solution: str) -> str:
    """Format error as human-readable text."""
    return f"❌ Error: {error}\n\n💡 Solution: {solution}"
