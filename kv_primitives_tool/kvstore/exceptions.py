"""
Custom exceptions for kvstore operations.
"""


class KVStoreError(Exception):
    """Base exception for kvstore operations."""

    pass


class StoreUnavailableError(KVStoreError):
    """The store could not be reached (connection refused, timeout)."""

    pass


class InvalidArgumentError(KVStoreError, ValueError):
    """An argument was rejected before any store command was issued."""

    pass


class ConditionFailedError(KVStoreError):
    """Conditional update failed."""

    pass


class LockUnavailableError(KVStoreError):
    """Lock is held by another process."""

    pass


class AWSThrottlingError(KVStoreError):
    """DynamoDB throttling occurred."""

    pass


class AWSPermissionError(KVStoreError):
    """AWS permission denied."""

    pass


class TableNotFoundError(KVStoreError):
    """DynamoDB table does not exist."""

    pass


class TableAlreadyExistsError(KVStoreError):
    """DynamoDB table already exists."""

    pass
