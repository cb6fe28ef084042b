"""
Constants for kvstore operations.
"""

# Default store target
DEFAULT_STORE_URL = "redis://localhost:6379/0"
DEFAULT_TABLE_NAME = "kv-primitives-tool-kvstore"

# Default TTLs (in seconds)
DEFAULT_LOCK_TTL = 30
DEFAULT_THROTTLE_WINDOW = 60

# Namespace prefixes for DynamoDB keys
PREFIX_KV = "kv"
PREFIX_HASH = "hash"

# DynamoDB attribute names
ATTR_PK = "PK"
ATTR_SK = "SK"
ATTR_VALUE = "value"
ATTR_TTL = "ttl"
ATTR_UPDATED_AT = "updated_at"

# URL schemes understood by connect()
REDIS_SCHEMES = ("redis", "rediss", "unix")
DYNAMODB_SCHEME = "dynamodb"

# Conditional put retries when replacing an expired DynamoDB item
EXPIRED_REPLACE_ATTEMPTS = 5

# CLI exit codes
EXIT_INVALID = 1
EXIT_STORE_ERROR = 3
EXIT_LOCK_BUSY = 4
EXIT_THROTTLED = 5
EXIT_UNAVAILABLE = 6
