"""
DynamoDB client wrapper with error handling.

Implements the store commands on a single table keyed by PK/SK. DynamoDB
removes expired items lazily, so every read and conditional write compares
the ``ttl`` attribute against the current time and treats an expired item
as absent.
"""

import math
import time
from decimal import Decimal
from typing import Any

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from ..constants import (
    ATTR_PK,
    ATTR_SK,
    ATTR_TTL,
    ATTR_UPDATED_AT,
    ATTR_VALUE,
    EXPIRED_REPLACE_ATTEMPTS,
    PREFIX_HASH,
    PREFIX_KV,
)
from ..exceptions import (
    AWSPermissionError,
    AWSThrottlingError,
    ConditionFailedError,
    KVStoreError,
    StoreUnavailableError,
    TableNotFoundError,
)
from ..logging_config import get_logger
from ..models import Value
from ..utils import format_key, to_wire

logger = get_logger(__name__)

# Condition fragment: the item carries no deadline or its deadline is in the future
LIVE_CONDITION = "(attribute_not_exists(#ttl) OR #ttl > :now)"


def _is_expired(item: dict[str, Any], now: int) -> bool:
    deadline = item.get(ATTR_TTL)
    return deadline is not None and int(deadline) <= now


def _deadline(ttl: int) -> int:
    # Rounded up: an item is expired once the floored clock reaches the deadline,
    # so the deadline must be at least ttl seconds after the real current time
    return math.ceil(time.time()) + ttl


def _to_attribute(value: Value) -> Any:
    # ints are stored as numbers so ADD can operate on them
    if isinstance(value, int) and not isinstance(value, bool):
        return Decimal(value)
    return to_wire(value)


def _from_attribute(value: Any) -> str:
    if isinstance(value, Decimal):
        return str(int(value))
    return str(value)


class DynamoDBClient:
    """DynamoDB client wrapper with error handling."""

    def __init__(
        self,
        table_name: str,
        region: str | None = None,
        profile: str | None = None,
        key_prefix: str | None = None,
    ):
        """
        Initialize DynamoDB client.

        Args:
            table_name: DynamoDB table name
            region: AWS region (optional, uses SDK default)
            profile: AWS profile (optional, uses SDK default)
            key_prefix: Optional string prepended to every key
        """
        session = boto3.Session(profile_name=profile, region_name=region)
        self.dynamodb = session.resource("dynamodb")
        self.table = self.dynamodb.Table(table_name)
        self.table_name = table_name
        self.key_prefix = key_prefix or ""

    def _item_key(self, key: str) -> dict[str, str]:
        pk = format_key(PREFIX_KV, f"{self.key_prefix}{key}")
        return {ATTR_PK: pk, ATTR_SK: pk}

    def _hash_key(self, hash_key: str, field: str) -> dict[str, str]:
        return {ATTR_PK: format_key(PREFIX_HASH, f"{self.key_prefix}{hash_key}"), ATTR_SK: field}

    # Store commands

    def set_if_absent(self, key: str, value: Value, ttl: int) -> bool:
        """
        Write the item with a deadline unless a live item already exists.

        Returns:
            True if the item was written, False if a live item exists
        """
        now = int(time.time())
        item = {
            **self._item_key(key),
            ATTR_VALUE: _to_attribute(value),
            ATTR_TTL: _deadline(ttl),
            ATTR_UPDATED_AT: now,
        }
        logger.debug(f"put-if-absent {key} ttl={ttl}")
        try:
            self.put_item(
                item,
                condition_expression="attribute_not_exists(PK) OR #ttl <= :now",
                expression_attribute_names={"#ttl": ATTR_TTL},
                expression_attribute_values={":now": now},
            )
            return True
        except ConditionFailedError:
            return False

    def set(self, key: str, value: Value) -> None:
        logger.debug(f"put {key}")
        self.put_item(
            {
                **self._item_key(key),
                ATTR_VALUE: _to_attribute(value),
                ATTR_UPDATED_AT: int(time.time()),
            }
        )

    def get(self, key: str) -> str | None:
        item = self.get_item(self._item_key(key))
        if not item or _is_expired(item, int(time.time())):
            return None
        return _from_attribute(item[ATTR_VALUE])

    def delete(self, key: str) -> int:
        logger.debug(f"delete {key}")
        response = self.delete_item(self._item_key(key), return_values="ALL_OLD")
        old = response.get("Attributes")
        if not old or _is_expired(old, int(time.time())):
            return 0
        return 1

    def compare_and_delete(self, key: str, value: Value) -> bool:
        """
        Delete the item only while it is live and holds value.

        Returns:
            True if the item was deleted
        """
        logger.debug(f"compare-and-delete {key}")
        try:
            self.delete_item(
                self._item_key(key),
                condition_expression=f"#value = :value AND {LIVE_CONDITION}",
                expression_attribute_names={"#value": ATTR_VALUE, "#ttl": ATTR_TTL},
                expression_attribute_values={
                    ":value": _to_attribute(value),
                    ":now": int(time.time()),
                },
            )
            return True
        except ConditionFailedError:
            return False

    def increment_by(self, key: str, amount: int) -> int:
        """
        Atomically add amount to a numeric item.

        A missing item counts as 0. An expired item that DynamoDB has not
        removed yet is replaced by a fresh item holding amount, with no
        deadline, as if it had been deleted.

        Raises:
            ConditionFailedError: If the expired item kept being replaced
                concurrently by other writers
        """
        item_key = self._item_key(key)
        logger.debug(f"add {key} {amount}")

        for _ in range(EXPIRED_REPLACE_ATTEMPTS):
            now = int(time.time())
            try:
                response = self.update_item(
                    key=item_key,
                    update_expression="ADD #value :amount SET updated_at = :now",
                    expression_attribute_names={"#value": ATTR_VALUE, "#ttl": ATTR_TTL},
                    expression_attribute_values={":amount": amount, ":now": now},
                    condition_expression=LIVE_CONDITION,
                    return_values="UPDATED_NEW",
                )
                return int(response["Attributes"][ATTR_VALUE])
            except ConditionFailedError:
                pass

            try:
                self.put_item(
                    {**item_key, ATTR_VALUE: Decimal(amount), ATTR_UPDATED_AT: now},
                    condition_expression="#ttl <= :now",
                    expression_attribute_names={"#ttl": ATTR_TTL},
                    expression_attribute_values={":now": now},
                )
                return amount
            except ConditionFailedError:
                logger.debug(f"Lost race replacing expired item '{key}', retrying")

        raise ConditionFailedError(f"Could not increment '{key}': concurrent replacement")

    def decrement_by(self, key: str, amount: int) -> int:
        return self.increment_by(key, -amount)

    def expire(self, key: str, ttl: int) -> bool:
        """
        Set the item's deadline to ttl seconds from now.

        Returns:
            True if a live item was updated, False if it is absent or expired
        """
        now = int(time.time())
        logger.debug(f"expire {key} {ttl}")
        try:
            self.update_item(
                key=self._item_key(key),
                update_expression="SET #ttl = :deadline",
                expression_attribute_names={"#ttl": ATTR_TTL},
                expression_attribute_values={":deadline": _deadline(ttl), ":now": now},
                condition_expression=f"attribute_exists(PK) AND {LIVE_CONDITION}",
            )
            return True
        except ConditionFailedError:
            return False

    def hash_increment_by(self, hash_key: str, field: str, amount: int) -> int:
        logger.debug(f"add {hash_key}.{field} {amount}")
        response = self.update_item(
            key=self._hash_key(hash_key, field),
            update_expression="ADD #value :amount SET updated_at = :now",
            expression_attribute_names={"#value": ATTR_VALUE},
            expression_attribute_values={":amount": amount, ":now": int(time.time())},
            return_values="UPDATED_NEW",
        )
        return int(response["Attributes"][ATTR_VALUE])

    def hash_get(self, hash_key: str, field: str) -> str | None:
        item = self.get_item(self._hash_key(hash_key, field))
        if not item:
            return None
        return _from_attribute(item[ATTR_VALUE])

    def hash_get_all(self, hash_key: str) -> dict[str, str]:
        pk = self._hash_key(hash_key, "")[ATTR_PK]
        items = self.query(Key(ATTR_PK).eq(pk))
        return {item[ATTR_SK]: _from_attribute(item[ATTR_VALUE]) for item in items}

    def close(self) -> None:
        self.dynamodb.meta.client.close()

    # Low-level table access

    def put_item(
        self,
        item: dict[str, Any],
        condition_expression: str | None = None,
        expression_attribute_names: dict[str, str] | None = None,
        expression_attribute_values: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Put item with optional condition.

        Raises:
            ConditionFailedError: If condition fails
            KVStoreError: For other DynamoDB errors
        """
        try:
            kwargs: dict[str, Any] = {"Item": item}
            if condition_expression:
                kwargs["ConditionExpression"] = condition_expression
            if expression_attribute_names:
                kwargs["ExpressionAttributeNames"] = expression_attribute_names
            if expression_attribute_values:
                kwargs["ExpressionAttributeValues"] = expression_attribute_values
            return self.table.put_item(**kwargs)  # type: ignore[no-any-return]
        except (ClientError, BotoCoreError) as e:
            self._handle_error(e)
            raise  # For type checker

    def get_item(self, key: dict[str, Any]) -> dict[str, Any] | None:
        """
        Get item by key with a strongly consistent read.

        Returns:
            Item if found, None otherwise
        """
        try:
            response = self.table.get_item(Key=key, ConsistentRead=True)
            return response.get("Item")
        except (ClientError, BotoCoreError) as e:
            self._handle_error(e)
            raise  # For type checker

    def update_item(
        self,
        key: dict[str, Any],
        update_expression: str,
        expression_attribute_names: dict[str, str] | None = None,
        expression_attribute_values: dict[str, Any] | None = None,
        condition_expression: str | None = None,
        return_values: str = "NONE",
    ) -> dict[str, Any]:
        """
        Update item with optional condition.

        Raises:
            ConditionFailedError: If condition fails
            KVStoreError: For other DynamoDB errors
        """
        try:
            kwargs: dict[str, Any] = {
                "Key": key,
                "UpdateExpression": update_expression,
                "ReturnValues": return_values,
            }
            if condition_expression:
                kwargs["ConditionExpression"] = condition_expression
            if expression_attribute_names:
                kwargs["ExpressionAttributeNames"] = expression_attribute_names
            if expression_attribute_values:
                kwargs["ExpressionAttributeValues"] = expression_attribute_values
            return self.table.update_item(**kwargs)  # type: ignore[no-any-return]
        except (ClientError, BotoCoreError) as e:
            self._handle_error(e)
            raise  # For type checker

    def delete_item(
        self,
        key: dict[str, Any],
        condition_expression: str | None = None,
        expression_attribute_names: dict[str, str] | None = None,
        expression_attribute_values: dict[str, Any] | None = None,
        return_values: str = "NONE",
    ) -> dict[str, Any]:
        """
        Delete item with optional condition.

        Raises:
            ConditionFailedError: If condition fails
            KVStoreError: For other DynamoDB errors
        """
        try:
            kwargs: dict[str, Any] = {"Key": key, "ReturnValues": return_values}
            if condition_expression:
                kwargs["ConditionExpression"] = condition_expression
            if expression_attribute_names:
                kwargs["ExpressionAttributeNames"] = expression_attribute_names
            if expression_attribute_values:
                kwargs["ExpressionAttributeValues"] = expression_attribute_values
            return self.table.delete_item(**kwargs)  # type: ignore[no-any-return]
        except (ClientError, BotoCoreError) as e:
            self._handle_error(e)
            raise  # For type checker

    def query(self, key_condition_expression: Any) -> list[dict[str, Any]]:
        """
        Query all items matching a key condition, following pagination.
        """
        items: list[dict[str, Any]] = []
        kwargs: dict[str, Any] = {
            "KeyConditionExpression": key_condition_expression,
            "ConsistentRead": True,
        }
        try:
            while True:
                response = self.table.query(**kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    return items
                kwargs["ExclusiveStartKey"] = last_key
        except (ClientError, BotoCoreError) as e:
            self._handle_error(e)
            raise  # For type checker

    def _handle_error(self, error: ClientError | BotoCoreError) -> None:
        """
        Convert boto3 errors to kvstore exceptions.

        Raises:
            StoreUnavailableError: If the endpoint cannot be reached or timed out
            ConditionFailedError: If condition check failed
            TableNotFoundError: If table not found
            AWSThrottlingError: If throttled
            AWSPermissionError: If permission denied
            KVStoreError: For other errors
        """
        if isinstance(error, (EndpointConnectionError, ConnectTimeoutError, ReadTimeoutError)):
            raise StoreUnavailableError(f"DynamoDB unavailable: {error}") from error
        if not isinstance(error, ClientError):
            raise KVStoreError(f"DynamoDB error: {error}") from error

        code = error.response["Error"]["Code"]

        if code == "ConditionalCheckFailedException":
            raise ConditionFailedError(f"Condition failed: {error}")
        elif code == "ResourceNotFoundException":
            raise TableNotFoundError(f"Table '{self.table_name}' not found")
        elif code == "ProvisionedThroughputExceededException":
            raise AWSThrottlingError("DynamoDB throttling - retry with backoff")
        elif code == "AccessDeniedException":
            raise AWSPermissionError("AWS permission denied")
        else:
            raise KVStoreError(f"DynamoDB error: {error}")
