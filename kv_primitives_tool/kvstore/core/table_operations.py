"""
Table management operations for the DynamoDB backend.
"""

from typing import Any, Literal

import boto3
from botocore.exceptions import ClientError

from ..constants import ATTR_PK, ATTR_SK, ATTR_TTL
from ..exceptions import KVStoreError, TableAlreadyExistsError, TableNotFoundError


def create_table(
    table_name: str,
    region: str | None = None,
    profile: str | None = None,
    billing_mode: Literal["PAY_PER_REQUEST", "PROVISIONED"] = "PAY_PER_REQUEST",
) -> dict[str, Any]:
    """
    Create DynamoDB table for kvstore.

    Args:
        table_name: Table name
        region: AWS region (optional)
        profile: AWS profile (optional)
        billing_mode: Billing mode (PAY_PER_REQUEST or PROVISIONED)

    Returns:
        Table description

    Raises:
        TableAlreadyExistsError: If table already exists
    """
    session = boto3.Session(profile_name=profile, region_name=region)
    dynamodb = session.client("dynamodb")

    kwargs: dict[str, Any] = {
        "TableName": table_name,
        "KeySchema": [
            {"AttributeName": ATTR_PK, "KeyType": "HASH"},
            {"AttributeName": ATTR_SK, "KeyType": "RANGE"},
        ],
        "AttributeDefinitions": [
            {"AttributeName": ATTR_PK, "AttributeType": "S"},
            {"AttributeName": ATTR_SK, "AttributeType": "S"},
        ],
        "BillingMode": billing_mode,
        "Tags": [
            {"Key": "ManagedBy", "Value": "kv-primitives-tool"},
            {"Key": "Purpose", "Value": "kvstore"},
        ],
    }
    if billing_mode == "PROVISIONED":
        kwargs["ProvisionedThroughput"] = {"ReadCapacityUnits": 5, "WriteCapacityUnits": 5}

    try:
        response = dynamodb.create_table(**kwargs)
        dynamodb.get_waiter("table_exists").wait(TableName=table_name)

        # Expired items are also filtered client-side; this only reclaims storage
        dynamodb.update_time_to_live(
            TableName=table_name,
            TimeToLiveSpecification={"Enabled": True, "AttributeName": ATTR_TTL},
        )

        return response["TableDescription"]  # type: ignore[no-any-return]

    except ClientError as e:
        if e.response["Error"]["Code"] == "ResourceInUseException":
            raise TableAlreadyExistsError(f"Table '{table_name}' already exists")
        raise KVStoreError(f"DynamoDB error: {e}") from e


def drop_table(
    table_name: str, region: str | None = None, profile: str | None = None
) -> dict[str, Any]:
    """
    Drop DynamoDB table.

    Returns:
        Table description

    Raises:
        TableNotFoundError: If table does not exist
    """
    session = boto3.Session(profile_name=profile, region_name=region)
    dynamodb = session.client("dynamodb")

    try:
        response = dynamodb.delete_table(TableName=table_name)
        return response["TableDescription"]  # type: ignore[no-any-return]
    except ClientError as e:
        if e.response["Error"]["Code"] == "ResourceNotFoundException":
            raise TableNotFoundError(f"Table '{table_name}' not found")
        raise KVStoreError(f"DynamoDB error: {e}") from e
