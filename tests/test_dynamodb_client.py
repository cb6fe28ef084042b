import time
from decimal import Decimal
from unittest.mock import patch

import pytest
from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError, EndpointConnectionError

from kv_primitives_tool.kvstore.core.dynamodb_client import DynamoDBClient
from kv_primitives_tool.kvstore.exceptions import (
    AWSPermissionError,
    StoreUnavailableError,
    TableNotFoundError,
)


def _client_error(code: str, operation: str = "PutItem") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


CONDITION_FAILED = "ConditionalCheckFailedException"
CLOCK = "kv_primitives_tool.kvstore.core.dynamodb_client.time"


@pytest.fixture
def client():
    with patch("kv_primitives_tool.kvstore.core.dynamodb_client.boto3.Session"):
        yield DynamoDBClient("kvstore", key_prefix="app:")


@pytest.fixture
def table(client):
    return client.table


def test_set_if_absent_writes_deadline(client, table) -> None:
    with patch(CLOCK) as clock:
        clock.time.return_value = 100.99
        assert client.set_if_absent("deploy", "tok", 30) is True

    kwargs = table.put_item.call_args.kwargs
    item = kwargs["Item"]
    assert item["PK"] == item["SK"] == "kv:app:deploy"
    assert item["value"] == "tok"
    assert item["ttl"] == 131
    assert "attribute_not_exists(PK)" in kwargs["ConditionExpression"]


def test_set_if_absent_busy(client, table) -> None:
    table.put_item.side_effect = _client_error(CONDITION_FAILED)

    assert client.set_if_absent("deploy", "tok", 30) is False


def test_set_stores_ints_as_numbers(client, table) -> None:
    client.set("cnt", 99)

    item = table.put_item.call_args.kwargs["Item"]
    assert item["value"] == Decimal(99)
    assert "ttl" not in item


def test_get_reads_numbers_and_strings(client, table) -> None:
    table.get_item.return_value = {"Item": {"value": Decimal(87)}}
    assert client.get("cnt") == "87"

    table.get_item.return_value = {"Item": {"value": "tok", "ttl": int(time.time()) + 60}}
    assert client.get("deploy") == "tok"


def test_get_treats_expired_item_as_absent(client, table) -> None:
    table.get_item.return_value = {"Item": {"value": "tok", "ttl": int(time.time()) - 5}}

    assert client.get("deploy") is None


def test_get_missing(client, table) -> None:
    table.get_item.return_value = {}

    assert client.get("deploy") is None


def test_delete_counts_only_live_items(client, table) -> None:
    table.delete_item.return_value = {"Attributes": {"value": "tok"}}
    assert client.delete("deploy") == 1

    table.delete_item.return_value = {"Attributes": {"value": "tok", "ttl": 1}}
    assert client.delete("deploy") == 0

    table.delete_item.return_value = {}
    assert client.delete("deploy") == 0


def test_compare_and_delete(client, table) -> None:
    assert client.compare_and_delete("deploy", "tok") is True
    kwargs = table.delete_item.call_args.kwargs
    assert kwargs["ExpressionAttributeValues"][":value"] == "tok"

    table.delete_item.side_effect = _client_error(CONDITION_FAILED, "DeleteItem")
    assert client.compare_and_delete("deploy", "tok") is False


def test_increment_live_item(client, table) -> None:
    table.update_item.return_value = {"Attributes": {"value": Decimal(7)}}

    assert client.increment_by("hits", 2) == 7
    kwargs = table.update_item.call_args.kwargs
    assert kwargs["ExpressionAttributeValues"][":amount"] == 2
    table.put_item.assert_not_called()


def test_decrement_adds_negative_amount(client, table) -> None:
    table.update_item.return_value = {"Attributes": {"value": Decimal(-3)}}

    assert client.decrement_by("hits", 3) == -3
    assert table.update_item.call_args.kwargs["ExpressionAttributeValues"][":amount"] == -3


def test_increment_replaces_expired_item(client, table) -> None:
    table.update_item.side_effect = _client_error(CONDITION_FAILED, "UpdateItem")

    assert client.increment_by("hits", 4) == 4

    kwargs = table.put_item.call_args.kwargs
    assert kwargs["Item"]["value"] == Decimal(4)
    assert "ttl" not in kwargs["Item"]
    assert kwargs["ConditionExpression"] == "#ttl <= :now"


def test_increment_retries_after_losing_replacement(client, table) -> None:
    table.update_item.side_effect = [
        _client_error(CONDITION_FAILED, "UpdateItem"),
        {"Attributes": {"value": Decimal(9)}},
    ]
    table.put_item.side_effect = _client_error(CONDITION_FAILED)

    assert client.increment_by("hits", 1) == 9
    assert table.update_item.call_count == 2


def test_expire(client, table) -> None:
    assert client.expire("hits", 60) is True

    table.update_item.side_effect = _client_error(CONDITION_FAILED, "UpdateItem")
    assert client.expire("hits", 60) is False


def test_expire_rounds_deadline_up(client, table) -> None:
    with patch(CLOCK) as clock:
        clock.time.return_value = 100.01
        client.expire("hits", 60)

    values = table.update_item.call_args.kwargs["ExpressionAttributeValues"]
    assert values[":deadline"] == 161
    assert values[":now"] == 100


def test_hash_increment_uses_field_as_sort_key(client, table) -> None:
    table.update_item.return_value = {"Attributes": {"value": Decimal(12)}}

    assert client.hash_increment_by("ids", "invoice", 5) == 12
    assert table.update_item.call_args.kwargs["Key"] == {"PK": "hash:app:ids", "SK": "invoice"}


def test_hash_get_all_follows_pages(client, table) -> None:
    table.query.side_effect = [
        {"Items": [{"SK": "a", "value": Decimal(1)}], "LastEvaluatedKey": {"PK": "x"}},
        {"Items": [{"SK": "b", "value": Decimal(2)}]},
    ]

    assert client.hash_get_all("ids") == {"a": "1", "b": "2"}
    first, second = table.query.call_args_list
    assert first.kwargs["KeyConditionExpression"] == Key("PK").eq("hash:app:ids")
    assert second.kwargs["ExclusiveStartKey"] == {"PK": "x"}


def test_endpoint_error_maps_to_store_unavailable(client, table) -> None:
    table.get_item.side_effect = EndpointConnectionError(endpoint_url="https://dynamodb")

    with pytest.raises(StoreUnavailableError):
        client.get("deploy")


@pytest.mark.parametrize(
    "code, error",
    [
        ("AccessDeniedException", AWSPermissionError),
        ("ResourceNotFoundException", TableNotFoundError),
    ],
)
def test_client_errors_are_converted(client, table, code, error) -> None:
    table.update_item.side_effect = _client_error(code, "UpdateItem")

    with pytest.raises(error):
        client.hash_increment_by("ids", "seq", 1)
