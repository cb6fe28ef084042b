"""
Primitives against an in-memory DynamoDB, so condition expressions are evaluated.
"""

from unittest.mock import patch

import pytest
from moto import mock_aws

from kv_primitives_tool.kvstore.core.counter_operations import AtomicCounter
from kv_primitives_tool.kvstore.core.dynamodb_client import DynamoDBClient
from kv_primitives_tool.kvstore.core.lock_operations import DistributedLock
from kv_primitives_tool.kvstore.core.serial_operations import SerialNumberAllocator
from kv_primitives_tool.kvstore.core.table_operations import create_table
from kv_primitives_tool.kvstore.core.throttle_operations import ThrottleLimiter

TABLE = "kvstore"
REGION = "us-east-1"


@pytest.fixture
def aws(monkeypatch):
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", REGION)
    monkeypatch.delenv("AWS_PROFILE", raising=False)
    with mock_aws():
        create_table(TABLE, region=REGION)
        yield


@pytest.fixture
def new_client(aws):
    clients = []

    def factory() -> DynamoDBClient:
        client = DynamoDBClient(TABLE, region=REGION)
        clients.append(client)
        return client

    yield factory
    for client in clients:
        client.close()


@pytest.fixture
def client(new_client) -> DynamoDBClient:
    return new_client()


@pytest.fixture
def clock():
    """Wall clock seen by the DynamoDB client, settable through clock.time.return_value."""
    with patch("kv_primitives_tool.kvstore.core.dynamodb_client.time") as mocked:
        mocked.time.return_value = 1_000.0
        yield mocked


def test_lock_excludes_second_holder_until_release(new_client) -> None:
    first = DistributedLock(new_client())
    second = DistributedLock(new_client())

    handle = first.acquire("deploy", ttl=30)
    assert handle is not None
    assert second.acquire("deploy", ttl=30) is None
    assert second.holder("deploy") == handle.token

    assert handle.release() is True
    assert second.acquire("deploy", ttl=30) is not None


def test_lock_is_held_for_the_full_ttl(new_client, clock) -> None:
    first = DistributedLock(new_client())
    second = DistributedLock(new_client())

    clock.time.return_value = 100.99
    assert first.acquire("deploy", ttl=1) is not None

    clock.time.return_value = 101.01
    assert second.acquire("deploy", ttl=1) is None
    clock.time.return_value = 101.99
    assert second.acquire("deploy", ttl=1) is None

    clock.time.return_value = 102.0
    assert second.acquire("deploy", ttl=1) is not None


def test_release_after_expiry_does_not_free_new_holder(new_client, clock) -> None:
    first = DistributedLock(new_client())
    second = DistributedLock(new_client())

    stale = first.acquire("deploy", ttl=5)
    clock.time.return_value += 10
    fresh = second.acquire("deploy", ttl=5)
    assert fresh is not None

    assert stale.release() is False
    assert second.holder("deploy") == fresh.token
    assert fresh.release() is True
    assert second.holder("deploy") is None


def test_throttle_capacity_and_window(client, clock) -> None:
    throttle = ThrottleLimiter(client, "api", capacity=3, window_seconds=60)

    assert [throttle.incr() for _ in range(3)] == [False, False, False]
    assert throttle.incr() is True
    assert throttle.get() == 4

    clock.time.return_value = 1_059.5
    assert throttle.get() == 4

    clock.time.return_value = 1_060.0
    assert throttle.get() == 0
    assert throttle.record() == 1
    assert throttle.remaining() == 2

    clock.time.return_value = 1_119.0
    assert throttle.get() == 1
    clock.time.return_value = 1_120.0
    assert throttle.get() == 0


def test_counter_scenario(new_client) -> None:
    counter = AtomicCounter(new_client(), "cnt", 99)

    assert counter.incr() == 100
    assert counter.incr(20) == 120
    assert counter.decr(33) == 87

    other = AtomicCounter(new_client(), "cnt", initialize=False)
    assert other.get() == 87
    assert other.decr(100) == -13

    counter.reset()
    assert other.get() == 0


def test_serial_numbers(new_client) -> None:
    serial = SerialNumberAllocator(new_client(), "ids")

    assert serial.get_one("seq") == 1
    assert serial.get_one("seq") == 2
    assert SerialNumberAllocator(new_client(), "ids").get_many("seq", 5) == [3, 4, 5, 6, 7]
    assert serial.get_one("other") == 1

    assert serial.current("seq") == 7
    assert serial.current("unused") == 0
    assert serial.sequences() == {"seq": 7, "other": 1}
