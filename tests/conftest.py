import fakeredis
import pytest

from kv_primitives_tool.kvstore.core.redis_client import RedisClient


@pytest.fixture
def server() -> fakeredis.FakeServer:
    return fakeredis.FakeServer()


@pytest.fixture
def redis(server):
    return fakeredis.FakeRedis(server=server, decode_responses=True)


@pytest.fixture
def store(redis):
    client = RedisClient(redis)
    try:
        yield client
    finally:
        client.close()


@pytest.fixture
def new_store(server):
    """Factory for extra handles on the same server, one per simulated process."""
    clients = []

    def factory(key_prefix=None):
        client = RedisClient(
            fakeredis.FakeRedis(server=server, decode_responses=True), key_prefix=key_prefix
        )
        clients.append(client)
        return client

    yield factory
    for client in clients:
        client.close()
