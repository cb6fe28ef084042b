import json
from unittest.mock import patch

import fakeredis
import pytest
from click.testing import CliRunner

from kv_primitives_tool.cli import main
from kv_primitives_tool.kvstore.constants import (
    EXIT_INVALID,
    EXIT_LOCK_BUSY,
    EXIT_THROTTLED,
    EXIT_UNAVAILABLE,
)
from kv_primitives_tool.kvstore.core.redis_client import RedisClient
from kv_primitives_tool.kvstore.exceptions import StoreUnavailableError


@pytest.fixture
def runner(server):
    def fake_connect(config):
        return RedisClient(
            fakeredis.FakeRedis(server=server, decode_responses=True),
            key_prefix=config.key_prefix,
        )

    with patch("kv_primitives_tool.kvstore.commands.options.connect", side_effect=fake_connect):
        yield CliRunner()


def _invoke(runner, *args):
    return runner.invoke(main, ["kvstore", *args])


def _json(result):
    return json.loads(result.output.strip().splitlines()[-1])


def test_lock_acquire_release_cycle(runner) -> None:
    acquired = _invoke(runner, "lock-acquire", "deploy", "--ttl", "60")
    assert acquired.exit_code == 0
    token = _json(acquired)["token"]

    busy = _invoke(runner, "lock-acquire", "deploy")
    assert busy.exit_code == EXIT_LOCK_BUSY

    checked = _invoke(runner, "lock-check", "deploy")
    assert _json(checked) == {"lock": "deploy", "locked": True, "token": token}

    released = _invoke(runner, "lock-release", "deploy", "--token", token)
    assert released.exit_code == 0
    assert _json(released) == {"lock": "deploy", "released": True}


def test_lock_release_with_wrong_token(runner) -> None:
    _invoke(runner, "lock-acquire", "deploy")

    result = _invoke(runner, "lock-release", "deploy", "--token", "nope")

    assert result.exit_code == 0
    assert _json(result)["released"] is False


def test_lock_release_requires_token_or_force(runner) -> None:
    result = _invoke(runner, "lock-release", "deploy")

    assert result.exit_code == EXIT_INVALID


def test_lock_force_release(runner) -> None:
    _invoke(runner, "lock-acquire", "deploy")

    result = _invoke(runner, "lock-release", "deploy", "--force")

    assert _json(result)["released"] is True
    assert _json(_invoke(runner, "lock-check", "deploy"))["locked"] is False


def test_lock_acquire_rejects_zero_ttl(runner) -> None:
    result = _invoke(runner, "lock-acquire", "deploy", "--ttl", "0")

    assert result.exit_code == EXIT_INVALID


def test_counter_commands(runner) -> None:
    assert _json(_invoke(runner, "set-counter", "cnt", "99"))["value"] == 99
    assert _json(_invoke(runner, "inc", "cnt"))["value"] == 100
    assert _json(_invoke(runner, "inc", "cnt", "--by", "20"))["value"] == 120
    assert _json(_invoke(runner, "dec", "cnt", "--by", "33"))["value"] == 87
    assert _json(_invoke(runner, "get-counter", "cnt")) == {"key": "cnt", "value": 87}


def test_counter_text_output(runner) -> None:
    result = _invoke(runner, "inc", "cnt", "--text")

    assert result.exit_code == 0
    assert "cnt = 1" in result.output


def test_key_prefix_option(runner, redis) -> None:
    _invoke(runner, "inc", "cnt", "--key-prefix", "svc:")

    assert redis.get("svc:cnt") == "1"


def test_throttle_exit_code(runner) -> None:
    first = _invoke(runner, "throttle", "api", "--capacity", "2")
    assert first.exit_code == 0
    assert _json(first) == {"key": "api", "count": 1, "capacity": 2, "over": False}

    assert _invoke(runner, "throttle", "api", "--capacity", "2").exit_code == 0
    assert _invoke(runner, "throttle", "api", "--capacity", "2").exit_code == EXIT_THROTTLED

    status = _invoke(runner, "throttle-get", "api", "--capacity", "2")
    assert _json(status) == {"key": "api", "count": 3, "remaining": 0}


def test_serial_commands(runner) -> None:
    assert _json(_invoke(runner, "serial-next", "ids", "seq"))["numbers"] == [1]
    assert _json(_invoke(runner, "serial-next", "ids", "seq"))["numbers"] == [2]

    many = _invoke(runner, "serial-next", "ids", "seq", "--count", "5")
    assert _json(many) == {"sequence": "seq", "numbers": [3, 4, 5, 6, 7]}

    _invoke(runner, "serial-next", "ids", "other")
    assert _json(_invoke(runner, "serial-get", "ids")) == {"seq": 7, "other": 1}
    assert _json(_invoke(runner, "serial-get", "ids", "seq")) == {"seq": 7}


def test_serial_rejects_zero_count(runner) -> None:
    result = _invoke(runner, "serial-next", "ids", "seq", "--count", "0")

    assert result.exit_code == EXIT_INVALID


def test_store_unavailable_exit_code() -> None:
    with patch(
        "kv_primitives_tool.kvstore.commands.options.connect",
        side_effect=StoreUnavailableError("Redis unavailable: refused"),
    ):
        result = CliRunner().invoke(main, ["kvstore", "get-counter", "cnt"])

    assert result.exit_code == EXIT_UNAVAILABLE


def test_drop_table_requires_approve() -> None:
    result = CliRunner().invoke(main, ["kvstore", "drop-table", "--table", "t"])

    assert result.exit_code == EXIT_INVALID
