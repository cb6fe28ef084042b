"""
Counter commands for kvstore.
"""

from contextlib import closing

import click

from ..core.counter_operations import AtomicCounter
from ..logging_config import get_logger, setup_logging
from ..utils import output_json, output_text
from .options import open_store, store_errors, store_options

logger = get_logger(__name__)


@click.command("inc")
@click.argument("key")
@click.option("--by", type=int, default=1, help="Amount to increment (default: 1)")
@store_options
@click.pass_context
def inc_command(
    ctx: click.Context,
    key: str,
    by: int,
    url: str,
    key_prefix: str | None,
    region: str | None,
    profile: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Atomically increment a counter.

    A missing counter starts at 0.

    Examples:

    \b
        kv-primitives-tool kvstore inc api-requests
        kv-primitives-tool kvstore inc api-requests --by 10

    \b
    Output Format:
        Returns JSON:
        {"key": "api-requests", "value": 123}
    """
    setup_logging(verbose)

    with store_errors(ctx, text), closing(open_store(url, key_prefix, region, profile)) as store:
        logger.info(f"Incrementing counter '{key}' by {by}")
        value = AtomicCounter(store, key, initialize=False).incr(by)

        if text:
            output_text(f"✅ {key} = {value}")
        else:
            output_json({"key": key, "value": value})


@click.command("dec")
@click.argument("key")
@click.option("--by", type=int, default=1, help="Amount to decrement (default: 1)")
@store_options
@click.pass_context
def dec_command(
    ctx: click.Context,
    key: str,
    by: int,
    url: str,
    key_prefix: str | None,
    region: str | None,
    profile: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Atomically decrement a counter.

    \b
    Output Format:
        Returns JSON:
        {"key": "rate-limit-remaining", "value": 95}
    """
    setup_logging(verbose)

    with store_errors(ctx, text), closing(open_store(url, key_prefix, region, profile)) as store:
        logger.info(f"Decrementing counter '{key}' by {by}")
        value = AtomicCounter(store, key, initialize=False).decr(by)

        if text:
            output_text(f"✅ {key} = {value}")
        else:
            output_json({"key": key, "value": value})


@click.command("get-counter")
@click.argument("key")
@store_options
@click.pass_context
def get_counter_command(
    ctx: click.Context,
    key: str,
    url: str,
    key_prefix: str | None,
    region: str | None,
    profile: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Read counter value. A missing counter reads as 0."""
    setup_logging(verbose)

    with store_errors(ctx, text), closing(open_store(url, key_prefix, region, profile)) as store:
        value = AtomicCounter(store, key, initialize=False).get()

        if text:
            output_text(f"{key} = {value}")
        else:
            output_json({"key": key, "value": value})


@click.command("set-counter")
@click.argument("key")
@click.argument("value", type=int)
@store_options
@click.pass_context
def set_counter_command(
    ctx: click.Context,
    key: str,
    value: int,
    url: str,
    key_prefix: str | None,
    region: str | None,
    profile: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Overwrite a counter with VALUE."""
    setup_logging(verbose)

    with store_errors(ctx, text), closing(open_store(url, key_prefix, region, profile)) as store:
        logger.info(f"Setting counter '{key}' to {value}")
        AtomicCounter(store, key, value)

        if text:
            output_text(f"✅ {key} = {value}")
        else:
            output_json({"key": key, "value": value})
