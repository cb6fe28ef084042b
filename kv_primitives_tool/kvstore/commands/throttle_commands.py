"""
Throttle commands for kvstore.
"""

from contextlib import closing

import click

from ..constants import DEFAULT_THROTTLE_WINDOW, EXIT_THROTTLED
from ..core.throttle_operations import ThrottleLimiter
from ..logging_config import get_logger, setup_logging
from ..utils import output_json, output_text
from .options import fail, open_store, store_errors, store_options

logger = get_logger(__name__)


@click.command("throttle")
@click.argument("key")
@click.option("--capacity", type=int, required=True, help="Increments allowed per window")
@click.option(
    "--window",
    type=int,
    default=DEFAULT_THROTTLE_WINDOW,
    help="Window length in seconds (default: 60)",
)
@click.option("--by", type=int, default=1, help="Amount to record (default: 1)")
@store_options
@click.pass_context
def throttle_command(
    ctx: click.Context,
    key: str,
    capacity: int,
    window: int,
    by: int,
    url: str,
    key_prefix: str | None,
    region: str | None,
    profile: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Record usage against a fixed-window rate limit.

    The window opens with the first increment and closes WINDOW seconds
    later. Exits with code 5 when the count exceeds CAPACITY; the usage is
    recorded either way.

    Examples:

    \b
        # Allow 1000 calls per minute
        if kv-primitives-tool kvstore throttle api:alice --capacity 1000; then
            call_api.sh
        fi

    \b
    Output Format:
        Returns JSON:
        {"key": "api:alice", "count": 12, "capacity": 1000, "over": false}
    """
    setup_logging(verbose)

    with store_errors(ctx, text), closing(open_store(url, key_prefix, region, profile)) as store:
        limiter = ThrottleLimiter(store, key, capacity, window)
        count = limiter.record(by)
        over = count > capacity
        result = {"key": key, "count": count, "capacity": capacity, "over": over}

        if over:
            fail(
                ctx,
                f"Throttle '{key}' exceeded: {count}/{capacity}",
                f"Retry after the {window}s window closes",
                EXIT_THROTTLED,
                text,
            )

        if text:
            output_text(f"✅ {key}: {count}/{capacity}")
        else:
            output_json(result)


@click.command("throttle-get")
@click.argument("key")
@click.option("--capacity", type=int, required=True, help="Increments allowed per window")
@store_options
@click.pass_context
def throttle_get_command(
    ctx: click.Context,
    key: str,
    capacity: int,
    url: str,
    key_prefix: str | None,
    region: str | None,
    profile: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Show the count in the current window without recording usage.

    \b
    Output Format:
        Returns JSON:
        {"key": "api:alice", "count": 12, "remaining": 988}
    """
    setup_logging(verbose)

    with store_errors(ctx, text), closing(open_store(url, key_prefix, region, profile)) as store:
        limiter = ThrottleLimiter(store, key, capacity)
        count = limiter.get()
        remaining = max(capacity - count, 0)

        if text:
            output_text(f"{key}: {count}/{capacity} ({remaining} remaining)")
        else:
            output_json({"key": key, "count": count, "remaining": remaining})
