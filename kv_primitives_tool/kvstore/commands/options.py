"""
Options and helpers shared by the kvstore commands.
"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, NoReturn

import click

from ..config import StoreConfig
from ..constants import DEFAULT_STORE_URL, EXIT_INVALID, EXIT_STORE_ERROR, EXIT_UNAVAILABLE
from ..core.client import StoreHandle, connect
from ..exceptions import InvalidArgumentError, KVStoreError, StoreUnavailableError
from ..utils import error_json, error_text


def store_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Add the store connection, output and verbosity options to a command."""
    options = [
        click.option(
            "--url",
            envvar="KVSTORE_URL",
            default=DEFAULT_STORE_URL,
            show_default=True,
            help="Store URL (redis://host:port/db or dynamodb://table)",
        ),
        click.option("--key-prefix", envvar="KVSTORE_KEY_PREFIX", help="Prefix for every key"),
        click.option("--region", envvar="AWS_REGION", help="AWS region (DynamoDB only)"),
        click.option("--profile", envvar="AWS_PROFILE", help="AWS profile (DynamoDB only)"),
        click.option("--text", is_flag=True, help="Output as human-readable text"),
        click.option(
            "--verbose",
            "-v",
            count=True,
            help="Increase verbosity (-v INFO, -vv DEBUG, -vvv TRACE)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def open_store(
    url: str, key_prefix: str | None, region: str | None, profile: str | None
) -> StoreHandle:
    """Connect to the store named by the command line options."""
    return connect(StoreConfig(url=url, key_prefix=key_prefix, region=region, profile=profile))


def fail(ctx: click.Context, error: str, solution: str, exit_code: int, text: bool) -> NoReturn:
    """Report an error on stderr in the selected format and exit."""
    if text:
        click.echo(error_text(error, solution), err=True)
    else:
        click.echo(error_json(error, solution, exit_code), err=True)
    ctx.exit(exit_code)


@contextmanager
def store_errors(ctx: click.Context, text: bool) -> Iterator[None]:
    """Map kvstore exceptions raised inside the block to CLI exit codes."""
    try:
        yield
    except InvalidArgumentError as e:
        fail(ctx, str(e), "Check the command arguments", EXIT_INVALID, text)
    except StoreUnavailableError as e:
        fail(ctx, str(e), "Check the store URL and that the store is running", EXIT_UNAVAILABLE, text)
    except KVStoreError as e:
        fail(ctx, str(e), "Check the store, table and credentials", EXIT_STORE_ERROR, text)
