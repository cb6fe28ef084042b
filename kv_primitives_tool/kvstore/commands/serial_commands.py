"""
Serial number commands for kvstore.
"""

from contextlib import closing

import click

from ..core.serial_operations import SerialNumberAllocator
from ..logging_config import get_logger, setup_logging
from ..utils import output_json, output_text
from .options import open_store, store_errors, store_options

logger = get_logger(__name__)


@click.command("serial-next")
@click.argument("hash_key")
@click.argument("sequence")
@click.option("--count", type=int, default=1, help="How many numbers to allocate (default: 1)")
@store_options
@click.pass_context
def serial_next_command(
    ctx: click.Context,
    hash_key: str,
    sequence: str,
    count: int,
    url: str,
    key_prefix: str | None,
    region: str | None,
    profile: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Allocate the next number(s) of a sequence.

    Numbers start at 1 and never repeat, even across concurrent callers.

    Examples:

    \b
        kv-primitives-tool kvstore serial-next ids invoice
        kv-primitives-tool kvstore serial-next ids invoice --count 5

    \b
    Output Format:
        Returns JSON:
        {"sequence": "invoice", "numbers": [3, 4, 5, 6, 7]}
    """
    setup_logging(verbose)

    with store_errors(ctx, text), closing(open_store(url, key_prefix, region, profile)) as store:
        logger.info(f"Allocating {count} from '{hash_key}.{sequence}'")
        numbers = SerialNumberAllocator(store, hash_key).get_many(sequence, count)

        if text:
            output_text(" ".join(str(n) for n in numbers))
        else:
            output_json({"sequence": sequence, "numbers": numbers})


@click.command("serial-get")
@click.argument("hash_key")
@click.argument("sequence", required=False)
@store_options
@click.pass_context
def serial_get_command(
    ctx: click.Context,
    hash_key: str,
    sequence: str | None,
    url: str,
    key_prefix: str | None,
    region: str | None,
    profile: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Show the last number issued for one sequence, or for all of them.

    \b
    Output Format:
        Returns JSON:
        {"invoice": 7, "order": 42}
    """
    setup_logging(verbose)

    with store_errors(ctx, text), closing(open_store(url, key_prefix, region, profile)) as store:
        allocator = SerialNumberAllocator(store, hash_key)
        if sequence:
            result = {sequence: allocator.current(sequence)}
        else:
            result = allocator.sequences()

        if text:
            for name, value in sorted(result.items()):
                output_text(f"{name} = {value}")
        else:
            output_json(result)
