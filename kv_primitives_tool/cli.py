"""CLI entry point for kv-primitives-tool."""

import click

from kv_primitives_tool import __version__
from kv_primitives_tool.kvstore.commands.counter_commands import (
    dec_command,
    get_counter_command,
    inc_command,
    set_counter_command,
)
from kv_primitives_tool.kvstore.commands.lock_commands import (
    lock_acquire_command,
    lock_check_command,
    lock_release_command,
)
from kv_primitives_tool.kvstore.commands.serial_commands import (
    serial_get_command,
    serial_next_command,
)
from kv_primitives_tool.kvstore.commands.table_commands import (
    create_table_command,
    drop_table_command,
)
from kv_primitives_tool.kvstore.commands.throttle_commands import (
    throttle_command,
    throttle_get_command,
)


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """Coordination primitives on Redis or DynamoDB as composable CLI commands"""
    pass


@main.group("kvstore")
def kvstore() -> None:
    """Locks, counters, throttles and serial numbers backed by a key-value store"""
    pass


# Register table commands
kvstore.add_command(create_table_command)
kvstore.add_command(drop_table_command)

# Register lock commands
kvstore.add_command(lock_acquire_command)
kvstore.add_command(lock_release_command)
kvstore.add_command(lock_check_command)

# Register counter commands
kvstore.add_command(inc_command)
kvstore.add_command(dec_command)
kvstore.add_command(get_counter_command)
kvstore.add_command(set_counter_command)

# Register throttle commands
kvstore.add_command(throttle_command)
kvstore.add_command(throttle_get_command)

# Register serial commands
kvstore.add_command(serial_next_command)
kvstore.add_command(serial_get_command)

if __name__ == "__main__":
    main()
