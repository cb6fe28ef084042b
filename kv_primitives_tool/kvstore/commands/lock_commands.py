"""
Lock commands for kvstore.
"""

from contextlib import closing

import click

from ..constants import DEFAULT_LOCK_TTL, EXIT_INVALID, EXIT_LOCK_BUSY
from ..core.lock_operations import DistributedLock
from ..logging_config import get_logger, setup_logging
from ..models import LockHandle
from ..utils import output_json, output_text
from .options import fail, open_store, store_errors, store_options

logger = get_logger(__name__)


@click.command("lock-acquire")
@click.argument("lock_name")
@click.option(
    "--ttl", type=int, default=DEFAULT_LOCK_TTL, help="Lock TTL in seconds (default: 30)"
)
@store_options
@click.pass_context
def lock_acquire_command(
    ctx: click.Context,
    lock_name: str,
    ttl: int,
    url: str,
    key_prefix: str | None,
    region: str | None,
    profile: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Acquire a distributed lock.

    The lock key is written with set-if-absent and an expiry in a single
    command. Prints the token needed to release it.

    Examples:

    \b
        # Acquire lock with 5-minute TTL
        kv-primitives-tool kvstore lock-acquire deploy-prod --ttl 300

    \b
        # Use in shell script
        if TOKEN=$(kv-primitives-tool kvstore lock-acquire deploy | jq -r .token); then
            deploy.sh
            kv-primitives-tool kvstore lock-release deploy --token "$TOKEN"
        fi

    \b
    Output Format:
        Returns JSON:
        {"lock": "deploy-prod", "token": "9f1c...", "ttl": 300, "acquired_at": 1731696000}
    """
    setup_logging(verbose)

    with store_errors(ctx, text), closing(open_store(url, key_prefix, region, profile)) as store:
        logger.info(f"Acquiring lock '{lock_name}' with TTL {ttl}s")
        handle = DistributedLock(store).acquire(lock_name, ttl)

        if handle is None:
            fail(
                ctx,
                f"Lock '{lock_name}' is held by another owner",
                "Wait for the holder to release it or for the TTL to expire",
                EXIT_LOCK_BUSY,
                text,
            )

        if text:
            output_text(f"✅ Lock '{lock_name}' acquired")
            output_text(f"Token: {handle.token}")
            output_text(f"TTL: {ttl} seconds")
        else:
            output_json(handle.to_dict())


@click.command("lock-release")
@click.argument("lock_name")
@click.option("--token", help="Token printed by lock-acquire")
@click.option("--force", is_flag=True, help="Delete the lock whoever holds it")
@store_options
@click.pass_context
def lock_release_command(
    ctx: click.Context,
    lock_name: str,
    token: str | None,
    force: bool,
    url: str,
    key_prefix: str | None,
    region: str | None,
    profile: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Release a distributed lock.

    With --token the lock is deleted only while it still holds that token,
    so a holder whose lock already expired cannot release someone else's.
    --force deletes it unconditionally.

    Examples:

    \b
        kv-primitives-tool kvstore lock-release deploy-prod --token 9f1c...
        kv-primitives-tool kvstore lock-release deploy-prod --force

    \b
    Output Format:
        Returns JSON:
        {"lock": "deploy-prod", "released": true}
    """
    setup_logging(verbose)

    if not token and not force:
        fail(
            ctx,
            "Either --token or --force is required",
            "Pass the token printed by lock-acquire",
            EXIT_INVALID,
            text,
        )

    with store_errors(ctx, text), closing(open_store(url, key_prefix, region, profile)) as store:
        lock = DistributedLock(store)
        if force:
            released = lock.force_release(lock_name)
        else:
            released = lock.release(LockHandle(key=lock_name, token=token or ""))

        if text:
            if released:
                output_text(f"✅ Lock '{lock_name}' released")
            else:
                output_text(f"Lock '{lock_name}' was not held by this token")
        else:
            output_json({"lock": lock_name, "released": released})


@click.command("lock-check")
@click.argument("lock_name")
@store_options
@click.pass_context
def lock_check_command(
    ctx: click.Context,
    lock_name: str,
    url: str,
    key_prefix: str | None,
    region: str | None,
    profile: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Check whether a lock is held.

    \b
    Output Format:
        Returns JSON:
        {"lock": "deploy-prod", "locked": true, "token": "9f1c..."}
    """
    setup_logging(verbose)

    with store_errors(ctx, text), closing(open_store(url, key_prefix, region, profile)) as store:
        token = DistributedLock(store).holder(lock_name)

        if text:
            output_text(f"🔒 {lock_name} is locked" if token else f"🔓 {lock_name} is free")
        else:
            output_json({"lock": lock_name, "locked": token is not None, "token": token})
