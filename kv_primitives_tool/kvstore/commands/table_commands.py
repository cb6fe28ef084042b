"""
Table management commands for the DynamoDB backend.
"""

from typing import Literal

import click

from ..constants import DEFAULT_TABLE_NAME, EXIT_INVALID
from ..core.table_operations import create_table, drop_table
from ..exceptions import TableAlreadyExistsError, TableNotFoundError
from ..logging_config import get_logger, setup_logging
from ..utils import output_json, output_text
from .options import fail, store_errors

logger = get_logger(__name__)


@click.command("create-table")
@click.option(
    "--table",
    envvar="KVSTORE_TABLE",
    default=DEFAULT_TABLE_NAME,
    help="DynamoDB table name",
)
@click.option("--region", envvar="AWS_REGION", help="AWS region")
@click.option("--profile", envvar="AWS_PROFILE", help="AWS profile")
@click.option(
    "--billing",
    type=click.Choice(["on-demand", "provisioned"]),
    default="on-demand",
    help="Billing mode (default: on-demand)",
)
@click.option("--text", is_flag=True, help="Output as human-readable text")
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (-v INFO, -vv DEBUG, -vvv TRACE)",
)
@click.pass_context
def create_table_command(
    ctx: click.Context,
    table: str,
    region: str | None,
    profile: str | None,
    billing: str,
    text: bool,
    verbose: int,
) -> None:
    """Create the DynamoDB table used by dynamodb:// store URLs.

    Examples:

    \b
        kv-primitives-tool kvstore create-table --table my-kvstore
        export KVSTORE_URL=dynamodb://my-kvstore

    \b
    Output Format:
        Returns JSON:
        {"table": "...", "status": "CREATING", "arn": "..."}
    """
    setup_logging(verbose)

    with store_errors(ctx, text):
        logger.info(f"Creating table '{table}'")
        billing_mode: Literal["PAY_PER_REQUEST", "PROVISIONED"] = (
            "PAY_PER_REQUEST" if billing == "on-demand" else "PROVISIONED"
        )
        try:
            table_desc = create_table(table, region, profile, billing_mode)
        except TableAlreadyExistsError as e:
            fail(
                ctx,
                str(e),
                "Use a different table name or drop the existing table",
                EXIT_INVALID,
                text,
            )

    if text:
        output_text(f"✅ Table '{table}' created")
        output_text(f"ARN: {table_desc['TableArn']}")
    else:
        output_json(
            {
                "table": table,
                "status": table_desc["TableStatus"],
                "arn": table_desc["TableArn"],
            }
        )


@click.command("drop-table")
@click.option(
    "--table",
    envvar="KVSTORE_TABLE",
    default=DEFAULT_TABLE_NAME,
    help="DynamoDB table name",
)
@click.option("--region", envvar="AWS_REGION", help="AWS region")
@click.option("--profile", envvar="AWS_PROFILE", help="AWS profile")
@click.option("--approve", is_flag=True, help="Required flag to confirm table deletion")
@click.option("--text", is_flag=True, help="Output as human-readable text")
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (-v INFO, -vv DEBUG, -vvv TRACE)",
)
@click.pass_context
def drop_table_command(
    ctx: click.Context,
    table: str,
    region: str | None,
    profile: str | None,
    approve: bool,
    text: bool,
    verbose: int,
) -> None:
    """Drop the DynamoDB table. All locks, counters and sequences are lost."""
    setup_logging(verbose)

    if not approve:
        fail(
            ctx,
            "Refusing to drop table without --approve",
            "Re-run with --approve",
            EXIT_INVALID,
            text,
        )

    with store_errors(ctx, text):
        logger.info(f"Dropping table '{table}'")
        try:
            drop_table(table, region, profile)
        except TableNotFoundError as e:
            fail(ctx, str(e), "Check the table name and region", EXIT_INVALID, text)

    if text:
        output_text(f"✅ Table '{table}' dropped")
    else:
        output_json({"table": table, "dropped": True})
