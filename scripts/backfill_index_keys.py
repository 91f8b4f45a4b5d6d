#!/usr/bin/env python3
"""
Backfill monthKey and GSI1 keys on stored expenses.

Expenses written before the month index existed, or by code that derived the
month in local time, are repaired from their ``occurredAt``. Items that are
already correct are left alone, so the script can be re-run safely.

Run from the repository root:

    python -m scripts.backfill_index_keys --dry-run
"""

import click

from services.expenses import ExpenseStore
from services.parameter_store import DEFAULT_PREFIX, ParameterStoreConfig


@click.command()
@click.option("--table", help="Expenses table name (overrides configuration)")
@click.option("--index", help="Month index name (overrides configuration)")
@click.option(
    "--prefix",
    default=DEFAULT_PREFIX,
    help="Parameter Store prefix",
    show_default=True,
)
@click.option("--dry-run", is_flag=True, help="Report items to repair without writing")
def main(table: str, index: str, prefix: str, dry_run: bool):
    """Recompute the month bucket and index keys of every expense."""
    table_config = ParameterStoreConfig(prefix).load_table_config()
    overrides = {}
    if table:
        overrides["expenses_table"] = table
    if index:
        overrides["expenses_month_index"] = index
    table_config = table_config.model_copy(update=overrides)

    click.secho(f"Scanning {table_config.expenses_table}...", fg="blue")
    counts = ExpenseStore(table_config).backfill_index_fields(dry_run=dry_run)

    verb = "Would update" if dry_run else "Updated"
    click.secho(f"{verb}: {counts['updated']} items", fg="green")
    click.echo(f"Skipped: {counts['skipped']} items")


if __name__ == "__main__":
    main()
