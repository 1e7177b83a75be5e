from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Type

import typer
from pydantic import Field, create_model

from sqlbatch.config import get_settings
from sqlbatch.core.planner import plan_batches
from sqlbatch.core.resolver import get_registry
from sqlbatch.dialects import available_dialects, get_dialect
from sqlbatch.domain.models import TableModel, record_type_of
from sqlbatch.errors import BatchError
from sqlbatch.infrastructure.db_factory import get_sync_connection
from sqlbatch.reporter import print_plan, print_profile
from sqlbatch.utils.logging import configure_logging
from sqlbatch.utils.profiler import profile_block
from sqlbatch.writer import BatchWriter

app = typer.Typer(help="sqlbatch CLI: set-based batch writes from JSON-lines files.")

OPERATIONS = ("insert", "update", "delete")


def record_model(table: str, columns: List[str]) -> Type[TableModel]:
    """
    Build a record type for `table` with one nullable field per column.

    Field names are positional (`field_0`, ...) so any column name can be used
    as the alias.
    """
    fields: Dict[str, Any] = {
        f"field_{index}": (Any, Field(None, alias=column)) for index, column in enumerate(columns)
    }
    model = create_model("JsonRecord", __base__=TableModel, **fields)
    model.__tablename__ = table
    return model


def load_records(path: Path, table: str) -> List[TableModel]:
    """Read a JSON-lines file into records of a model built from its keys."""
    rows: List[Dict[str, Any]] = []
    with path.open("r", encoding="utf-8") as fh:
        for line_no, line in enumerate(fh, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                row = json.loads(line)
            except json.JSONDecodeError as exc:
                raise typer.BadParameter(f"{path}:{line_no}: {exc.msg}", param_hint="FILE") from exc
            if not isinstance(row, dict):
                raise typer.BadParameter(f"{path}:{line_no}: expected a JSON object", param_hint="FILE")
            rows.append(row)

    # first-seen key order
    columns: Dict[str, None] = {}
    for row in rows:
        for key in row:
            columns.setdefault(key, None)

    model = record_model(table, list(columns))
    return [model.model_validate(row) for row in rows]


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"dialect={settings.dialect} batch={settings.batch_size} "
        f"bulk_batch={settings.bulk_batch_size} bulk_timeout={settings.bulk_timeout_seconds}s"
    )


@app.command()
def dialects() -> None:
    """
    List registered statement dialects.
    """
    for name in available_dialects():
        dialect = get_dialect(name)
        typer.echo(f"{name}: {dialect.description} (max parameters {dialect.max_parameters})")


def _dry_run(
    writer: BatchWriter,
    operation: str,
    records: List[TableModel],
    keys: List[str],
    updates: List[str],
) -> None:
    if operation == "insert":
        record_type = record_type_of(records)
        columns = ", ".join(accessor.column for accessor in get_registry().descriptors(record_type))
        copy_sql = f"COPY {record_type.__tablename__} ({columns}) FROM STDIN"
        plan = [
            {"offset": batch.offset, "rows": batch.length, "parameters": 0, "sql": copy_sql}
            for batch in plan_batches(len(records), writer.bulk_batch_size)
        ]
    else:
        plan = [
            {
                "offset": batch.offset,
                "rows": batch.length,
                "parameters": statement.parameter_count,
                "sql": statement.text,
            }
            for batch, statement in writer.iter_batches(operation, records, keys, updates or None)
        ]
    print_plan(plan, title=f"Dry run: {operation} ({writer.dialect.name})")


@app.command()
def apply(
    operation: str = typer.Argument(..., help="Operation to run: insert, update or delete."),
    file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="JSON-lines file, one record per line."
    ),
    table: str = typer.Option(..., "--table", "-t", help="Destination table (optionally schema-qualified)."),
    key: Optional[List[str]] = typer.Option(None, "--key", "-k", help="Key column; repeat for composite keys."),
    set_columns: Optional[List[str]] = typer.Option(
        None, "--set", "-c", help="Column to update; repeat for several (update only)."
    ),
    dsn: Optional[str] = typer.Option(None, "--dsn", help="Connection string (default built from settings)."),
    dialect: Optional[str] = typer.Option(
        None, "--dialect", "-d", help="Statement dialect (default from settings)."
    ),
    batch_size: Optional[int] = typer.Option(
        None, "--batch-size", "-b", min=1, help="Override rows per statement or per COPY chunk."
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Render the batch plan without connecting."),
) -> None:
    """
    Apply a JSON-lines file to a table in one transaction.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level)

    operation = operation.lower()
    if operation not in OPERATIONS:
        raise typer.BadParameter(
            f"'{operation}' is not one of {', '.join(OPERATIONS)}.", param_hint="OPERATION"
        )
    keys = key or []
    updates = set_columns or []

    records = load_records(file, table)
    try:
        if dry_run:
            writer = BatchWriter(None, dialect=dialect, batch_size=batch_size, bulk_batch_size=batch_size)
            _dry_run(writer, operation, records, keys, updates)
            return

        typer.echo(f"Running {operation} of {len(records)} record(s) into '{table}'.")
        # the connection block commits on success and rolls back on error
        with get_sync_connection(dsn) as conn, profile_block(f"{operation}:{table}") as stats:
            writer = BatchWriter(conn, dialect=dialect, batch_size=batch_size, bulk_batch_size=batch_size)
            if operation == "insert":
                writer.insert(records)
            elif operation == "update":
                writer.update(records, keys, updates)
            else:
                writer.delete(records, keys)
        print_profile(stats, len(records))
    except BatchError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=2)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
