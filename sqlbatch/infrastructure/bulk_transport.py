"""
Bulk transport: high-throughput row loading for plain inserts.

`CopyBulkTransport` streams a row-set into PostgreSQL with `COPY ... FROM
STDIN`, one COPY per chunk of `batch_size` rows, inside the caller's
transaction.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol

from psycopg import sql

from sqlbatch.core.planner import plan_batches
from sqlbatch.core.rowset import RowSet
from sqlbatch.infrastructure.db_factory import statement_timeout
from sqlbatch.utils.logging import get_logger

log = get_logger(__name__)


class BulkTransport(Protocol):
    def write(
        self,
        row_set: RowSet,
        destination_table: str,
        column_mapping: Mapping[str, str],
        connection: Any,
        batch_size: int = 1000,
        timeout_seconds: int = 60,
    ) -> None:
        """
        Load `row_set` into `destination_table`.

        `column_mapping` maps row-set columns to destination columns; columns
        not in the mapping are not sent.
        """
        ...


def _table_identifier(table: str) -> sql.Identifier:
    return sql.Identifier(*table.split("."))


class CopyBulkTransport:
    """COPY-based loader for psycopg connections."""

    def write(
        self,
        row_set: RowSet,
        destination_table: str,
        column_mapping: Mapping[str, str],
        connection: Any,
        batch_size: int = 1000,
        timeout_seconds: int = 60,
    ) -> None:
        sources = list(column_mapping)
        copy_sql = sql.SQL("COPY {} ({}) FROM STDIN").format(
            _table_identifier(destination_table),
            sql.SQL(", ").join(sql.Identifier(column_mapping[source]) for source in sources),
        )
        with connection.cursor() as cur, statement_timeout(cur, timeout_seconds * 1000):
            for batch in plan_batches(len(row_set), batch_size):
                with cur.copy(copy_sql) as copy:
                    for row in row_set.project(sources, batch.offset, batch.stop):
                        copy.write_row(row)
                log.debug(
                    "COPY chunk written",
                    extra={"table": destination_table, "offset": batch.offset, "rows": batch.length},
                )


__all__ = ["BulkTransport", "CopyBulkTransport"]
