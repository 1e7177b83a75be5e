"""
PostgreSQL dialect.

PostgreSQL has no `UPDATE t ... FROM t JOIN ...` self-join form; the target is
matched through UPDATE ... FROM / DELETE ... USING with a WHERE predicate.

Every table, column and alias name is written as a quoted identifier, the same
rule bulk insert follows for COPY and column introspection, so mixed-case
names resolve to the same relation on every path.

Parameters sent without a type (strings, None) would make a multi-row VALUES
column resolve to text, which then fails against non-text targets. The VALUES
list therefore opens with one row of typed NULLs, each a scalar subquery on
the target column, and every row-set column takes the target column's type:

    UPDATE "orders" SET "status" = x."status"
    FROM (VALUES ((SELECT "order_id" FROM "orders" WHERE false),
                  (SELECT "status" FROM "orders" WHERE false)),
                 (%(order_id_0)s, %(status_0)s), ...)
    AS x("order_id", "status") WHERE x."order_id" = "orders"."order_id"

The typing row has NULL keys and never matches a target row.
"""

from __future__ import annotations

from typing import Any, Sequence

from psycopg import sql

from sqlbatch.core.binder import ValuesColumn
from sqlbatch.core.statements import (
    SOURCE_ALIAS,
    SqlStatement,
    alias_list,
    append_values_rows,
    join_predicate,
)
from sqlbatch.dialects.abstract import AbstractDialect


def quote_identifier(name: str) -> str:
    """Render a bare or schema-qualified name as a quoted identifier."""
    return sql.Identifier(*name.split(".")).as_string()


def _typed_values_open(table: str, columns: Sequence[ValuesColumn]) -> str:
    target = quote_identifier(table)
    typed_nulls = ", ".join(
        f"(SELECT {quote_identifier(col.column)} FROM {target} WHERE false)" for col in columns
    )
    return f"(VALUES ({typed_nulls}), "


class PostgresDialect(AbstractDialect):
    """UPDATE ... FROM / DELETE ... USING a typed inline VALUES row-set."""

    name: str = "postgresql"
    description: str = "UPDATE FROM / DELETE USING a VALUES row-set typed by the target table."
    # The frontend/backend protocol carries the parameter count as a 16-bit integer.
    max_parameters: int = 65535

    def update_statement(
        self,
        table: str,
        keys: Sequence[ValuesColumn],
        updates: Sequence[ValuesColumn],
        records: Sequence[Any],
        offset: int,
    ) -> SqlStatement:
        columns = [*keys, *updates]
        statement = SqlStatement()
        statement.append(f"UPDATE {quote_identifier(table)} SET ")
        statement.join(
            ", ",
            (
                f"{quote_identifier(col.column)} = {SOURCE_ALIAS}.{quote_identifier(col.alias)}"
                for col in updates
            ),
        )
        statement.append(" FROM ")
        statement.append(_typed_values_open(table, columns))
        append_values_rows(statement, records, offset, columns)
        statement.append(f") AS {SOURCE_ALIAS}({alias_list(columns, quote_identifier)}) WHERE ")
        statement.append(join_predicate(table, keys, quote_identifier))
        return statement

    def delete_statement(
        self,
        table: str,
        keys: Sequence[ValuesColumn],
        records: Sequence[Any],
        offset: int,
    ) -> SqlStatement:
        statement = SqlStatement()
        statement.append(f"DELETE FROM {quote_identifier(table)} USING ")
        statement.append(_typed_values_open(table, keys))
        append_values_rows(statement, records, offset, keys)
        statement.append(f") AS {SOURCE_ALIAS}({alias_list(keys, quote_identifier)}) WHERE ")
        statement.append(join_predicate(table, keys, quote_identifier))
        return statement


__all__ = ["PostgresDialect", "quote_identifier"]
