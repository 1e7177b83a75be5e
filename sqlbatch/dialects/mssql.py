"""
SQL Server dialect.

Renders the T-SQL join forms, where the target table appears again in the
FROM clause and is joined to the inline VALUES row-set:

    UPDATE orders SET status = x.status
    FROM orders INNER JOIN (VALUES (%(order_id_0)s, %(status_0)s), ...)
    AS x(order_id, status) ON x.order_id = orders.order_id

Placeholders are `pyformat`, as accepted by pymssql.
"""

from __future__ import annotations

from typing import Any, Sequence

from sqlbatch.core.binder import ValuesColumn
from sqlbatch.core.statements import (
    SOURCE_ALIAS,
    SqlStatement,
    alias_list,
    append_values_rows,
    join_predicate,
)
from sqlbatch.dialects.abstract import AbstractDialect


class SqlServerDialect(AbstractDialect):
    """UPDATE/DELETE ... FROM target INNER JOIN (VALUES ...) for SQL Server."""

    name: str = "mssql"
    description: str = "T-SQL UPDATE/DELETE joined to an inline VALUES row-set."
    # SQL Server rejects RPC requests with more than 2100 parameters.
    max_parameters: int = 2100

    def update_statement(
        self,
        table: str,
        keys: Sequence[ValuesColumn],
        updates: Sequence[ValuesColumn],
        records: Sequence[Any],
        offset: int,
    ) -> SqlStatement:
        statement = SqlStatement()
        statement.append(f"UPDATE {table} SET ")
        statement.join(", ", (f"{col.column} = {SOURCE_ALIAS}.{col.alias}" for col in updates))
        statement.append(f" FROM {table} INNER JOIN (VALUES ")
        append_values_rows(statement, records, offset, [*keys, *updates])
        statement.append(f") AS {SOURCE_ALIAS}({alias_list([*keys, *updates])}) ON ")
        statement.append(join_predicate(table, keys))
        return statement

    def delete_statement(
        self,
        table: str,
        keys: Sequence[ValuesColumn],
        records: Sequence[Any],
        offset: int,
    ) -> SqlStatement:
        statement = SqlStatement()
        statement.append(f"DELETE {table} FROM {table} INNER JOIN (VALUES ")
        append_values_rows(statement, records, offset, keys)
        statement.append(f") AS {SOURCE_ALIAS}({alias_list(keys)}) ON ")
        statement.append(join_predicate(table, keys))
        return statement


__all__ = ["SqlServerDialect"]
