"""
Live schema introspection.
"""

from __future__ import annotations

from typing import Any, Protocol, Set

_COLUMNS_QUERY = "SELECT column_name FROM information_schema.columns WHERE table_name = %s"


class SchemaIntrospector(Protocol):
    def __call__(self, table_name: str, connection: Any) -> Set[str]:
        ...


def fetch_table_columns(table_name: str, connection: Any) -> Set[str]:
    """
    Return the column names of `table_name` as the store reports them.

    A schema-qualified name (`schema.table`) restricts the lookup to that
    schema. An unknown table yields an empty set.
    """
    schema, _, name = table_name.rpartition(".")
    query = _COLUMNS_QUERY
    params: tuple = (name,)
    if schema:
        query += " AND table_schema = %s"
        params = (name, schema)
    with connection.cursor() as cur:
        cur.execute(query, params)
        return {row[0] for row in cur.fetchall()}


__all__ = ["SchemaIntrospector", "fetch_table_columns"]
