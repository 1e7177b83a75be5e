"""
Statement execution against a caller-owned DB-API connection.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol


class StatementExecutor(Protocol):
    def __call__(self, sql: str, parameters: Mapping[str, Any], connection: Any) -> int:
        ...


def execute_non_query(sql: str, parameters: Mapping[str, Any], connection: Any) -> int:
    """
    Run one statement on `connection` and return the affected row count.

    The connection's current transaction is used as-is; nothing is committed.
    Driver errors propagate unchanged.
    """
    with connection.cursor() as cur:
        cur.execute(sql, parameters)
        return cur.rowcount


__all__ = ["StatementExecutor", "execute_non_query"]
