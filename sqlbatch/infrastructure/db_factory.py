"""
Database connection helpers for sqlbatch.

The batch writer never opens connections itself: callers hand it an open,
transacted connection. These helpers serve the CLI and integration tests,
which do need to open one, and the bulk transport, which scopes a statement
timeout to its COPY round trips.

Connection acquisition retries transient failures using tenacity. Statements
are never retried.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Generator, Optional

import psycopg
from psycopg import Connection
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from sqlbatch.config import get_settings


def build_dsn() -> str:
    """Compose a DSN string from settings."""
    settings = get_settings()
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
    reraise=True,
)
def get_sync_connection(dsn: Optional[str] = None) -> Connection:
    """
    Open a dedicated synchronous connection with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection
    errors. The connection starts outside autocommit, so everything run on it
    belongs to one transaction until the caller commits or rolls back.

    Parameters
    ----------
    dsn : str, optional
        Connection string; defaults to one built from settings.

    Raises
    ------
    psycopg.OperationalError
        If connection fails after all retry attempts.
    """
    return psycopg.connect(dsn or build_dsn())


@contextmanager
def statement_timeout(cursor: Any, timeout_ms: int) -> Generator[None, None, None]:
    """
    Apply a transaction-local statement timeout for the enclosed block.

    The previous value is restored on exit so later statements in the
    caller's transaction are unaffected. A timeout of 0 leaves the setting
    untouched.

    Example
    -------
        with conn.cursor() as cur, statement_timeout(cur, 60_000):
            cur.execute(...)
    """
    if timeout_ms <= 0:
        yield
        return
    cursor.execute("SELECT current_setting('statement_timeout')")
    (previous,) = cursor.fetchone()
    cursor.execute("SELECT set_config('statement_timeout', %s, true)", (f"{int(timeout_ms)}ms",))
    yield
    # Not reached on error: the transaction is aborted and its rollback discards the local value.
    cursor.execute("SELECT set_config('statement_timeout', %s, true)", (previous,))


__all__ = ["build_dsn", "get_sync_connection", "statement_timeout"]
