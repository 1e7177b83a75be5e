"""
Infrastructure package for sqlbatch.

Holds the collaborators that touch the database: statement execution, COPY
bulk transport, schema introspection and connection helpers. Keep this layer
focused on I/O, decoupled from statement synthesis.
"""

from sqlbatch.infrastructure.bulk_transport import BulkTransport, CopyBulkTransport
from sqlbatch.infrastructure.db_factory import build_dsn, get_sync_connection, statement_timeout
from sqlbatch.infrastructure.executor import StatementExecutor, execute_non_query
from sqlbatch.infrastructure.schema import SchemaIntrospector, fetch_table_columns

__all__ = [
    "BulkTransport",
    "CopyBulkTransport",
    "SchemaIntrospector",
    "StatementExecutor",
    "build_dsn",
    "execute_non_query",
    "fetch_table_columns",
    "get_sync_connection",
    "statement_timeout",
]
