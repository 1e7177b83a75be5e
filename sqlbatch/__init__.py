"""
sqlbatch - set-based batch writes for collections of typed records.

Given in-memory pydantic records, sqlbatch performs:

- Bulk insert through a high-throughput transport (PostgreSQL COPY)
- Batched key-matched UPDATE, one statement per batch joined to an inline
  VALUES row-set
- Batched key-matched DELETE in the same shape

Statements are fully parameterized, batch sizes respect the engine's
parameter limit, and column-to-field resolution is cached per record type.
The caller owns the connection and its transaction.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from sqlbatch.config import Settings, get_settings
from sqlbatch.core.planner import BatchRange, plan_batches
from sqlbatch.core.resolver import ColumnAccessor, ColumnRegistry, get_registry
from sqlbatch.core.statements import SqlStatement
from sqlbatch.dialects import (
    AbstractDialect,
    Dialect,
    PostgresDialect,
    SqlServerDialect,
    available_dialects,
    get_dialect,
)
from sqlbatch.domain.models import TableModel
from sqlbatch.errors import BatchError, ConfigurationError, DataValidationError
from sqlbatch.utils.logging import configure_logging, get_logger
from sqlbatch.writer import (
    BatchWriter,
    batch_delete,
    batch_update,
    bulk_insert,
    bulk_insert_many,
)

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Records
    "TableModel",
    # Writer
    "BatchWriter",
    "batch_delete",
    "batch_update",
    "bulk_insert",
    "bulk_insert_many",
    # Building blocks
    "BatchRange",
    "ColumnAccessor",
    "ColumnRegistry",
    "SqlStatement",
    "get_registry",
    "plan_batches",
    # Dialects
    "AbstractDialect",
    "Dialect",
    "PostgresDialect",
    "SqlServerDialect",
    "available_dialects",
    "get_dialect",
    # Errors
    "BatchError",
    "ConfigurationError",
    "DataValidationError",
    # Logging
    "configure_logging",
    "get_logger",
]
