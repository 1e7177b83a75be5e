"""
Batch writer: bulk insert, key-matched update and key-matched delete of record
collections against a caller-owned connection.

Usage:
    import psycopg
    from sqlbatch import BatchWriter

    with psycopg.connect(dsn) as conn:
        writer = BatchWriter(conn)
        writer.insert(new_orders)
        writer.update(orders, key_columns=["order_id"], update_columns=["status"])
        writer.delete(cancelled, key_columns=["order_id"])
    # the connection block commits on success and rolls back on error

Every call validates its inputs completely (records, table name, column
mappings, batch size) before the first statement is sent. Batches then run one
after another in the caller's transaction; a failing batch leaves the earlier
ones applied, and rolling back is up to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, List, Mapping, Optional, Sequence, Tuple, Type, Union

from pydantic import BaseModel

from sqlbatch.config import get_settings
from sqlbatch.core.binder import ValuesColumn
from sqlbatch.core.planner import BatchRange, effective_batch_size, plan_batches
from sqlbatch.core.resolver import ColumnRegistry, get_registry
from sqlbatch.core.rowset import RowSet, materialize_rows
from sqlbatch.core.statements import SqlStatement, derived_columns, validate_identifier
from sqlbatch.dialects import Dialect, get_dialect
from sqlbatch.domain.models import record_type_of, table_name_of
from sqlbatch.errors import ConfigurationError, DataValidationError
from sqlbatch.infrastructure.bulk_transport import BulkTransport, CopyBulkTransport
from sqlbatch.infrastructure.executor import StatementExecutor, execute_non_query
from sqlbatch.infrastructure.schema import SchemaIntrospector, fetch_table_columns
from sqlbatch.utils.logging import get_logger

log = get_logger(__name__)

UPDATE = "update"
DELETE = "delete"


@dataclass(frozen=True)
class _MutationPlan:
    operation: str
    table: str
    records: Sequence[Any]
    keys: List[ValuesColumn]
    updates: List[ValuesColumn]
    batch_size: int


@dataclass(frozen=True)
class _LoadPlan:
    table: str
    row_set: RowSet


def _column_set(columns: Optional[Union[str, Sequence[str]]], kind: str) -> List[str]:
    if isinstance(columns, str):
        columns = [columns]
    if not columns:
        raise ConfigurationError(f"The {kind} columns cannot be null or empty.")
    names = [validate_identifier(column) for column in columns]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ConfigurationError(f"Duplicate {kind} columns: {', '.join(duplicates)}")
    return names


class BatchWriter:
    """
    Set-based writes for collections of pydantic records.

    Parameters
    ----------
    connection : Any
        Open DB-API connection. Its transaction is used as-is and never
        committed, rolled back or closed here.
    dialect : str | Dialect, optional
        Statement dialect or its registered name. Defaults to settings.
    batch_size : int, optional
        Records per UPDATE/DELETE statement. Defaults to settings (300).
    bulk_batch_size : int, optional
        Rows per bulk-load round trip. Defaults to settings (1000).
    bulk_timeout_seconds : int, optional
        Timeout hint passed to the bulk transport. Defaults to settings (60).
    executor, transport, introspector : optional
        Collaborators that touch the database; default to the psycopg ones.
    registry : ColumnRegistry, optional
        Column registry; defaults to the process-wide one.
    """

    def __init__(
        self,
        connection: Any,
        dialect: Union[str, Dialect, None] = None,
        batch_size: Optional[int] = None,
        bulk_batch_size: Optional[int] = None,
        bulk_timeout_seconds: Optional[int] = None,
        executor: Optional[StatementExecutor] = None,
        transport: Optional[BulkTransport] = None,
        introspector: Optional[SchemaIntrospector] = None,
        registry: Optional[ColumnRegistry] = None,
    ) -> None:
        settings = get_settings()
        self.connection = connection
        if dialect is None or isinstance(dialect, str):
            self.dialect: Dialect = get_dialect(dialect or settings.dialect)
        else:
            self.dialect = dialect
        self.batch_size = settings.batch_size if batch_size is None else batch_size
        self.bulk_batch_size = settings.bulk_batch_size if bulk_batch_size is None else bulk_batch_size
        self.bulk_timeout_seconds = (
            settings.bulk_timeout_seconds if bulk_timeout_seconds is None else bulk_timeout_seconds
        )
        if self.batch_size < 1 or self.bulk_batch_size < 1:
            raise ConfigurationError("Batch sizes must be at least 1.")
        self._execute = executor or execute_non_query
        self._transport = transport or CopyBulkTransport()
        self._introspect = introspector or fetch_table_columns
        self._registry = registry or get_registry()

    # ------------------------------------------------------------------ insert

    def insert(
        self,
        items: Sequence[Any],
        model: Optional[Type[BaseModel]] = None,
        table: Optional[str] = None,
    ) -> None:
        """
        Bulk-load `items` through the bulk transport.

        Columns the destination table does not have are left out of the load.

        Parameters
        ----------
        items : sequence of records
            Records of one type.
        model : type[BaseModel], optional
            Declared record type; defaults to the type of the first item.
        table : str, optional
            Destination table; defaults to the record type's `__tablename__`.

        Raises
        ------
        DataValidationError
            Empty collection, mixed record types, or None in a non-nullable field.
        ConfigurationError
            No table name, or no column shared with the destination table.
        """
        self._load(self._prepare_load(items, model, table))

    def insert_many(self, data: Mapping[str, Sequence[Any]]) -> None:
        """
        Bulk-load several collections, each into the table named by its key.

        All collections are validated before the first one is loaded.
        """
        if not data:
            raise DataValidationError("No collections to load.")
        plans = [self._prepare_load(items, None, table) for table, items in data.items()]
        for plan in plans:
            self._load(plan)

    # ------------------------------------------------------ update / delete

    def update(
        self,
        items: Sequence[Any],
        key_columns: Sequence[str],
        update_columns: Sequence[str],
    ) -> None:
        """
        Update the rows matching each record's key columns with its update columns.

        Raises
        ------
        DataValidationError
            Empty collection or mixed record types.
        ConfigurationError
            Empty column sets, no table name, or a column with no mapped field.
        """
        self._run(self._prepare_mutation(UPDATE, items, key_columns, update_columns))

    def delete(self, items: Sequence[Any], key_columns: Sequence[str]) -> None:
        """
        Delete the rows matching each record's key columns.

        Raises
        ------
        DataValidationError
            Empty collection or mixed record types.
        ConfigurationError
            Empty key columns, no table name, or a key column with no mapped field.
        """
        self._run(self._prepare_mutation(DELETE, items, key_columns))

    def build_update_statements(
        self,
        items: Sequence[Any],
        key_columns: Sequence[str],
        update_columns: Sequence[str],
    ) -> Iterator[SqlStatement]:
        """Render the UPDATE statements `update` would run, without running them."""
        plan = self._prepare_mutation(UPDATE, items, key_columns, update_columns)
        return (statement for _, statement in self._statements(plan))

    def build_delete_statements(
        self, items: Sequence[Any], key_columns: Sequence[str]
    ) -> Iterator[SqlStatement]:
        """Render the DELETE statements `delete` would run, without running them."""
        plan = self._prepare_mutation(DELETE, items, key_columns)
        return (statement for _, statement in self._statements(plan))

    def iter_batches(
        self,
        operation: str,
        items: Sequence[Any],
        key_columns: Sequence[str],
        update_columns: Optional[Sequence[str]] = None,
    ) -> Iterator[Tuple[BatchRange, SqlStatement]]:
        """
        Pair each statement an update or delete would run with the batch it covers.

        Inputs are validated before this returns; statements are rendered lazily.
        """
        if operation not in (UPDATE, DELETE):
            raise ConfigurationError(f"Unknown operation '{operation}'. Expected '{UPDATE}' or '{DELETE}'.")
        return self._statements(self._prepare_mutation(operation, items, key_columns, update_columns))

    # ---------------------------------------------------------------- internals

    def _prepare_mutation(
        self,
        operation: str,
        items: Sequence[Any],
        key_columns: Sequence[str],
        update_columns: Optional[Sequence[str]] = None,
    ) -> _MutationPlan:
        records = list(items or ())
        record_type = record_type_of(records)
        keys = _column_set(key_columns, "key")
        updates = _column_set(update_columns, "update") if operation == UPDATE else []
        table = validate_identifier(table_name_of(record_type), kind="table")

        key_accessors = self._registry.require(record_type, keys)
        update_accessors = self._registry.require(record_type, updates)
        key_values, update_values = derived_columns(key_accessors, update_accessors)
        batch_size = effective_batch_size(
            self.batch_size, len(key_values) + len(update_values), self.dialect.max_parameters
        )
        return _MutationPlan(
            operation=operation,
            table=table,
            records=records,
            keys=key_values,
            updates=update_values,
            batch_size=batch_size,
        )

    def _statements(self, plan: _MutationPlan) -> Iterator[Tuple[BatchRange, SqlStatement]]:
        for batch in plan_batches(len(plan.records), plan.batch_size):
            records = plan.records[batch.offset : batch.stop]
            if plan.operation == UPDATE:
                statement = self.dialect.update_statement(
                    plan.table, plan.keys, plan.updates, records, batch.offset
                )
            else:
                statement = self.dialect.delete_statement(plan.table, plan.keys, records, batch.offset)
            yield batch, statement

    def _run(self, plan: _MutationPlan) -> None:
        label = plan.operation.upper()
        log.info(
            f"[{label} START] {plan.table}",
            extra={
                "table": plan.table,
                "rows": len(plan.records),
                "batch_size": plan.batch_size,
                "dialect": self.dialect.name,
            },
        )
        batches = 0
        for batch, statement in self._statements(plan):
            affected = self._execute(statement.text, statement.parameters, self.connection)
            batches += 1
            log.debug(
                f"[{label} BATCH {batches}] {plan.table}",
                extra={
                    "table": plan.table,
                    "offset": batch.offset,
                    "rows": batch.length,
                    "parameters": statement.parameter_count,
                    "affected": affected,
                },
            )
        log.info(
            f"[{label} COMPLETE] {plan.table}",
            extra={"table": plan.table, "rows": len(plan.records), "batches": batches},
        )

    def _prepare_load(
        self,
        items: Sequence[Any],
        model: Optional[Type[BaseModel]],
        table: Optional[str],
    ) -> _LoadPlan:
        records = list(items or ())
        record_type = record_type_of(records, model)
        target = validate_identifier(table or table_name_of(record_type), kind="table")
        row_set = materialize_rows(records, self._registry.descriptors(record_type))
        return _LoadPlan(table=target, row_set=row_set)

    def _load(self, plan: _LoadPlan) -> None:
        live_columns = self._introspect(plan.table, self.connection)
        mapping = {column: column for column in plan.row_set.columns if column in live_columns}
        skipped = [column for column in plan.row_set.columns if column not in live_columns]
        if not mapping:
            raise ConfigurationError(
                f"Table {plan.table} has none of the columns {', '.join(plan.row_set.columns)}."
            )
        if skipped:
            log.debug(
                "Columns missing from the destination are not loaded",
                extra={"table": plan.table, "skipped_columns": skipped},
            )
        log.info(
            f"[INSERT START] {plan.table}",
            extra={"table": plan.table, "rows": len(plan.row_set), "columns": len(mapping)},
        )
        self._transport.write(
            plan.row_set,
            plan.table,
            mapping,
            self.connection,
            batch_size=self.bulk_batch_size,
            timeout_seconds=self.bulk_timeout_seconds,
        )
        log.info(f"[INSERT COMPLETE] {plan.table}", extra={"table": plan.table, "rows": len(plan.row_set)})


def bulk_insert(
    connection: Any,
    items: Sequence[Any],
    model: Optional[Type[BaseModel]] = None,
    **options: Any,
) -> None:
    """Bulk-load `items`; `options` are passed to `BatchWriter`."""
    BatchWriter(connection, **options).insert(items, model=model)


def bulk_insert_many(connection: Any, data: Mapping[str, Sequence[Any]], **options: Any) -> None:
    """Bulk-load several collections keyed by destination table."""
    BatchWriter(connection, **options).insert_many(data)


def batch_update(
    connection: Any,
    items: Sequence[Any],
    key_columns: Sequence[str],
    update_columns: Sequence[str],
    **options: Any,
) -> None:
    """Key-matched batched UPDATE; `options` are passed to `BatchWriter`."""
    BatchWriter(connection, **options).update(items, key_columns, update_columns)


def batch_delete(connection: Any, items: Sequence[Any], key_columns: Sequence[str], **options: Any) -> None:
    """Key-matched batched DELETE; `options` are passed to `BatchWriter`."""
    BatchWriter(connection, **options).delete(items, key_columns)


__all__ = [
    "BatchWriter",
    "batch_delete",
    "batch_update",
    "bulk_insert",
    "bulk_insert_many",
]
