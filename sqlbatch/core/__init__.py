"""
Statement synthesis and parameter binding.

Pure building blocks with no database access: column resolution, batch
planning, statement assembly, parameter binding and row-set materialization.
"""

from sqlbatch.core.binder import ValuesColumn, bind_parameters, parameter_name
from sqlbatch.core.planner import BatchRange, effective_batch_size, plan_batches
from sqlbatch.core.resolver import ColumnAccessor, ColumnRegistry, get_registry
from sqlbatch.core.rowset import RowSet, materialize_rows, validate_records
from sqlbatch.core.statements import SqlStatement, derived_columns, validate_identifier

__all__ = [
    "BatchRange",
    "ColumnAccessor",
    "ColumnRegistry",
    "RowSet",
    "SqlStatement",
    "ValuesColumn",
    "bind_parameters",
    "derived_columns",
    "effective_batch_size",
    "get_registry",
    "materialize_rows",
    "parameter_name",
    "plan_batches",
    "validate_identifier",
    "validate_records",
]
