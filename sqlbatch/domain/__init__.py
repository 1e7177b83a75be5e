"""
Domain package for sqlbatch.

Exports the record base class and the helpers that read table and column
declarations off record types. Keep this package focused on data definitions
and validation concerns.
"""

from sqlbatch.domain.models import (
    TableModel,
    column_name_of,
    declared_column,
    is_nullable,
    record_type_of,
    table_name_of,
)

__all__ = [
    "TableModel",
    "column_name_of",
    "declared_column",
    "is_nullable",
    "record_type_of",
    "table_name_of",
]
