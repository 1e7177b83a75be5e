"""
Parameter binding: turn one record into named values for a statement.
"""

from __future__ import annotations

from typing import Any, List, NamedTuple, Sequence, Tuple

from sqlbatch.core.resolver import ColumnAccessor


class ValuesColumn(NamedTuple):
    """A column of the inline row-set: where its value comes from and what it is called."""

    column: str
    alias: str
    accessor: ColumnAccessor


def parameter_name(alias: str, index: int) -> str:
    """Name of the parameter carrying `alias` for the record at overall position `index`."""
    return f"{alias}_{index}"


def bind_parameters(record: Any, columns: Sequence[ValuesColumn], index: int) -> List[Tuple[str, Any]]:
    """
    Extract `(name, value)` pairs for `record`, one per column, in column order.

    Absent values are bound as None (SQL NULL) rather than skipped, so every
    row of a batch binds the same number of parameters.
    """
    return [(parameter_name(col.alias, index), col.accessor.read(record)) for col in columns]


__all__ = ["ValuesColumn", "bind_parameters", "parameter_name"]
