"""
Row-set materialization for the bulk-load path.

A `RowSet` is the tabular form of a record collection handed to the bulk
transport: one column per field of the record type (named by its column
annotation, else its field name) and one tuple per record.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, Sequence, Tuple

from sqlbatch.core.resolver import ColumnAccessor
from sqlbatch.errors import DataValidationError


@dataclass(frozen=True)
class RowSet:
    columns: Tuple[str, ...]
    rows: List[Tuple[Any, ...]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)

    def project(
        self, columns: Sequence[str], start: int = 0, stop: Optional[int] = None
    ) -> Iterator[Tuple[Any, ...]]:
        """
        Yield rows `[start, stop)` restricted to `columns`, in that order.

        Raises
        ------
        KeyError
            If a requested column is not part of the row-set.
        """
        positions: List[int] = []
        for column in columns:
            if column not in self.columns:
                raise KeyError(f"Column {column!r} is not part of the row-set.")
            positions.append(self.columns.index(column))
        for row in self.rows[start:stop]:
            yield tuple(row[i] for i in positions)


def validate_records(records: Sequence[Any], descriptors: Sequence[ColumnAccessor]) -> None:
    """
    Reject the collection if any non-nullable field holds None.

    Every record is checked before anything is written, so a bad record late
    in the collection still stops the load before the first round trip.

    Raises
    ------
    DataValidationError
        Naming the first offending field and record position.
    """
    required = [d for d in descriptors if not d.nullable]
    for index, record in enumerate(records):
        for descriptor in required:
            if descriptor.read(record) is None:
                raise DataValidationError(
                    f"Field '{descriptor.field_name}' of item {index} cannot be null."
                )


def materialize_rows(records: Sequence[Any], descriptors: Sequence[ColumnAccessor]) -> RowSet:
    """Validate `records` and build their row-set."""
    validate_records(records, descriptors)
    columns = tuple(d.column for d in descriptors)
    rows = [tuple(d.read(record) for d in descriptors) for record in records]
    return RowSet(columns=columns, rows=rows)


__all__ = ["RowSet", "materialize_rows", "validate_records"]
