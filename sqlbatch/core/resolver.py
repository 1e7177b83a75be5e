"""
Column resolution for record types.

The registry maps (record type, physical column) to a `ColumnAccessor` built
from the model's declared fields. Lookups are memoized for the life of the
process, including misses, so a type's fields are scanned at most once per
column. Record shapes are assumed immutable once the class is defined; the
cache is append-only and `clear()` exists for tests.
"""

from __future__ import annotations

import operator
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Type

from pydantic import BaseModel

from sqlbatch.domain.models import column_name_of, declared_column, is_nullable
from sqlbatch.errors import ConfigurationError


@dataclass(frozen=True)
class ColumnAccessor:
    """
    Typed accessor for one field of a record type.

    Attributes
    ----------
    field_name : str
        Attribute name on the model.
    column : str
        Physical column name the field maps to.
    nullable : bool
        Whether the field's annotation admits None.
    """

    field_name: str
    column: str
    nullable: bool
    getter: Callable[[Any], Any] = field(repr=False, compare=False)

    def read(self, record: Any) -> Any:
        """Read the field value; an unset attribute reads as None."""
        try:
            return self.getter(record)
        except AttributeError:
            return None


def _accessor(field_name: str, column: str, nullable: bool) -> ColumnAccessor:
    return ColumnAccessor(
        field_name=field_name,
        column=column,
        nullable=nullable,
        getter=operator.attrgetter(field_name),
    )


class ColumnRegistry:
    """
    Process-wide descriptor registry for record types.

    Safe to share between threads: concurrent misses on the same key compute
    the same accessor and the first one stored wins.
    """

    def __init__(self) -> None:
        self._columns: Dict[Tuple[type, str], Optional[ColumnAccessor]] = {}
        self._descriptors: Dict[type, Tuple[ColumnAccessor, ...]] = {}
        self._lock = threading.Lock()
        self.scan_count = 0

    def resolve(self, model: Type[BaseModel], column: str) -> Optional[ColumnAccessor]:
        """
        Return the accessor for the field annotated with `column`, or None.

        Parameters
        ----------
        model : type[BaseModel]
            Record type to search.
        column : str
            Physical column name, matched exactly against field aliases.
        """
        key = (model, column)
        try:
            return self._columns[key]
        except KeyError:
            pass
        found = self._scan(model, column)
        with self._lock:
            return self._columns.setdefault(key, found)

    def require(self, model: Type[BaseModel], columns: Sequence[str]) -> List[ColumnAccessor]:
        """
        Resolve every column or fail naming all that are missing.

        Raises
        ------
        ConfigurationError
            If any column has no annotated field on `model`.
        """
        resolved = [(column, self.resolve(model, column)) for column in columns]
        missing = [column for column, accessor in resolved if accessor is None]
        if missing:
            raise ConfigurationError(
                f"No field of {model.__name__} is mapped to column(s): {', '.join(missing)}"
            )
        return [accessor for _, accessor in resolved if accessor is not None]

    def descriptors(self, model: Type[BaseModel]) -> Tuple[ColumnAccessor, ...]:
        """All fields of `model` in declaration order, named by their physical column."""
        cached = self._descriptors.get(model)
        if cached is not None:
            return cached
        built = tuple(
            _accessor(name, column_name_of(name, info), is_nullable(info))
            for name, info in model.model_fields.items()
        )
        with self._lock:
            return self._descriptors.setdefault(model, built)

    def clear(self) -> None:
        with self._lock:
            self._columns.clear()
            self._descriptors.clear()
            self.scan_count = 0

    def _scan(self, model: Type[BaseModel], column: str) -> Optional[ColumnAccessor]:
        with self._lock:
            self.scan_count += 1
        for name, info in model.model_fields.items():
            if declared_column(info) == column:
                return _accessor(name, column, is_nullable(info))
        return None


_REGISTRY = ColumnRegistry()


def get_registry() -> ColumnRegistry:
    """Return the process-wide registry."""
    return _REGISTRY


__all__ = ["ColumnAccessor", "ColumnRegistry", "get_registry"]
