"""
Statement assembly primitives shared by the dialects.

`SqlStatement` keeps SQL text and bound values apart: text is appended as
fragments, values only ever enter through `bind`, which appends a DB-API
`pyformat` placeholder (`%(name)s`) and records the value under that name.
Table and column names are trusted only after `validate_identifier`.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, Iterable, List, Sequence, Tuple

from sqlbatch.core.binder import ValuesColumn, bind_parameters
from sqlbatch.core.resolver import ColumnAccessor
from sqlbatch.errors import ConfigurationError

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_$]*(\.[A-Za-z_][A-Za-z0-9_$]*)?$")

# Alias of the inline row-set joined against the target table.
SOURCE_ALIAS = "x"


def validate_identifier(name: str, kind: str = "column") -> str:
    """
    Accept a plain or schema-qualified SQL identifier, reject anything else.

    Raises
    ------
    ConfigurationError
        If `name` is not a string matching `name` or `schema.name`.
    """
    if not isinstance(name, str) or not _IDENTIFIER.match(name):
        raise ConfigurationError(f"Invalid {kind} identifier: {name!r}")
    if kind == "column" and "." in name:
        raise ConfigurationError(f"Column names cannot be qualified: {name!r}")
    return name


class SqlStatement:
    """
    A parameterized statement under construction.

    Example
    -------
        stmt = SqlStatement()
        stmt.append("DELETE FROM orders WHERE id = ")
        stmt.bind("id_0", 42)
        stmt.text        # 'DELETE FROM orders WHERE id = %(id_0)s'
        stmt.parameters  # {'id_0': 42}
    """

    def __init__(self) -> None:
        self._fragments: List[str] = []
        self._parameters: Dict[str, Any] = {}

    def append(self, text: str) -> "SqlStatement":
        self._fragments.append(text)
        return self

    def bind(self, name: str, value: Any) -> "SqlStatement":
        if name in self._parameters:
            raise RuntimeError(f"Parameter {name!r} bound twice in one statement.")
        self._parameters[name] = value
        self._fragments.append(f"%({name})s")
        return self

    def join(self, separator: str, parts: Iterable[str]) -> "SqlStatement":
        return self.append(separator.join(parts))

    @property
    def text(self) -> str:
        return "".join(self._fragments)

    @property
    def parameters(self) -> Dict[str, Any]:
        return dict(self._parameters)

    @property
    def parameter_count(self) -> int:
        return len(self._parameters)

    def __repr__(self) -> str:
        return f"SqlStatement(text={self.text!r}, parameters={self.parameter_count})"


def derived_columns(
    keys: Sequence[ColumnAccessor], updates: Sequence[ColumnAccessor] = ()
) -> Tuple[List[ValuesColumn], List[ValuesColumn]]:
    """
    Name the inline row-set's columns: key columns first, then update columns.

    A column present in both sets keeps its own name in the key position and
    gets a distinct alias (`<column>_new`, numbered if taken) in the update
    position, so the row-set never declares the same column twice.
    """
    taken = {accessor.column for accessor in keys} | {accessor.column for accessor in updates}
    key_columns = [ValuesColumn(a.column, a.column, a) for a in keys]
    used = {col.alias for col in key_columns}
    update_columns: List[ValuesColumn] = []
    for accessor in updates:
        alias = accessor.column
        if alias in used:
            alias = f"{accessor.column}_new"
            counter = 1
            while alias in taken or alias in used:
                counter += 1
                alias = f"{accessor.column}_new{counter}"
        used.add(alias)
        update_columns.append(ValuesColumn(accessor.column, alias, accessor))
    return key_columns, update_columns


def append_values_rows(
    statement: SqlStatement,
    records: Sequence[Any],
    offset: int,
    columns: Sequence[ValuesColumn],
) -> SqlStatement:
    """
    Append `(p, p, ...), (p, p, ...)` for `records`, binding each value.

    Parameter names use the record's position in the whole input
    (`offset + i`), keeping them unique across every batch of one call.
    """
    for position, record in enumerate(records):
        if position:
            statement.append(", ")
        statement.append("(")
        for column_index, (name, value) in enumerate(
            bind_parameters(record, columns, offset + position)
        ):
            if column_index:
                statement.append(", ")
            statement.bind(name, value)
        statement.append(")")
    return statement


def _bare(name: str) -> str:
    return name


def join_predicate(
    table: str, keys: Sequence[ValuesColumn], quote: Callable[[str], str] = _bare
) -> str:
    """`x.k1 = t.k1 AND x.k2 = t.k2` for the key columns, names passed through `quote`."""
    return " AND ".join(
        f"{SOURCE_ALIAS}.{quote(col.alias)} = {quote(table)}.{quote(col.column)}" for col in keys
    )


def alias_list(columns: Sequence[ValuesColumn], quote: Callable[[str], str] = _bare) -> str:
    return ", ".join(quote(col.alias) for col in columns)


__all__ = [
    "SOURCE_ALIAS",
    "SqlStatement",
    "alias_list",
    "append_values_rows",
    "derived_columns",
    "join_predicate",
    "validate_identifier",
]
