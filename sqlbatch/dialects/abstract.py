"""
Dialect interfaces for sqlbatch.

A dialect renders the join-based UPDATE and DELETE statements for one batch of
records. Concrete dialects implement the `Dialect` protocol (or subclass
`AbstractDialect`) and return `SqlStatement` objects, so execution and
parameter handling stay identical across engines.
"""

from __future__ import annotations

import abc
from typing import Any, Protocol, Sequence, runtime_checkable

from sqlbatch.core.binder import ValuesColumn
from sqlbatch.core.statements import SqlStatement


@runtime_checkable
class Dialect(Protocol):
    """
    Common interface all statement dialects implement.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier.
    description : str
        A human-friendly summary of the statement shapes.
    max_parameters : int
        Most bound parameters the engine accepts in one statement.
    """

    name: str
    description: str
    max_parameters: int

    def update_statement(
        self,
        table: str,
        keys: Sequence[ValuesColumn],
        updates: Sequence[ValuesColumn],
        records: Sequence[Any],
        offset: int,
    ) -> SqlStatement:
        """
        Render one UPDATE for `records`, whose first element sits at `offset`
        in the caller's full item list.
        """
        ...

    def delete_statement(
        self,
        table: str,
        keys: Sequence[ValuesColumn],
        records: Sequence[Any],
        offset: int,
    ) -> SqlStatement:
        """Render one DELETE for `records`."""
        ...


class AbstractDialect(abc.ABC):
    """
    Optional ABC helper for class-based dialects.

    Subclasses set `name`, `description` and `max_parameters` and implement
    both statement builders.
    """

    name: str
    description: str
    max_parameters: int

    @abc.abstractmethod
    def update_statement(
        self,
        table: str,
        keys: Sequence[ValuesColumn],
        updates: Sequence[ValuesColumn],
        records: Sequence[Any],
        offset: int,
    ) -> SqlStatement:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def delete_statement(
        self,
        table: str,
        keys: Sequence[ValuesColumn],
        records: Sequence[Any],
        offset: int,
    ) -> SqlStatement:  # pragma: no cover - interface only
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


__all__ = ["AbstractDialect", "Dialect"]
