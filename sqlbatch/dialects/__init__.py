"""
Dialects package for sqlbatch.

Re-exports the dialect interfaces and concrete dialects, and keeps the
name -> factory registry used by the writer and the CLI.
"""

from __future__ import annotations

from typing import Callable, Dict, List

from sqlbatch.dialects.abstract import AbstractDialect, Dialect
from sqlbatch.dialects.mssql import SqlServerDialect
from sqlbatch.dialects.postgresql import PostgresDialect
from sqlbatch.errors import ConfigurationError


def _dialect_factories() -> Dict[str, Callable[[], Dialect]]:
    """Registry of available dialects."""
    return {
        "mssql": lambda: SqlServerDialect(),
        "postgresql": lambda: PostgresDialect(),
    }


def available_dialects() -> List[str]:
    """List available dialect names."""
    return sorted(_dialect_factories().keys())


def get_dialect(name: str) -> Dialect:
    factories = _dialect_factories()
    if name not in factories:
        raise ConfigurationError(f"Unknown dialect '{name}'. Available: {', '.join(factories)}")
    return factories[name]()


__all__ = [
    # Abstracts
    "AbstractDialect",
    "Dialect",
    # Concrete dialects
    "PostgresDialect",
    "SqlServerDialect",
    # Registry
    "available_dialects",
    "get_dialect",
]
