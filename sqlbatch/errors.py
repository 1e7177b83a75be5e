"""
Error taxonomy for sqlbatch.

Configuration and validation errors are raised before any statement reaches
the connection. Driver errors raised while executing a statement are not
wrapped; they reach the caller unchanged so it can roll back its transaction.
"""

from __future__ import annotations


class BatchError(Exception):
    """Base class for errors raised by sqlbatch itself."""


class ConfigurationError(BatchError, ValueError):
    """
    The call is mis-declared: missing table name, empty key/update column set,
    a column with no matching field, an invalid identifier or batch size.
    """


class DataValidationError(BatchError, ValueError):
    """
    The records cannot be written: empty collection, a non-nullable field
    holding None, or a collection mixing record types.
    """


__all__ = ["BatchError", "ConfigurationError", "DataValidationError"]
