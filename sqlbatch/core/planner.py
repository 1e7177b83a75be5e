"""
Batch planning: split `[0, item_count)` into contiguous ranges.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from sqlbatch.errors import ConfigurationError
from sqlbatch.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class BatchRange:
    offset: int
    length: int

    @property
    def stop(self) -> int:
        return self.offset + self.length


def _ranges(item_count: int, batch_size: int) -> Iterator[BatchRange]:
    offset = 0
    while offset < item_count:
        length = min(batch_size, item_count - offset)
        yield BatchRange(offset=offset, length=length)
        offset += length


def plan_batches(item_count: int, batch_size: int) -> Iterator[BatchRange]:
    """
    Lazily yield the ranges covering `[0, item_count)`.

    Arguments are checked eagerly, before the first range is requested.

    Raises
    ------
    ConfigurationError
        If `batch_size` is below 1 or `item_count` is negative.
    """
    if batch_size < 1:
        raise ConfigurationError(f"Batch size must be at least 1, got {batch_size}.")
    if item_count < 0:
        raise ConfigurationError(f"Item count cannot be negative, got {item_count}.")
    return _ranges(item_count, batch_size)


def effective_batch_size(batch_size: int, params_per_row: int, max_parameters: int) -> int:
    """
    Cap `batch_size` so one statement binds at most `max_parameters` values.

    Raises
    ------
    ConfigurationError
        If `batch_size` is below 1 or a single row already exceeds the limit.
    """
    if batch_size < 1:
        raise ConfigurationError(f"Batch size must be at least 1, got {batch_size}.")
    if params_per_row > max_parameters:
        raise ConfigurationError(
            f"One row binds {params_per_row} parameters; the dialect allows {max_parameters}."
        )
    ceiling = max_parameters // params_per_row
    if batch_size > ceiling:
        log.warning(
            "Batch size reduced to fit the parameter limit",
            extra={
                "requested_batch_size": batch_size,
                "batch_size": ceiling,
                "params_per_row": params_per_row,
                "max_parameters": max_parameters,
            },
        )
        return ceiling
    return batch_size


__all__ = ["BatchRange", "effective_batch_size", "plan_batches"]
