"""
Record modeling for sqlbatch.

Records are pydantic models. A model names its destination table with the
`__tablename__` class attribute and maps a field to a physical column with a
pydantic alias:

    class Order(TableModel):
        __tablename__ = "orders"

        id: int = Field(alias="order_id")
        status: str = Field(alias="status")
        note: Optional[str] = Field(None, alias="note")

`populate_by_name` is enabled so records can be built with either the field
name or the column name.
"""
from __future__ import annotations

import types
import typing
from typing import Any, ClassVar, Optional, Sequence, Type, Union

from pydantic import BaseModel, ConfigDict
from pydantic.fields import FieldInfo

from sqlbatch.errors import ConfigurationError, DataValidationError


class TableModel(BaseModel):
    """
    Base class for records written through sqlbatch.

    Subclasses set `__tablename__`; plain `BaseModel` subclasses that define it
    work as well.
    """

    __tablename__: ClassVar[Optional[str]] = None

    model_config = ConfigDict(populate_by_name=True)


def table_name_of(model: Type[BaseModel]) -> str:
    """
    Return the destination table declared on a record type.

    Raises
    ------
    ConfigurationError
        If the type declares no table name or a blank one.
    """
    name = getattr(model, "__tablename__", None)
    if not isinstance(name, str) or not name.strip():
        raise ConfigurationError(f"{model.__name__} does not declare a __tablename__.")
    return name.strip()


def declared_column(field_info: FieldInfo) -> Optional[str]:
    """The column annotation of a field, or None when the field has none."""
    return field_info.alias


def column_name_of(field_name: str, field_info: FieldInfo) -> str:
    """Physical column name for a field: its annotation, else the field name."""
    return declared_column(field_info) or field_name


def is_nullable(field_info: FieldInfo) -> bool:
    """Whether the field's annotation admits None."""
    annotation = field_info.annotation
    if annotation is None or annotation is type(None) or annotation is Any:
        return True
    origin = typing.get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        return type(None) in typing.get_args(annotation)
    return False


def record_type_of(items: Sequence[Any], model: Optional[Type[BaseModel]] = None) -> Type[BaseModel]:
    """
    Determine the single record type of a collection.

    The type is `model` when given, else the type of the first element. Every
    element must be an instance of exactly that type; collections mixing
    shapes would otherwise be written with the first element's columns only.

    Raises
    ------
    DataValidationError
        If the collection is empty, holds non-pydantic objects, or mixes types.
    """
    if not items:
        raise DataValidationError("The items collection cannot be empty.")
    record_type = model or type(items[0])
    if not (isinstance(record_type, type) and issubclass(record_type, BaseModel)):
        shown = getattr(record_type, "__name__", None) or type(record_type).__name__
        raise DataValidationError(f"Records must be pydantic model types, got {shown}.")
    for index, item in enumerate(items):
        if type(item) is not record_type:
            raise DataValidationError(
                f"Item {index} is a {type(item).__name__}, expected {record_type.__name__}; "
                "collections must hold a single record type."
            )
    return record_type


__all__ = [
    "TableModel",
    "column_name_of",
    "declared_column",
    "is_nullable",
    "record_type_of",
    "table_name_of",
]
