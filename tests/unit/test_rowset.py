from __future__ import annotations

from typing import Optional

import pytest
from pydantic import BaseModel, Field

from sqlbatch.core.resolver import ColumnRegistry
from sqlbatch.core.rowset import RowSet, materialize_rows, validate_records
from sqlbatch.domain.models import TableModel, is_nullable, record_type_of, table_name_of
from sqlbatch.errors import ConfigurationError, DataValidationError


class Customer(TableModel):
    __tablename__ = "customers"

    id: int = Field(alias="customer_id")
    name: str
    email: Optional[str] = Field(None, alias="email")
    tier: int | None = None


class Untitled(TableModel):
    id: int


class Plain(BaseModel):
    id: int


def test_materialize_rows_uses_annotation_then_field_name(registry: ColumnRegistry) -> None:
    records = [Customer(customer_id=1, name="Ada"), Customer(customer_id=2, name="Bob", email="b@x")]

    row_set = materialize_rows(records, registry.descriptors(Customer))

    assert row_set.columns == ("customer_id", "name", "email", "tier")
    assert row_set.rows == [(1, "Ada", None, None), (2, "Bob", "b@x", None)]
    assert len(row_set) == 2


def test_validation_rejects_null_in_non_nullable_field(registry: ColumnRegistry) -> None:
    good = Customer(customer_id=1, name="Ada")
    bad = Customer.model_construct(customer_id=2, name=None)

    with pytest.raises(DataValidationError, match="Field 'name' of item 1 cannot be null"):
        validate_records([good, bad], registry.descriptors(Customer))


def test_validation_accepts_null_in_nullable_fields(registry: ColumnRegistry) -> None:
    validate_records([Customer(customer_id=1, name="Ada", email=None)], registry.descriptors(Customer))


def test_nullability_follows_annotation() -> None:
    fields = Customer.model_fields

    assert is_nullable(fields["email"]) is True
    assert is_nullable(fields["tier"]) is True
    assert is_nullable(fields["id"]) is False
    assert is_nullable(fields["name"]) is False


def test_project_reorders_and_slices() -> None:
    row_set = RowSet(columns=("a", "b", "c"), rows=[(1, 2, 3), (4, 5, 6), (7, 8, 9)])

    assert list(row_set.project(["c", "a"], 1, 3)) == [(6, 4), (9, 7)]


def test_project_unknown_column_raises() -> None:
    row_set = RowSet(columns=("a",), rows=[(1,)])

    with pytest.raises(KeyError):
        list(row_set.project(["z"]))


def test_table_name_of_requires_declaration() -> None:
    assert table_name_of(Customer) == "customers"
    with pytest.raises(ConfigurationError):
        table_name_of(Untitled)


def test_record_type_of_rejects_empty_collection() -> None:
    with pytest.raises(DataValidationError):
        record_type_of([])


def test_record_type_of_rejects_mixed_types() -> None:
    with pytest.raises(DataValidationError, match="Item 1"):
        record_type_of([Customer(customer_id=1, name="Ada"), Plain(id=1)])


def test_record_type_of_rejects_non_models() -> None:
    with pytest.raises(DataValidationError):
        record_type_of([{"id": 1}])


def test_record_type_of_honours_declared_model() -> None:
    assert record_type_of([Plain(id=1)], Plain) is Plain
    with pytest.raises(DataValidationError):
        record_type_of([Plain(id=1)], Customer)


def test_record_type_of_rejects_instance_passed_as_model() -> None:
    with pytest.raises(DataValidationError, match="got Plain"):
        record_type_of([Plain(id=1)], Plain(id=1))
