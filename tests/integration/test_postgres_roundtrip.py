"""
Integration tests for sqlbatch against a real PostgreSQL instance.

These tests verify that:
1. Bulk insert loads every record through COPY
2. Batched update and delete touch exactly the keyed rows, across batches
3. Typed VALUES row-sets accept NULLs and non-text columns, even when a column is NULL in every row
4. A failing statement leaves the caller's transaction to roll back

Each test runs inside a transaction that is rolled back afterwards.

Run with: RUN_INTEGRATION_TESTS=1 pytest tests/integration/
"""

from __future__ import annotations

import os
from datetime import date
from typing import List, Optional

import psycopg
import pytest
from pydantic import Field

from sqlbatch import BatchWriter, TableModel
from sqlbatch.errors import ConfigurationError

ROW_COUNT = 750
BATCH_SIZE = 300
BULK_BATCH_SIZE = 200

pytestmark = pytest.mark.skipif(
    os.getenv("RUN_INTEGRATION_TESTS", "0") != "1",
    reason="Integration tests require RUN_INTEGRATION_TESTS=1 and reachable Postgres",
)


class Order(TableModel):
    __tablename__ = "sqlbatch_orders"

    id: int = Field(alias="order_id")
    region: str = Field(alias="region")
    status: str = Field(alias="status")
    due: Optional[date] = Field(None, alias="due_date")
    note: Optional[str] = Field(None, alias="note")
    # Not a column of the table; skipped by bulk insert
    source: str = "import"


def _orders(count: int) -> List[Order]:
    return [Order(order_id=i, region="eu" if i % 2 else "us", status="new") for i in range(count)]


@pytest.fixture()
def orders_table(db_connection: psycopg.Connection) -> psycopg.Connection:
    with db_connection.cursor() as cur:
        cur.execute("""
            CREATE TEMP TABLE sqlbatch_orders (
                order_id integer NOT NULL,
                region text NOT NULL,
                status text NOT NULL,
                due_date date,
                note text,
                PRIMARY KEY (order_id, region)
            ) ON COMMIT DROP;
        """)
    return db_connection


def _fetch(conn: psycopg.Connection, query: str) -> list:
    with conn.cursor() as cur:
        cur.execute(query)
        return cur.fetchall()


class TestBulkInsert:
    def test_insert_loads_all_rows(self, orders_table: psycopg.Connection):
        BatchWriter(orders_table, bulk_batch_size=BULK_BATCH_SIZE).insert(_orders(ROW_COUNT))

        assert _fetch(orders_table, "SELECT count(*) FROM sqlbatch_orders") == [(ROW_COUNT,)]

    def test_insert_into_table_without_shared_columns_fails(self, orders_table: psycopg.Connection):
        with pytest.raises(ConfigurationError):
            BatchWriter(orders_table).insert(_orders(1), table="pg_temp.no_such_table")


class TestBatchUpdate:
    def test_update_rewrites_only_keyed_rows(self, orders_table: psycopg.Connection):
        writer = BatchWriter(orders_table, batch_size=BATCH_SIZE)
        writer.insert(_orders(ROW_COUNT))

        changed = [
            Order(order_id=o.id, region=o.region, status="shipped", due=date(2024, 1, 2), note=None)
            for o in _orders(ROW_COUNT)
            if o.id % 3 == 0
        ]
        writer.update(changed, ["order_id", "region"], ["status", "due_date", "note"])

        shipped = _fetch(orders_table, "SELECT count(*) FROM sqlbatch_orders WHERE status = 'shipped'")
        assert shipped == [(len(changed),)]
        dated = _fetch(orders_table, "SELECT DISTINCT due_date FROM sqlbatch_orders WHERE status = 'shipped'")
        assert dated == [(date(2024, 1, 2),)]

    def test_update_sets_non_text_column_to_null_for_every_row(self, orders_table: psycopg.Connection):
        writer = BatchWriter(orders_table, batch_size=BATCH_SIZE)
        writer.insert(
            [Order(order_id=i, region="eu", status="new", due=date(2024, 1, 2)) for i in range(ROW_COUNT)]
        )

        cleared = [Order(order_id=i, region="eu", status="new", due=None) for i in range(ROW_COUNT)]
        writer.update(cleared, ["order_id", "region"], ["due_date"])

        assert _fetch(orders_table, "SELECT count(due_date) FROM sqlbatch_orders") == [(0,)]

    def test_update_key_column_through_distinct_alias(self, orders_table: psycopg.Connection):
        writer = BatchWriter(orders_table)
        writer.insert(_orders(4))

        # region is both a key and an update column; the value written equals the key
        writer.update(_orders(4), ["order_id", "region"], ["region", "status"])

        assert _fetch(orders_table, "SELECT count(*) FROM sqlbatch_orders") == [(4,)]

    def test_failed_batch_leaves_rollback_to_caller(self, orders_table: psycopg.Connection):
        writer = BatchWriter(orders_table, batch_size=2)
        writer.insert(_orders(4))
        # NULL into a NOT NULL column in the second batch
        bad = _orders(4)
        bad[3] = Order.model_construct(order_id=3, region="eu", status=None, due=None, note=None)

        with pytest.raises(psycopg.errors.NotNullViolation):
            writer.update(bad, ["order_id", "region"], ["status"])


class TestBatchDelete:
    def test_delete_removes_only_keyed_rows(self, orders_table: psycopg.Connection):
        writer = BatchWriter(orders_table, batch_size=BATCH_SIZE)
        writer.insert(_orders(ROW_COUNT))

        doomed = [o for o in _orders(ROW_COUNT) if o.id < 500]
        writer.delete(doomed, ["order_id", "region"])

        assert _fetch(orders_table, "SELECT min(order_id), count(*) FROM sqlbatch_orders") == [
            (500, ROW_COUNT - 500)
        ]


class MixedCaseOrder(TableModel):
    __tablename__ = "SqlbatchOrders"

    id: int = Field(alias="OrderId")
    status: str = Field(alias="Status")


class TestMixedCaseNames:
    def test_insert_then_update_quoted_table(self, db_connection: psycopg.Connection):
        with db_connection.cursor() as cur:
            cur.execute(
                'CREATE TEMP TABLE "SqlbatchOrders" ("OrderId" integer PRIMARY KEY, "Status" text NOT NULL)'
                " ON COMMIT DROP"
            )
        writer = BatchWriter(db_connection)
        writer.insert([MixedCaseOrder(OrderId=i, Status="new") for i in range(3)])

        writer.update([MixedCaseOrder(OrderId=i, Status="paid") for i in range(3)], ["OrderId"], ["Status"])

        assert _fetch(db_connection, 'SELECT DISTINCT "Status" FROM "SqlbatchOrders"') == [("paid",)]
