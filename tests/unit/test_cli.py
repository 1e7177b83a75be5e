from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Tuple

import pytest
from typer.testing import CliRunner

from sqlbatch import main
from sqlbatch.domain.models import table_name_of

RECORD_COUNT = 5

runner = CliRunner()


def _write_jsonl(path: Path, rows: List[Dict[str, Any]]) -> Path:
    path.write_text("\n".join(json.dumps(row) for row in rows) + "\n", encoding="utf-8")
    return path


@pytest.fixture()
def orders_file(tmp_path: Path) -> Path:
    rows = [{"order_id": i, "status": "paid", "note": None} for i in range(RECORD_COUNT)]
    return _write_jsonl(tmp_path / "orders.jsonl", rows)


class _FakeCursor:
    def __init__(self, log: List[Tuple[str, Dict[str, Any]]]) -> None:
        self._log = log
        self.rowcount = 1

    def __enter__(self) -> _FakeCursor:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        del exc_type, exc, tb

    def execute(self, query: str, params: Dict[str, Any]) -> None:
        self._log.append((query, params))


class _FakeConnection:
    def __init__(self) -> None:
        self.executed: List[Tuple[str, Dict[str, Any]]] = []
        self.exit_exc: Any = "not exited"

    def __enter__(self) -> _FakeConnection:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        del exc, tb
        self.exit_exc = exc_type

    def cursor(self) -> _FakeCursor:
        return _FakeCursor(self.executed)


def test_load_records_builds_model_from_keys(tmp_path: Path) -> None:
    path = _write_jsonl(tmp_path / "rows.jsonl", [{"a": 1}, {"a": 2, "b": "x"}])

    records = main.load_records(path, "things")

    model = type(records[0])
    assert table_name_of(model) == "things"
    assert [info.alias for info in model.model_fields.values()] == ["a", "b"]
    assert records[0].model_dump(by_alias=True) == {"a": 1, "b": None}


def test_info_prints_settings() -> None:
    result = runner.invoke(main.app, ["info"])

    assert result.exit_code == 0
    assert "dialect=" in result.output


def test_dialects_lists_registry() -> None:
    result = runner.invoke(main.app, ["dialects"])

    assert result.exit_code == 0
    assert "mssql" in result.output
    assert "postgresql" in result.output


def test_apply_update_dry_run_renders_plan(orders_file: Path) -> None:
    result = runner.invoke(
        main.app,
        [
            "apply", "update", str(orders_file),
            "--table", "orders", "--key", "order_id", "--set", "status",
            "--dialect", "mssql", "--batch-size", "2", "--dry-run",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "3 batch(es)" in result.output


def test_apply_insert_dry_run_renders_copy_plan(orders_file: Path) -> None:
    result = runner.invoke(
        main.app,
        ["apply", "insert", str(orders_file), "--table", "orders", "--batch-size", "10", "--dry-run"],
    )

    assert result.exit_code == 0, result.output
    assert "1 batch(es)" in result.output


def test_apply_update_without_set_columns_fails(orders_file: Path) -> None:
    result = runner.invoke(
        main.app,
        ["apply", "update", str(orders_file), "--table", "orders", "--key", "order_id", "--dry-run"],
    )

    assert result.exit_code == 2
    assert "Error" in result.output


def test_apply_rejects_unknown_operation(orders_file: Path) -> None:
    result = runner.invoke(main.app, ["apply", "upsert", str(orders_file), "--table", "orders"])

    assert result.exit_code == 2


def test_apply_rejects_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "broken.jsonl"
    path.write_text('{"order_id": 1}\n{not json\n', encoding="utf-8")

    result = runner.invoke(main.app, ["apply", "delete", str(path), "--table", "orders", "--key", "order_id"])

    assert result.exit_code == 2


def test_apply_delete_runs_against_connection(monkeypatch: pytest.MonkeyPatch, orders_file: Path) -> None:
    connection = _FakeConnection()
    monkeypatch.setattr(main, "get_sync_connection", lambda dsn=None: connection)

    result = runner.invoke(
        main.app,
        [
            "apply", "delete", str(orders_file),
            "--table", "orders", "--key", "order_id",
            "--dialect", "mssql", "--batch-size", "2",
        ],
    )

    assert result.exit_code == 0, result.output
    assert len(connection.executed) == 3
    assert connection.executed[0][0].startswith("DELETE orders FROM orders INNER JOIN")
    assert connection.exit_exc is None
