from __future__ import annotations

from copy import deepcopy
from types import SimpleNamespace
from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

from app.config import Settings, get_settings
from app.database import SCHEMAS, StoreClient, get_store
from app.main import app


def _ilike(pattern: str) -> Callable[[Any], bool]:
    needle = pattern.strip("%").lower()
    return lambda value: value is not None and needle in str(value).lower()


class _SelectQuery:
    def __init__(self, stub: "_SupabaseStub", schema: str, table: str, columns: str, count: str | None):
        self._stub = stub
        self._schema = schema
        self._table = table
        self._columns = [column.strip() for column in columns.split(",")]
        self._count = count
        self._negate_next = False
        self._predicates: list[Callable[[dict], bool]] = []
        self.calls: list[tuple] = []
        self._order_key: str | None = None
        self._order_desc = False
        self._start = 0
        self._end: int | None = None

    def _add(self, call: tuple, column: str, test: Callable[[Any], bool]):
        self.calls.append(call)
        self._predicates.append(lambda row: test(row.get(column)))
        return self

    def eq(self, column: str, value: Any):
        return self._add(("eq", column, value), column, lambda v: v == value)

    def ilike(self, column: str, pattern: str):
        return self._add(("ilike", column, pattern), column, _ilike(pattern))

    def gte(self, column: str, value: Any):
        return self._add(("gte", column, value), column, lambda v: v is not None and v >= value)

    def lte(self, column: str, value: Any):
        return self._add(("lte", column, value), column, lambda v: v is not None and v <= value)

    def in_(self, column: str, values: list):
        return self._add(("in", column, list(values)), column, lambda v: v in values)

    @property
    def not_(self):
        self._negate_next = True
        return self

    def is_(self, column: str, value: str):
        assert value == "null"
        if self._negate_next:
            self._negate_next = False
            return self._add(("not_null", column), column, lambda v: v is not None)
        return self._add(("is_null", column), column, lambda v: v is None)

    def order(self, column: str, desc: bool = False):
        self.calls.append(("order", column, desc))
        self._order_key = column
        self._order_desc = desc
        return self

    def limit(self, size: int):
        self.calls.append(("limit", size))
        self._end = self._start + size - 1
        return self

    def range(self, start: int, end: int):
        self.calls.append(("range", start, end))
        self._start = start
        self._end = end
        return self

    def execute(self):
        self._stub.executed.append(self)
        if (self._schema, self._table) in self._stub.failing:
            raise APIError(
                {
                    "message": "canceling statement due to statement timeout",
                    "code": "57014",
                    "hint": None,
                    "details": None,
                }
            )

        rows = [
            deepcopy(row)
            for row in self._stub.rows(self._schema, self._table)
            if all(predicate(row) for predicate in self._predicates)
        ]
        total = len(rows)
        if self._order_key:
            rows = sorted(
                rows,
                key=lambda row: row.get(self._order_key) or "",
                reverse=self._order_desc,
            )
        rows = rows[self._start :] if self._end is None else rows[self._start : self._end + 1]
        if self._columns != ["*"]:
            rows = [{column: row.get(column) for column in self._columns} for row in rows]
        return SimpleNamespace(data=rows, count=total if self._count else None)


class _Table:
    def __init__(self, stub: "_SupabaseStub", schema: str, name: str):
        self._stub = stub
        self._schema = schema
        self._name = name

    def select(self, columns: str, count: str | None = None):
        return _SelectQuery(self._stub, self._schema, self._name, columns, count)


class _SchemaClient:
    def __init__(self, stub: "_SupabaseStub", name: str):
        self._stub = stub
        self._name = name

    def table(self, name: str) -> _Table:
        return _Table(self._stub, self._name, name)


class _SupabaseStub:
    def __init__(self):
        self.tables: dict[tuple[str, str], list[dict]] = {}
        self.executed: list[_SelectQuery] = []
        self.failing: set[tuple[str, str]] = set()

    def seed(self, schema: str, table: str, rows: list[dict]) -> None:
        self.tables.setdefault((schema, table), []).extend(deepcopy(rows))

    def rows(self, schema: str, table: str) -> list[dict]:
        return self.tables.get((schema, table), [])

    def fail(self, schema: str, table: str) -> None:
        self.failing.add((schema, table))

    def queries_for(self, schema: str, table: str) -> list[_SelectQuery]:
        return [query for query in self.executed if (query._schema, query._table) == (schema, table)]

    def client_for(self, name: str) -> "_SchemaClient":
        return _SchemaClient(self, name)


@pytest.fixture
def supabase_stub() -> _SupabaseStub:
    return _SupabaseStub()


@pytest.fixture
def store(supabase_stub: _SupabaseStub) -> StoreClient:
    return StoreClient({name: supabase_stub.client_for(name) for name in SCHEMAS})  # type: ignore[misc]


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_KEY", "service-key")
    monkeypatch.setenv("ENVIRONMENT", "production")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def client(store: StoreClient, settings: Settings):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_settings] = lambda: settings
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()
