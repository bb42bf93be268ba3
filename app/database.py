# app/database.py - Supabase store client (built once at startup)

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Iterable, Mapping, Sequence

import httpx
from fastapi import Request
from postgrest.exceptions import APIError
from supabase import Client, ClientOptions, create_client

from app.config import Settings

logger = logging.getLogger(__name__)

SCHEMA_CORE = "core"
SCHEMA_REFERENCE = "reference"
SCHEMA_EXTRACTED = "extracted"
SCHEMAS = (SCHEMA_CORE, SCHEMA_REFERENCE, SCHEMA_EXTRACTED)

_FILTER_OPS = {"eq", "ilike", "gte", "lte", "in", "not_null"}


class StoreError(Exception):
    """The backing store failed or could not be reached."""

    def __init__(self, message: str, *, schema: str, table: str):
        super().__init__(message)
        self.schema = schema
        self.table = table


@dataclass(frozen=True)
class Filter:
    column: str
    op: str
    value: Any = None

    def __post_init__(self) -> None:
        if self.op not in _FILTER_OPS:
            raise ValueError(f"Unsupported filter op: {self.op}")


def eq(column: str, value: Any) -> Filter:
    return Filter(column, "eq", value)


def contains(column: str, value: str) -> Filter:
    return Filter(column, "ilike", value)


def gte(column: str, value: Any) -> Filter:
    return Filter(column, "gte", value)


def lte(column: str, value: Any) -> Filter:
    return Filter(column, "lte", value)


def is_one_of(column: str, values: Iterable[Any]) -> Filter:
    return Filter(column, "in", list(values))


def not_null(column: str) -> Filter:
    return Filter(column, "not_null")


def _apply_filters(query: Any, filters: Sequence[Filter]) -> Any:
    for item in filters:
        if item.op == "eq":
            query = query.eq(item.column, item.value)
        elif item.op == "ilike":
            query = query.ilike(item.column, f"%{item.value}%")
        elif item.op == "gte":
            query = query.gte(item.column, item.value)
        elif item.op == "lte":
            query = query.lte(item.column, item.value)
        elif item.op == "in":
            query = query.in_(item.column, item.value)
        elif item.op == "not_null":
            query = query.not_.is_(item.column, "null")
    return query


class StoreClient:
    """
    Capability-scoped read access to the multi-schema Postgres store.

    Holds one Supabase client per schema, each bound to that schema at
    construction; clients are never switched between schemas. Every
    failure raised by the underlying PostgREST call surfaces as StoreError.
    """

    def __init__(self, clients: Mapping[str, Client]):
        self._clients = dict(clients)

    @classmethod
    def from_settings(cls, settings: Settings) -> "StoreClient":
        return cls(
            {
                schema: create_client(
                    settings.supabase_url,
                    settings.supabase_service_key,
                    options=ClientOptions(
                        schema=schema,
                        auto_refresh_token=False,
                        persist_session=False,
                    ),
                )
                for schema in SCHEMAS
            }
        )

    def _table(self, schema: str, table: str) -> Any:
        client = self._clients.get(schema)
        if client is None:
            raise ValueError(f"No store client configured for schema: {schema}")
        return client.table(table)

    def _execute(self, query: Any, *, schema: str, table: str) -> Any:
        try:
            return query.execute()
        except (APIError, httpx.HTTPError) as exc:
            logger.error(
                "Store query failed",
                extra={"schema": schema, "table": table, "error": str(exc)},
            )
            raise StoreError(str(exc), schema=schema, table=table) from exc

    def query(
        self,
        schema: str,
        table: str,
        columns: str,
        filters: Sequence[Filter] = (),
        *,
        order: str | None = None,
        desc: bool = False,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        query = _apply_filters(self._table(schema, table).select(columns), filters)
        if order:
            query = query.order(order, desc=desc)
        if limit is not None:
            safe_offset = max(0, offset)
            if safe_offset:
                query = query.range(safe_offset, safe_offset + limit - 1)
            else:
                query = query.limit(limit)
        result = self._execute(query, schema=schema, table=table)
        return result.data or []

    def first(
        self,
        schema: str,
        table: str,
        columns: str,
        filters: Sequence[Filter] = (),
        *,
        order: str | None = None,
        desc: bool = False,
    ) -> dict[str, Any] | None:
        rows = self.query(schema, table, columns, filters, order=order, desc=desc, limit=1)
        return rows[0] if rows else None

    def count(self, schema: str, table: str, filters: Sequence[Filter] = ()) -> int:
        query = _apply_filters(self._table(schema, table).select("*", count="exact"), filters)
        result = self._execute(query.limit(1), schema=schema, table=table)
        return result.count or 0


def get_store(request: Request) -> StoreClient:
    return request.app.state.store
