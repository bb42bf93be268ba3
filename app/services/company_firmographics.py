from __future__ import annotations

from typing import Any

from app.database import SCHEMA_EXTRACTED, Filter, StoreClient, contains, eq, gte, lte
from app.models.company import CompanyFirmographicsSearch

FIRMOGRAPHICS_TABLE = "company_firmographics"


def _clean_text(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


def build_search_filters(search: CompanyFirmographicsSearch) -> list[Filter]:
    filters: list[Filter] = []
    for column, value in (
        ("company_domain", search.domain),
        ("name", search.name),
        ("industry", search.industry),
        ("country", search.country),
    ):
        cleaned = _clean_text(value)
        if cleaned:
            filters.append(contains(column, cleaned))

    size_range = _clean_text(search.size_range)
    if size_range:
        filters.append(eq("size_range", size_range))
    if search.min_employees is not None:
        filters.append(gte("employee_count", search.min_employees))
    if search.max_employees is not None:
        filters.append(lte("employee_count", search.max_employees))
    if search.founded_after is not None:
        filters.append(gte("founded_year", search.founded_after))
    if search.founded_before is not None:
        filters.append(lte("founded_year", search.founded_before))
    return filters


def search_companies(
    store: StoreClient,
    search: CompanyFirmographicsSearch,
    *,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[dict[str, Any]], int]:
    filters = build_search_filters(search)
    total = store.count(SCHEMA_EXTRACTED, FIRMOGRAPHICS_TABLE, filters)
    rows = store.query(
        SCHEMA_EXTRACTED,
        FIRMOGRAPHICS_TABLE,
        "*",
        filters,
        order="created_at",
        desc=True,
        limit=limit,
        offset=offset,
    )
    return rows, total


def get_company_by_domain(store: StoreClient, domain: str) -> dict[str, Any] | None:
    """Latest firmographics snapshot for an exact domain."""
    return store.first(
        SCHEMA_EXTRACTED,
        FIRMOGRAPHICS_TABLE,
        "*",
        [eq("company_domain", domain.strip())],
        order="created_at",
        desc=True,
    )
