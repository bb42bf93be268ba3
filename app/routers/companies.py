# app/routers/companies.py - Company firmographics search and lookup

import asyncio

from fastapi import APIRouter, Depends, Query

from app.database import StoreClient, get_store
from app.models.company import CompanyFirmographicsSearch
from app.routers._responses import ErrorEnvelope
from app.services.company_firmographics import get_company_by_domain, search_companies
from app.utils.exceptions import BadRequestError, NotFoundError
from app.utils.pagination import PaginatedResponse, PaginationParams

router = APIRouter()


@router.get(
    "",
    response_model=PaginatedResponse,
    responses={400: {"model": ErrorEnvelope}, 422: {"model": ErrorEnvelope}},
)
async def list_companies(
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    domain: str | None = None,
    name: str | None = None,
    industry: str | None = None,
    country: str | None = None,
    size_range: str | None = None,
    min_employees: int | None = Query(default=None, ge=0),
    max_employees: int | None = Query(default=None, ge=0),
    founded_after: int | None = None,
    founded_before: int | None = None,
    store: StoreClient = Depends(get_store),
):
    """Search enriched company firmographics."""
    if (
        min_employees is not None
        and max_employees is not None
        and min_employees > max_employees
    ):
        raise BadRequestError("min_employees must not exceed max_employees")

    pagination = PaginationParams(limit=limit, offset=offset)
    search = CompanyFirmographicsSearch(
        domain=domain,
        name=name,
        industry=industry,
        country=country,
        size_range=size_range,
        min_employees=min_employees,
        max_employees=max_employees,
        founded_after=founded_after,
        founded_before=founded_before,
    )
    rows, total = await asyncio.to_thread(
        search_companies,
        store,
        search,
        limit=pagination.limit,
        offset=pagination.offset,
    )
    return PaginatedResponse.create(data=rows, total=total, pagination=pagination)


@router.get(
    "/firmo/{domain}",
    responses={404: {"model": ErrorEnvelope}},
)
async def get_company(
    domain: str,
    store: StoreClient = Depends(get_store),
):
    """Get a single enriched company by domain."""
    company = await asyncio.to_thread(get_company_by_domain, store, domain)
    if company is None:
        raise NotFoundError("Company")
    return company
