from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.config import Settings
from app.database import (
    SCHEMA_CORE,
    SCHEMA_EXTRACTED,
    SCHEMA_REFERENCE,
    StoreClient,
    eq,
    gte,
    is_one_of,
    lte,
    not_null,
)
from app.models.leads import (
    ICP,
    CompanyCriteria,
    CompanyRecord,
    ICPProfile,
    Lead,
    LeadsResponse,
    PersonCriteria,
    PersonRecord,
)
from app.utils.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

ICP_TABLE = "company_icp"
FIRMOGRAPHICS_TABLE = "company_firmographics"
PERSON_PROFILE_TABLE = "person_profile"
COMPANIES_TABLE = "companies"

_ICP_COLUMNS = "slug, domain, company_criteria, person_criteria"
_COMPANY_COLUMNS = "company_domain, name, industry, size_range, employee_count, country"
_COMPANY_DETAIL_COLUMNS = "company_domain, name, industry, size_range"
_PERSON_COLUMNS = (
    "linkedin_url, linkedin_slug, full_name, latest_title, latest_company, latest_company_domain"
)

_ModelT = TypeVar("_ModelT", bound=BaseModel)


@dataclass(frozen=True)
class MatchLimits:
    company_sample: int = 200
    company_scan: int = 500
    person_scan: int = 200
    max_leads: int = 50

    @classmethod
    def from_settings(cls, settings: Settings) -> "MatchLimits":
        return cls(
            company_sample=settings.leads_company_sample_limit,
            company_scan=settings.leads_company_scan_limit,
            person_scan=settings.leads_person_scan_limit,
            max_leads=settings.leads_max_results,
        )


def normalize_slug(slug: str) -> str:
    return slug.lower()


def _validate(model: type[_ModelT], raw: Any, label: str) -> _ModelT:
    try:
        return model.model_validate(raw)
    except PydanticValidationError as exc:
        issues = [
            {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
            for error in exc.errors()
        ]
        raise ValidationError(f"Malformed {label}", details={"issues": issues}) from exc


def _records(model: type[_ModelT], rows: list[dict[str, Any]], table: str) -> list[_ModelT]:
    """Typed records for store rows; rows that do not fit the model are skipped."""
    records: list[_ModelT] = []
    for row in rows:
        try:
            records.append(model.model_validate(row))
        except PydanticValidationError as exc:
            logger.warning(
                "Skipping malformed store row",
                extra={"stage": table, "error": str(exc).splitlines()[0]},
            )
    return records


def parse_company_criteria(raw: dict[str, Any] | None) -> CompanyCriteria | None:
    if raw is None:
        return None
    return _validate(CompanyCriteria, raw, "company_criteria")


def parse_person_criteria(raw: dict[str, Any] | None) -> PersonCriteria | None:
    if raw is None:
        return None
    return _validate(PersonCriteria, raw, "person_criteria")


def resolve_profile(store: StoreClient, slug: str) -> ICPProfile:
    row = store.first(
        SCHEMA_REFERENCE,
        ICP_TABLE,
        _ICP_COLUMNS,
        [eq("slug", normalize_slug(slug))],
    )
    if row is None:
        raise NotFoundError("ICP for slug")
    return _validate(ICPProfile, row, "ICP profile")


def _lowered(terms: list[str]) -> list[str]:
    return [term.lower() for term in terms]


def _company_matches(company: CompanyRecord, criteria: CompanyCriteria) -> bool:
    if criteria.industries:
        industry = (company.industry or "").lower()
        if not any(term in industry for term in _lowered(criteria.industries)):
            return False

    if criteria.size_buckets:
        if (company.size_range or "") not in criteria.size_buckets:
            return False

    if criteria.countries:
        country = (company.country or "").lower()
        if not any(term in country or country in term for term in _lowered(criteria.countries)):
            return False

    return True


def filter_companies(
    store: StoreClient,
    criteria: CompanyCriteria | None,
    limits: MatchLimits = MatchLimits(),
) -> list[str]:
    """
    Candidate company domains for the given criteria.

    Without criteria this samples up to ``limits.company_sample`` domains.
    With criteria, employee bounds are pushed down to the store and the
    remaining criteria are applied in memory to the first
    ``limits.company_scan`` rows only.
    """
    if criteria is None:
        rows = store.query(
            SCHEMA_EXTRACTED,
            FIRMOGRAPHICS_TABLE,
            "company_domain",
            limit=limits.company_sample,
        )
        return [row["company_domain"] for row in rows if row.get("company_domain")]

    filters = []
    if criteria.employee_count_min is not None:
        filters.append(gte("employee_count", criteria.employee_count_min))
    if criteria.employee_count_max is not None:
        filters.append(lte("employee_count", criteria.employee_count_max))

    rows = store.query(
        SCHEMA_EXTRACTED,
        FIRMOGRAPHICS_TABLE,
        _COMPANY_COLUMNS,
        filters,
        limit=limits.company_scan,
    )
    companies = _records(CompanyRecord, rows, FIRMOGRAPHICS_TABLE)
    return [
        company.company_domain
        for company in companies
        if company.company_domain and _company_matches(company, criteria)
    ]


def _title_matches(title: str | None, criteria: PersonCriteria | None) -> bool:
    if criteria is None:
        return True

    lowered = (title or "").lower()
    for terms in (criteria.title_contains_any, criteria.title_contains_all):
        if terms and not any(term in lowered for term in _lowered(terms)):
            return False
    return True


def _company_details(store: StoreClient, domains: list[str]) -> dict[str, CompanyRecord]:
    if not domains:
        return {}
    rows = store.query(
        SCHEMA_EXTRACTED,
        FIRMOGRAPHICS_TABLE,
        _COMPANY_DETAIL_COLUMNS,
        [is_one_of("company_domain", domains)],
    )
    details: dict[str, CompanyRecord] = {}
    for company in _records(CompanyRecord, rows, FIRMOGRAPHICS_TABLE):
        if company.company_domain:
            details[company.company_domain] = company
    return details


def _to_lead(person: PersonRecord, company: CompanyRecord | None) -> Lead:
    return Lead(
        linkedin_url=person.linkedin_url,
        linkedin_slug=person.linkedin_slug,
        full_name=person.full_name,
        title=person.latest_title,
        company_name=person.latest_company or (company.name if company else None),
        company_domain=person.latest_company_domain,
        company_industry=company.industry if company else None,
        company_size=company.size_range if company else None,
        # Customer-history enrichment is not computed yet.
        is_worked_at_customer=False,
        worked_at_customer_company=None,
    )


def filter_people(
    store: StoreClient,
    domains: list[str],
    criteria: PersonCriteria | None,
    limits: MatchLimits = MatchLimits(),
) -> list[Lead]:
    if not domains:
        return []

    rows = store.query(
        SCHEMA_EXTRACTED,
        PERSON_PROFILE_TABLE,
        _PERSON_COLUMNS,
        [is_one_of("latest_company_domain", domains), not_null("latest_title")],
        order="full_name",
        limit=limits.person_scan,
    )
    people = _records(PersonRecord, rows, PERSON_PROFILE_TABLE)

    people_domains: list[str] = []
    for person in people:
        domain = person.latest_company_domain
        if domain and domain not in people_domains:
            people_domains.append(domain)
    details = _company_details(store, people_domains)

    matched = [person for person in people if _title_matches(person.latest_title, criteria)]
    return [
        _to_lead(person, details.get(person.latest_company_domain or ""))
        for person in matched[: limits.max_leads]
    ]


def lookup_company_name(store: StoreClient, domain: str | None) -> str | None:
    if not domain:
        return None
    row = store.first(SCHEMA_CORE, COMPANIES_TABLE, "name", [eq("domain", domain)])
    if row is None:
        return None
    return row.get("name")


def match_candidates(
    store: StoreClient,
    company_criteria: CompanyCriteria | None,
    person_criteria: PersonCriteria | None,
    limits: MatchLimits = MatchLimits(),
) -> tuple[list[str], list[Lead]]:
    domains = filter_companies(store, company_criteria, limits)
    if not domains:
        return domains, []
    return domains, filter_people(store, domains, person_criteria, limits)


async def get_leads(store: StoreClient, slug: str, settings: Settings) -> LeadsResponse:
    normalized_slug = normalize_slug(slug)
    profile = await asyncio.to_thread(resolve_profile, store, normalized_slug)

    company_criteria = parse_company_criteria(profile.company_criteria)
    person_criteria = parse_person_criteria(profile.person_criteria)
    limits = MatchLimits.from_settings(settings)

    (domains, leads), owner_name = await asyncio.gather(
        asyncio.to_thread(match_candidates, store, company_criteria, person_criteria, limits),
        asyncio.to_thread(lookup_company_name, store, profile.domain),
    )
    logger.info(
        "Matched ICP leads",
        extra={
            "slug": normalized_slug,
            "stage": "candidates",
            "count": len(leads),
            "domains": len(domains),
        },
    )
    if not domains and not settings.leads_resolve_owner_when_empty:
        owner_name = None

    return LeadsResponse(
        slug=normalized_slug,
        domain=profile.domain,
        company_name=owner_name,
        icp=ICP(
            company_criteria=profile.company_criteria,
            person_criteria=profile.person_criteria,
        ),
        leads=leads,
        total_leads=len(leads),
    )
