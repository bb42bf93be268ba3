# app/models/leads.py - ICP criteria, lead and response schemas

from typing import Any

from pydantic import BaseModel, ConfigDict


class CompanyCriteria(BaseModel):
    model_config = ConfigDict(extra="ignore")

    industries: list[str] | None = None
    size_buckets: list[str] | None = None
    countries: list[str] | None = None
    employee_count_min: int | None = None
    employee_count_max: int | None = None
    # Accepted for compatibility with stored profiles; not applied.
    founded_min: int | None = None
    founded_max: int | None = None


class PersonCriteria(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title_contains_any: list[str] | None = None
    # Matched with OR semantics, same as title_contains_any.
    title_contains_all: list[str] | None = None
    # Accepted for compatibility with stored profiles; not applied.
    seniority: list[str] | None = None


class ICPProfile(BaseModel):
    slug: str
    domain: str
    company_criteria: dict[str, Any] | None = None
    person_criteria: dict[str, Any] | None = None


class CompanyRecord(BaseModel):
    company_domain: str | None = None
    name: str | None = None
    industry: str | None = None
    size_range: str | None = None
    employee_count: int | None = None
    country: str | None = None


class PersonRecord(BaseModel):
    linkedin_url: str | None = None
    linkedin_slug: str | None = None
    full_name: str | None = None
    latest_title: str | None = None
    latest_company: str | None = None
    latest_company_domain: str | None = None


class Lead(BaseModel):
    linkedin_url: str | None = None
    linkedin_slug: str | None = None
    full_name: str | None = None
    title: str | None = None
    company_name: str | None = None
    company_domain: str | None = None
    company_industry: str | None = None
    company_size: str | None = None
    is_worked_at_customer: bool = False
    worked_at_customer_company: str | None = None


class ICP(BaseModel):
    company_criteria: dict[str, Any] | None = None
    person_criteria: dict[str, Any] | None = None


class LeadsResponse(BaseModel):
    slug: str
    domain: str
    company_name: str | None = None
    icp: ICP
    leads: list[Lead]
    total_leads: int
