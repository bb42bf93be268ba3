# app/models/company.py - Company firmographics schemas

from pydantic import BaseModel, Field


class CompanyFirmographicsSearch(BaseModel):
    domain: str | None = None
    name: str | None = None
    industry: str | None = None
    country: str | None = None
    size_range: str | None = None
    min_employees: int | None = Field(default=None, ge=0)
    max_employees: int | None = Field(default=None, ge=0)
    founded_after: int | None = None
    founded_before: int | None = None
