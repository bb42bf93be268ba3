# app/config.py - Pydantic settings (env vars)

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Supabase
    supabase_url: str
    supabase_service_key: str

    # Runtime
    environment: str = "production"
    log_level: str = "info"

    # Lead matching bounds
    leads_company_sample_limit: int = Field(default=200, ge=1)
    leads_company_scan_limit: int = Field(default=500, ge=1)
    leads_person_scan_limit: int = Field(default=200, ge=1)
    leads_max_results: int = Field(default=50, ge=1)
    leads_resolve_owner_when_empty: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    @field_validator("supabase_url", "supabase_service_key")
    @classmethod
    def _validate_supabase_credentials(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_KEY must be set and non-empty")
        return cleaned

    @field_validator("environment", "log_level")
    @classmethod
    def _normalize_label(cls, value: str) -> str:
        return value.strip().lower()

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()
