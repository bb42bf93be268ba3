# app/utils/pagination.py - Pagination helpers

from pydantic import BaseModel, Field


class PaginationParams(BaseModel):
    limit: int = Field(default=20, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


class PaginationMeta(BaseModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class PaginatedResponse(BaseModel):
    data: list
    pagination: PaginationMeta

    @classmethod
    def create(
        cls,
        data: list,
        total: int,
        pagination: PaginationParams,
    ) -> "PaginatedResponse":
        return cls(
            data=data,
            pagination=PaginationMeta(
                total=total,
                limit=pagination.limit,
                offset=pagination.offset,
                has_more=total > pagination.offset + pagination.limit,
            ),
        )
