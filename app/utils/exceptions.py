# app/utils/exceptions.py - Custom exception classes

from typing import Any

from fastapi import HTTPException, status


class ApiError(HTTPException):
    code: str = "ERROR"

    def __init__(self, status_code: int, message: str, details: dict[str, Any] | None = None):
        super().__init__(status_code=status_code, detail=message)
        self.details = details


class NotFoundError(ApiError):
    code = "NOT_FOUND"

    def __init__(self, resource: str):
        super().__init__(status.HTTP_404_NOT_FOUND, f"{resource} not found")


class ValidationError(ApiError):
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(status.HTTP_422_UNPROCESSABLE_ENTITY, message, details)


class BadRequestError(ApiError):
    code = "BAD_REQUEST"

    def __init__(self, message: str):
        super().__init__(status.HTTP_400_BAD_REQUEST, message)
