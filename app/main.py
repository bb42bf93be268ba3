# app/main.py - FastAPI app entry point

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import get_settings
from app.database import StoreClient, StoreError
from app.logging_setup import init_logging
from app.routers import companies, health, leads
from app.routers._responses import error_response
from app.utils.exceptions import ApiError

logger = logging.getLogger(__name__)

_STATUS_CODES = {
    400: "BAD_REQUEST",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    init_logging(settings.log_level)
    app.state.store = StoreClient.from_settings(settings)
    logger.info("Store client ready", extra={"stage": "startup"})
    yield


app = FastAPI(
    title="hq-leads-api",
    description="Read API for company/person enrichment data and ICP lead matching",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(ApiError)
async def api_error_handler(_: Request, exc: ApiError):
    return error_response(exc.code, str(exc.detail), exc.status_code, exc.details)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(_: Request, exc: StarletteHTTPException):
    code = _STATUS_CODES.get(exc.status_code, "HTTP_ERROR")
    return error_response(code, str(exc.detail), exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_: Request, exc: RequestValidationError):
    issues = [
        {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]
    return error_response("VALIDATION_ERROR", "Invalid request data", 422, {"issues": issues})


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error(
        "Store failure while handling request",
        exc_info=exc,
        extra={"stage": request.url.path, "error": str(exc)},
    )
    details = None
    if not get_settings().is_production:
        details = {"reason": str(exc), "table": f"{exc.schema}.{exc.table}"}
    return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500, details)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled server error", extra={"stage": request.url.path, "error": str(exc)})
    return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500)


# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(leads.router, prefix="/api/leads", tags=["leads"])
app.include_router(companies.router, prefix="/api/companies", tags=["companies"])
