"""
Exception handlers producing the uniform error envelope:

    {"success": false, "error": {"code": ..., "message": ..., "details"?: [...]}}
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError as FastAPIRequestValidationError
from fastapi.responses import JSONResponse

from ..api.validators import violations_from_errors
from ..core.errors import AccountAbstractionError, ApiError, RequestValidationError

logger = logging.getLogger(__name__)


def error_response(
    status_code: int,
    code: str,
    message: str,
    details: Optional[List[Dict[str, str]]] = None,
) -> JSONResponse:
    error: Dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    logger.error(
        "Request failed code=%s path=%s method=%s: %s",
        exc.code,
        request.url.path,
        request.method,
        exc.message,
        exc_info=exc,
    )
    return error_response(exc.status_code, exc.code, exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Rejected request code=%s path=%s violations=%s", exc.code, request.url.path, exc.details)
    return error_response(400, exc.code, exc.message, exc.details)


async def body_parse_error_handler(
    request: Request, exc: FastAPIRequestValidationError
) -> JSONResponse:
    details = violations_from_errors(exc.errors(), strip_prefix=("body", "path", "query"))
    logger.info("Rejected unparseable request path=%s violations=%s", request.url.path, details)
    return error_response(400, "INVALID_REQUEST", "Invalid request", details)


async def domain_error_handler(request: Request, exc: AccountAbstractionError) -> JSONResponse:
    logger.error("Unhandled domain error path=%s: %s", request.url.path, exc.message, exc_info=exc)
    return error_response(400, "BAD_REQUEST", exc.message)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error path=%s method=%s", request.url.path, request.method, exc_info=exc)
    return error_response(500, "INTERNAL_SERVER_ERROR", "An unexpected error occurred")


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(FastAPIRequestValidationError, body_parse_error_handler)
    app.add_exception_handler(AccountAbstractionError, domain_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
