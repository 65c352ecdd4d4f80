import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from jobs.ingest.errors import DateParseError, UpstreamUnavailable

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Error that maps directly onto an HTTP status and the error envelope."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ApiError):
    status_code = 400


class NoDataFound(ApiError):
    status_code = 404


class ServiceUnavailable(ApiError):
    status_code = 503


def error_body(status_code: int, error: str, details: Optional[Any] = None, request: Optional[Request] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "success": False,
        "error": error,
        "statusCode": status_code,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if details is not None:
        body["details"] = details
    if request is not None:
        body["path"] = request.url.path
        body["method"] = request.method
    return body


def error_response(status_code: int, error: str, details: Optional[Any] = None, request: Optional[Request] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=error_body(status_code, error, details, request))


async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
    return error_response(exc.status_code, exc.message, exc.details)


async def handle_date_parse_error(request: Request, exc: DateParseError) -> JSONResponse:
    return error_response(400, "Invalid date format", exc.message)


async def handle_upstream_unavailable(request: Request, exc: UpstreamUnavailable) -> JSONResponse:
    logger.warning("Upstream failure during %s: %s", exc.operation, exc.message)
    return error_response(503, "Google Play Store is unavailable", exc.message)


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("query", "body")]
        problems.append(f"{'.'.join(loc) or 'request'}: {err.get('msg')}")
    return error_response(400, "Invalid request parameters", "; ".join(problems))


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return error_response(404, "Route not found", request=request)
    return error_response(exc.status_code, str(exc.detail), request=request)


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, "Internal server error", request=request)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, handle_api_error)
    app.add_exception_handler(DateParseError, handle_date_parse_error)
    app.add_exception_handler(UpstreamUnavailable, handle_upstream_unavailable)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected)
