"""Map pipeline failures onto HTTP responses.

Only the closed set of public messages is ever returned; the details stay in
the logs.
"""
import logging
from http import HTTPStatus
from typing import Dict, List, Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic.alias_generators import to_camel
from starlette.exceptions import HTTPException as StarletteHTTPException
from sillywalk.api.deps import client_ip, get_request_id
from sillywalk.db.schemas import ErrorResponse, FieldErrorOut
from sillywalk.logging_config import security_logger
from sillywalk.services.domain import utcnow
from sillywalk.services.errors import (
    DUPLICATE, INVALID_REQUEST_DATA, SECURITY_VIOLATION, UNEXPECTED, VALIDATION_FAILURE,
    SecurityViolation, SubmissionError, ValidationFailure,
)

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    SECURITY_VIOLATION: 400,
    VALIDATION_FAILURE: 400,
    DUPLICATE: 409,
    UNEXPECTED: 500,
}
ERROR_TITLES = {
    SECURITY_VIOLATION: "Bad Request",
    VALIDATION_FAILURE: "Validation Failed",
    DUPLICATE: "Conflict",
    UNEXPECTED: "Internal Server Error",
}


def error_response(request: Request, status: int, error: str, message: str,
                   field_errors: Optional[List[FieldErrorOut]] = None,
                   headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    request_id = get_request_id(request)
    body = ErrorResponse(
        timestamp=utcnow(),
        status=status,
        error=error,
        message=message,
        path=request.url.path,
        request_id=request_id,
        field_errors=field_errors,
    )
    return JSONResponse(
        status_code=status,
        content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
        headers={**(headers or {}), "X-Request-ID": request_id},
    )


async def handle_submission_error(request: Request, exc: SubmissionError) -> JSONResponse:
    request_id = get_request_id(request)
    ip = client_ip(request)
    if isinstance(exc, SecurityViolation):
        security_logger.error(
            "SECURITY_VIOLATION - RequestID: %s, IP: %s, URI: %s, Type: %s",
            request_id, ip, request.url.path, exc.subtype,
        )
    elif exc.kind == UNEXPECTED:
        logger.error("INTERNAL_ERROR - RequestID: %s, IP: %s, URI: %s, Error: %s",
                     request_id, ip, request.url.path, exc.__class__.__name__)
    else:
        logger.warning("%s - RequestID: %s, IP: %s, URI: %s, Message: %s",
                       exc.kind, request_id, ip, request.url.path, exc)

    field_errors = None
    if isinstance(exc, ValidationFailure) and exc.field_errors:
        field_errors = [FieldErrorOut(field=to_camel(v.field), message=v.message) for v in exc.field_errors]
    return error_response(request, STATUS_BY_KIND[exc.kind], ERROR_TITLES[exc.kind], exc.public_message, field_errors)


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("METHOD_ARGUMENT_NOT_VALID - RequestID: %s, IP: %s, URI: %s, Errors: %d",
                   get_request_id(request), client_ip(request), request.url.path, len(exc.errors()))
    # loc is e.g. ("body", "numberOfTwirls"); the raw input is never echoed
    fields = []
    for err in exc.errors():
        name = str(err.get("loc", ("body",))[-1])
        if name not in fields:
            fields.append(name)
    field_errors = [FieldErrorOut(field=f, message="Invalid value") for f in fields]
    return error_response(request, STATUS_BY_KIND[VALIDATION_FAILURE], ERROR_TITLES[VALIDATION_FAILURE],
                          INVALID_REQUEST_DATA, field_errors)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # routing misses and explicit 404s from the routers
    logger.info("HTTP_%d - RequestID: %s, IP: %s, URI: %s",
                exc.status_code, get_request_id(request), client_ip(request), request.url.path)
    return error_response(request, exc.status_code, HTTPStatus(exc.status_code).phrase, str(exc.detail),
                          headers=getattr(exc, "headers", None))


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("INTERNAL_ERROR - RequestID: %s, IP: %s, URI: %s, Exception: %s",
                     get_request_id(request), client_ip(request), request.url.path, exc.__class__.__name__)
    return error_response(request, STATUS_BY_KIND[UNEXPECTED], ERROR_TITLES[UNEXPECTED],
                          "An unexpected error occurred")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SubmissionError, handle_submission_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected)
