from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from congestion_tax.core.models import ErrorResponse
from congestion_tax.errors import (
    CongestionTaxError,
    InvalidPassageTimesError,
    InvalidVehicleTypeError,
    RequestValidationFailed,
)

logger = logging.getLogger("congestion_tax")

DATE_FORMAT_MESSAGE = "Invalid date format. Use ISO format: 2013-02-07T06:23:27"
_DATE_ERROR_TYPES = {
    "datetime_parsing",
    "datetime_from_date_parsing",
    "datetime_type",
    "timezone_naive",
    "value_error",
}


def error_response(code: str, message: str, status: int, details: dict[str, Any] | None = None) -> JSONResponse:
    body = ErrorResponse(error_code=code, message=message, http_status=status, details=details or {})
    return JSONResponse(status_code=status, content=body.model_dump(mode="json", by_alias=True))


def _field_name(loc: tuple[Any, ...]) -> str:
    parts = [str(part) for part in loc[1:] if not isinstance(part, int)] or [str(part) for part in loc]
    return ".".join(parts)


async def _handle_invalid_vehicle_type(_: Request, exc: InvalidVehicleTypeError) -> JSONResponse:
    logger.warning("Invalid vehicle type: %s", exc)
    return error_response(exc.error_code, str(exc), 400)


async def _handle_invalid_passage_times(_: Request, exc: InvalidPassageTimesError) -> JSONResponse:
    logger.warning("Invalid date format: %s", exc)
    return error_response(exc.error_code, str(exc), 400)


async def _handle_validation_failed(_: Request, exc: RequestValidationFailed) -> JSONResponse:
    logger.warning("Tax calculation request rejected: %s", exc)
    details: dict[str, Any] = {}
    for issue in exc.issues:
        key = issue.field or "request"
        details[key] = f"{details[key]}; {issue.message}" if key in details else issue.message
    return error_response(exc.error_code, str(exc), 400, details)


async def _handle_tax_error(_: Request, exc: CongestionTaxError) -> JSONResponse:
    logger.warning("Congestion tax error: %s", exc)
    return error_response(exc.error_code, str(exc), 400)


async def _handle_request_validation(_: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    logger.warning("Validation error: %s", errors)

    for error in errors:
        if error.get("type") == "json_invalid":
            return error_response("MALFORMED_REQUEST", "Invalid JSON format", 400)
    for error in errors:
        loc = tuple(error.get("loc", ()))
        if error.get("type") == "missing" and loc and loc[0] == "query":
            name = _field_name(loc)
            return error_response("MISSING_PARAMETER", f"Required parameter '{name}' is missing", 400)
    for error in errors:
        loc = tuple(error.get("loc", ()))
        if "passageTimes" in loc and error.get("type") in _DATE_ERROR_TYPES:
            return error_response("INVALID_DATE_FORMAT", DATE_FORMAT_MESSAGE, 400)

    field_errors: dict[str, Any] = {}
    for error in errors:
        field_errors.setdefault(_field_name(tuple(error.get("loc", ()))), error.get("msg", "Invalid value"))
    message = "Validation failed: " + ", ".join(f"{key} - {value}" for key, value in field_errors.items())
    return error_response("VALIDATION_ERROR", message, 400, field_errors)


async def _handle_unexpected(_: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unexpected error occurred", exc_info=exc)
    return error_response("INTERNAL_SERVER_ERROR", "An unexpected error occurred. Please try again later.", 500)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InvalidVehicleTypeError, _handle_invalid_vehicle_type)
    app.add_exception_handler(InvalidPassageTimesError, _handle_invalid_passage_times)
    app.add_exception_handler(RequestValidationFailed, _handle_validation_failed)
    app.add_exception_handler(CongestionTaxError, _handle_tax_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
    app.add_exception_handler(Exception, _handle_unexpected)
