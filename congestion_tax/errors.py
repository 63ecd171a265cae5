"""Errors raised by the congestion tax engine and request validation."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from congestion_tax.core.validate.request import ValidationIssue


class CongestionTaxError(Exception):
    """Base exception for the package."""

    error_code = "CONGESTION_TAX_ERROR"


class InvalidVehicleTypeError(CongestionTaxError, KeyError):
    """Raised when a vehicle type identifier is blank or not supported."""

    error_code = "INVALID_VEHICLE_TYPE"

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class InvalidPassageTimesError(CongestionTaxError, ValueError):
    """Raised when passage times are missing or cannot be parsed."""

    error_code = "INVALID_DATE_FORMAT"


class RequestValidationFailed(CongestionTaxError):
    """Raised with every issue found while validating a calculation request."""

    error_code = "VALIDATION_ERROR"

    def __init__(self, issues: list["ValidationIssue"]):
        self.issues = issues
        super().__init__("; ".join(issue.message for issue in issues) or "Invalid request")
        if issues:
            self.error_code = issues[0].code
