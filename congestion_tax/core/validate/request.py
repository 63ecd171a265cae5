from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from congestion_tax.config import Settings, get_settings
from congestion_tax.errors import InvalidPassageTimesError, RequestValidationFailed
from congestion_tax.tax.rules import TaxRules, get_tax_rules

logger = logging.getLogger("congestion_tax")

INVALID_VEHICLE_TYPE = "INVALID_VEHICLE_TYPE"
INVALID_DATE_FORMAT = "INVALID_DATE_FORMAT"

_LOCAL_DATE_TIME = re.compile(r"\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}(:\d{2})?")


@dataclass
class ValidationIssue:
    code: str
    message: str
    field: Optional[str] = None
    severity: str = "error"


def parse_passage_time(value: str) -> datetime:
    """Parse ``2013-02-07T06:23:27`` or ``2013-02-07 06:23:27`` as a local time.

    Seconds are optional. Bare dates, fractional seconds, compact forms and
    timezone offsets are rejected.
    """
    text = (value or "").strip()
    message = f"Invalid date format '{text}'. Use ISO format: 2013-02-07T06:23:27"
    if not _LOCAL_DATE_TIME.fullmatch(text):
        raise InvalidPassageTimesError(message)
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise InvalidPassageTimesError(message) from exc


def parse_passage_times(values: str) -> list[datetime]:
    return [parse_passage_time(item) for item in values.split(",") if item.strip()]


def _validate_vehicle_type(vehicle_type: str | None, rules: TaxRules) -> list[ValidationIssue]:
    name = (vehicle_type or "").strip()
    if not name:
        return [ValidationIssue(INVALID_VEHICLE_TYPE, "Vehicle type cannot be null or empty", field="vehicleType")]
    if not rules.is_valid_vehicle_type(name):
        supported = ", ".join(rules.vehicle_types)
        return [
            ValidationIssue(
                INVALID_VEHICLE_TYPE,
                f"Invalid vehicle type '{name}'. Supported types: {supported}",
                field="vehicleType",
            )
        ]
    return []


def _validate_passage_times(
    passage_times: list[datetime | None],
    settings: Settings,
) -> list[ValidationIssue]:
    if not passage_times:
        return [ValidationIssue(INVALID_DATE_FORMAT, "At least one passage time is required", field="passageTimes")]
    issues: list[ValidationIssue] = []
    if len(passage_times) > settings.max_passages_per_request:
        issues.append(
            ValidationIssue(
                INVALID_DATE_FORMAT,
                f"Too many passage times. Maximum allowed: {settings.max_passages_per_request}",
                field="passageTimes",
            )
        )
    if any(item is None for item in passage_times):
        issues.append(
            ValidationIssue(INVALID_DATE_FORMAT, "Passage times cannot contain null values", field="passageTimes")
        )
        return issues
    if any(item.tzinfo is not None for item in passage_times):
        issues.append(
            ValidationIssue(
                INVALID_DATE_FORMAT,
                "Passage times must be local times without a timezone offset",
                field="passageTimes",
            )
        )
        return issues
    earliest = min(passage_times).date()
    latest = max(passage_times).date()
    days_between = (latest - earliest).days
    if days_between > settings.max_days_span:
        issues.append(
            ValidationIssue(
                INVALID_DATE_FORMAT,
                f"Passage times span too many days ({days_between}). Maximum allowed: {settings.max_days_span} days",
                field="passageTimes",
            )
        )
    return issues


def _warn_on_unusual_dates(passage_times: list[datetime], rules: TaxRules, now: datetime) -> None:
    try:
        max_future = now.replace(year=now.year + 1)
    except ValueError:  # 29 February
        max_future = now.replace(year=now.year + 1, day=28)
    if any(item > max_future for item in passage_times):
        logger.warning("Request contains dates more than 1 year in the future")
    covered = set(rules.calendar.covered_years)
    outside = sorted({item.year for item in passage_times} - covered)
    if outside:
        logger.warning(
            "Request contains dates in %s, outside the holiday calendar years %s; only weekend and month rules apply",
            outside,
            sorted(covered),
        )


def validate_calculation_request(
    vehicle_type: str | None,
    passage_times: Iterable[datetime | None] | None,
    *,
    rules: TaxRules | None = None,
    settings: Settings | None = None,
    now: datetime | None = None,
) -> list[ValidationIssue]:
    resolved_rules = rules or get_tax_rules()
    resolved_settings = settings or get_settings()
    times = list(passage_times or [])

    issues = _validate_vehicle_type(vehicle_type, resolved_rules)
    issues.extend(_validate_passage_times(times, resolved_settings))
    if not issues:
        _warn_on_unusual_dates(times, resolved_rules, now or datetime.now())
    return issues


def raise_for_issues(issues: list[ValidationIssue]) -> None:
    if issues:
        raise RequestValidationFailed(issues)
