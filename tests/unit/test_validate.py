import logging
from datetime import datetime, timedelta, timezone

import pytest

from congestion_tax.config import Settings
from congestion_tax.core.validate.request import (
    INVALID_DATE_FORMAT,
    INVALID_VEHICLE_TYPE,
    parse_passage_time,
    parse_passage_times,
    raise_for_issues,
    validate_calculation_request,
)
from congestion_tax.errors import InvalidPassageTimesError, RequestValidationFailed

NOW = datetime(2013, 6, 1, 12, 0)


def _codes(issues):
    return [issue.code for issue in issues]


def test_parse_passage_time_accepts_t_and_space() -> None:
    assert parse_passage_time("2013-02-07T06:23:27") == datetime(2013, 2, 7, 6, 23, 27)
    assert parse_passage_time(" 2013-02-07 06:23:27 ") == datetime(2013, 2, 7, 6, 23, 27)


@pytest.mark.parametrize(
    "value",
    [
        "invalid-date",
        "2013-13-01T06:00:00",
        "",
        "07/02/2013 06:00",
        "2013-02-07",
        "2013-02-07T06:23:27.500",
        "20130207T062327",
        "2013-02-07T06:23:27Z",
        "2013-02-07T06:23:27+01:00",
    ],
)
def test_parse_passage_time_rejects(value: str) -> None:
    with pytest.raises(InvalidPassageTimesError, match="Use ISO format: 2013-02-07T06:23:27"):
        parse_passage_time(value)


def test_parse_passage_time_without_seconds() -> None:
    assert parse_passage_time("2013-02-07T06:23") == datetime(2013, 2, 7, 6, 23)


def test_parse_passage_times_comma_list() -> None:
    parsed = parse_passage_times("2013-02-07T06:23:27, 2013-02-08T15:29:00,")
    assert parsed == [datetime(2013, 2, 7, 6, 23, 27), datetime(2013, 2, 8, 15, 29)]


def test_valid_request_has_no_issues(rules) -> None:
    issues = validate_calculation_request(
        "Car", [datetime(2013, 2, 7, 6, 0)], rules=rules, settings=Settings(), now=NOW
    )
    assert issues == []
    raise_for_issues(issues)


@pytest.mark.parametrize("vehicle_type", [None, "", "  "])
def test_blank_vehicle_type(rules, vehicle_type) -> None:
    issues = validate_calculation_request(vehicle_type, [datetime(2013, 2, 7, 6, 0)], rules=rules, now=NOW)
    assert _codes(issues) == [INVALID_VEHICLE_TYPE]
    assert issues[0].message == "Vehicle type cannot be null or empty"
    assert issues[0].field == "vehicleType"


def test_unknown_vehicle_type(rules) -> None:
    issues = validate_calculation_request("Spaceship", [datetime(2013, 2, 7, 6, 0)], rules=rules, now=NOW)
    assert _codes(issues) == [INVALID_VEHICLE_TYPE]
    assert issues[0].message.startswith("Invalid vehicle type 'Spaceship'. Supported types: Car")


@pytest.mark.parametrize("passages", [None, []])
def test_passages_required(rules, passages) -> None:
    issues = validate_calculation_request("Car", passages, rules=rules, now=NOW)
    assert _codes(issues) == [INVALID_DATE_FORMAT]
    assert issues[0].message == "At least one passage time is required"


def test_too_many_passages(rules) -> None:
    settings = Settings(max_passages_per_request=3)
    passages = [datetime(2013, 2, 7, 6, minute) for minute in range(4)]
    issues = validate_calculation_request("Car", passages, rules=rules, settings=settings, now=NOW)
    assert [issue.message for issue in issues] == ["Too many passage times. Maximum allowed: 3"]


def test_null_passage(rules) -> None:
    issues = validate_calculation_request("Car", [datetime(2013, 2, 7, 6, 0), None], rules=rules, now=NOW)
    assert [issue.message for issue in issues] == ["Passage times cannot contain null values"]


def test_span_limit_counts_calendar_days(rules) -> None:
    start = datetime(2013, 2, 1, 23, 59)
    within = validate_calculation_request("Car", [start, datetime(2013, 2, 8, 0, 1)], rules=rules, now=NOW)
    assert within == []
    beyond = validate_calculation_request("Car", [start, datetime(2013, 2, 9, 0, 1)], rules=rules, now=NOW)
    assert _codes(beyond) == [INVALID_DATE_FORMAT]
    assert beyond[0].message == "Passage times span too many days (8). Maximum allowed: 7 days"


def test_issues_accumulate(rules) -> None:
    issues = validate_calculation_request(
        "", [datetime(2013, 2, 1, 6, 0), datetime(2013, 3, 1, 6, 0)], rules=rules, now=NOW
    )
    assert _codes(issues) == [INVALID_VEHICLE_TYPE, INVALID_DATE_FORMAT]
    with pytest.raises(RequestValidationFailed) as info:
        raise_for_issues(issues)
    assert info.value.error_code == INVALID_VEHICLE_TYPE
    assert "Vehicle type cannot be null or empty" in str(info.value)
    assert len(info.value.issues) == 2


def test_far_future_and_uncovered_years_only_warn(rules, caplog) -> None:
    caplog.set_level(logging.WARNING, logger="congestion_tax")
    future = NOW + timedelta(days=800)
    issues = validate_calculation_request("Car", [future], rules=rules, now=NOW)
    assert issues == []
    messages = " ".join(record.getMessage() for record in caplog.records)
    assert "more than 1 year in the future" in messages
    assert "outside the holiday calendar years" in messages


def test_leap_day_now(rules, caplog) -> None:
    caplog.set_level(logging.WARNING, logger="congestion_tax")
    issues = validate_calculation_request(
        "Car", [datetime(2013, 2, 7, 6, 0)], rules=rules, now=datetime(2012, 2, 29, 12, 0)
    )
    assert issues == []
    assert "future" not in " ".join(record.getMessage() for record in caplog.records)


def test_timezone_aware_passages_are_rejected(rules) -> None:
    passages = [datetime(2013, 2, 7, 6, 0), datetime(2013, 2, 7, 7, 0, tzinfo=timezone.utc)]
    issues = validate_calculation_request("Car", passages, rules=rules, now=NOW)
    assert _codes(issues) == [INVALID_DATE_FORMAT]
    assert issues[0].message == "Passage times must be local times without a timezone offset"
