from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from types import MappingProxyType
from typing import Iterable, Mapping

logger = logging.getLogger("congestion_tax")

SATURDAY = 5
SUNDAY = 6
WEEKEND_DAYS = frozenset({SATURDAY, SUNDAY})


def date_key(value: date) -> str:
    return f"{value.month:02d}-{value.day:02d}"


def _freeze(table: Mapping[int | str, Iterable[str]]) -> Mapping[int, frozenset[str]]:
    return MappingProxyType({int(year): frozenset(days) for year, days in table.items()})


@dataclass(frozen=True, eq=False)
class TollFreeCalendar:
    """Dates on which no congestion tax is charged.

    Weekends and the toll-free months apply to every year. Holidays and the
    days before them are keyed by year and ``"MM-DD"``; a year missing from the
    tables simply has no holidays.
    """

    holidays: Mapping[int, frozenset[str]]
    days_before_holidays: Mapping[int, frozenset[str]] = field(default_factory=dict)
    toll_free_months: frozenset[int] = frozenset({7})
    weekend_days: frozenset[int] = WEEKEND_DAYS

    def __post_init__(self) -> None:
        object.__setattr__(self, "holidays", _freeze(self.holidays))
        object.__setattr__(self, "days_before_holidays", _freeze(self.days_before_holidays))
        object.__setattr__(self, "toll_free_months", frozenset(self.toll_free_months))
        object.__setattr__(self, "weekend_days", frozenset(self.weekend_days))

    @property
    def covered_years(self) -> tuple[int, ...]:
        return tuple(sorted(set(self.holidays) | set(self.days_before_holidays)))

    def holidays_for_year(self, year: int) -> frozenset[str]:
        return self.holidays.get(year, frozenset())

    def days_before_holidays_for_year(self, year: int) -> frozenset[str]:
        return self.days_before_holidays.get(year, frozenset())

    def is_weekend(self, value: date) -> bool:
        return value.weekday() in self.weekend_days

    def is_toll_free_month(self, month: int) -> bool:
        return month in self.toll_free_months

    def is_holiday(self, value: date) -> bool:
        return date_key(value) in self.holidays_for_year(value.year)

    def is_day_before_holiday(self, value: date) -> bool:
        return date_key(value) in self.days_before_holidays_for_year(value.year)

    def is_toll_free_date(self, value: date | datetime) -> bool:
        day = value.date() if isinstance(value, datetime) else value
        if self.is_weekend(day):
            logger.debug("Weekend date: %s", day)
            return True
        if self.is_toll_free_month(day.month):
            logger.debug("Toll-free month: %s", day.month)
            return True
        if self.is_holiday(day) or self.is_day_before_holiday(day):
            logger.debug("Holiday or day before holiday: %s", day)
            return True
        return False
