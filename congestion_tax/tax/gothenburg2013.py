from __future__ import annotations

from congestion_tax.tax.calendar import TollFreeCalendar
from congestion_tax.tax.schedule import FeeSchedule

CALENDAR_YEAR = 2013
CURRENCY = "SEK"
MAX_DAILY_TAX = 60
SINGLE_CHARGE_INTERVAL_MINUTES = 60
TOLL_FREE_MONTHS = (7,)

TIME_SLOTS_2013: dict[str, int] = {
    "06:00-06:29": 8,
    "06:30-06:59": 13,
    "07:00-07:59": 18,
    "08:00-08:29": 13,
    "08:30-14:59": 8,
    "15:00-15:29": 13,
    "15:30-16:59": 18,
    "17:00-17:59": 13,
    "18:00-18:29": 8,
    "18:30-05:59": 0,
}

HOLIDAYS_2013 = (
    "01-01",  # New Year's Day
    "03-29",  # Good Friday
    "04-01",  # Easter Monday
    "05-01",  # Labour Day
    "05-09",  # Ascension Day
    "06-06",  # National Day
    "06-21",  # Midsummer Eve
    "11-01",  # All Saints' Day
    "12-24",  # Christmas Eve
    "12-25",  # Christmas Day
    "12-26",  # Boxing Day
    "12-31",  # New Year's Eve
)

DAYS_BEFORE_HOLIDAYS_2013 = (
    "03-28",
    "04-30",
    "05-08",
    "06-05",
)

SCHEDULE_2013 = FeeSchedule.from_time_ranges(TIME_SLOTS_2013)

CALENDAR_2013 = TollFreeCalendar(
    holidays={CALENDAR_YEAR: HOLIDAYS_2013},
    days_before_holidays={CALENDAR_YEAR: DAYS_BEFORE_HOLIDAYS_2013},
    toll_free_months=frozenset(TOLL_FREE_MONTHS),
)
