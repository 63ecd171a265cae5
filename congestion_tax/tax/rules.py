from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Mapping

from congestion_tax.config import Settings, get_settings
from congestion_tax.tax import gothenburg2013
from congestion_tax.tax.calendar import TollFreeCalendar
from congestion_tax.tax.schedule import FeeSchedule
from congestion_tax.tax.vehicles import DEFAULT_TOLL_FREE_VEHICLES, VEHICLE_TYPES, Vehicle, resolve_vehicle

logger = logging.getLogger("congestion_tax")


@dataclass(frozen=True)
class TaxRules:
    """Read-only rule set shared by every calculation."""

    schedule: FeeSchedule
    calendar: TollFreeCalendar
    max_daily_tax: int = gothenburg2013.MAX_DAILY_TAX
    single_charge_interval_minutes: int = gothenburg2013.SINGLE_CHARGE_INTERVAL_MINUTES
    toll_free_vehicles: frozenset[str] = DEFAULT_TOLL_FREE_VEHICLES
    currency: str = gothenburg2013.CURRENCY

    @property
    def vehicle_types(self) -> tuple[str, ...]:
        return VEHICLE_TYPES

    def is_valid_vehicle_type(self, vehicle_type: str) -> bool:
        return vehicle_type in VEHICLE_TYPES

    def is_toll_free_vehicle(self, vehicle_type: str) -> bool:
        return vehicle_type in self.toll_free_vehicles

    def resolve_vehicle(self, vehicle_type: str | None) -> Vehicle:
        return resolve_vehicle(vehicle_type, toll_free_vehicles=self.toll_free_vehicles)


def default_tax_rules() -> TaxRules:
    return TaxRules(schedule=gothenburg2013.SCHEDULE_2013, calendar=gothenburg2013.CALENDAR_2013)


def _year_table(raw: object, key: str, path: Path) -> dict[int, tuple[str, ...]]:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"'{key}' in holiday file {path} must map years to MM-DD lists")
    return {int(year): tuple(str(day) for day in days) for year, days in raw.items()}


def load_holiday_file(path: str | Path) -> tuple[dict[int, tuple[str, ...]], dict[int, tuple[str, ...]]]:
    """Read ``{"holidays": {...}, "daysBeforeHolidays": {...}}`` keyed by year."""
    source = Path(path)
    try:
        payload = json.loads(source.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ValueError(f"Cannot load holiday file {source}: {exc}") from exc
    if not isinstance(payload, Mapping):
        raise ValueError(f"Holiday file {source} must contain a JSON object")
    holidays = _year_table(payload.get("holidays"), "holidays", source)
    days_before = _year_table(payload.get("daysBeforeHolidays"), "daysBeforeHolidays", source)
    return holidays, days_before


def build_tax_rules(settings: Settings) -> TaxRules:
    base = gothenburg2013.CALENDAR_2013
    holidays: dict[int, frozenset[str]] = dict(base.holidays)
    days_before: dict[int, frozenset[str]] = dict(base.days_before_holidays)
    if settings.holiday_file:
        extra_holidays, extra_days_before = load_holiday_file(settings.holiday_file)
        holidays.update({year: frozenset(days) for year, days in extra_holidays.items()})
        days_before.update({year: frozenset(days) for year, days in extra_days_before.items()})
        logger.info(
            "Loaded holiday overrides from %s for years %s",
            settings.holiday_file,
            sorted(set(extra_holidays) | set(extra_days_before)),
        )
    calendar = TollFreeCalendar(
        holidays=holidays,
        days_before_holidays=days_before,
        toll_free_months=frozenset(settings.toll_free_months),
    )
    return TaxRules(
        schedule=gothenburg2013.SCHEDULE_2013,
        calendar=calendar,
        max_daily_tax=settings.max_daily_tax,
        single_charge_interval_minutes=settings.single_charge_interval_minutes,
        toll_free_vehicles=frozenset(settings.toll_free_vehicles),
        currency=settings.currency,
    )


@lru_cache(maxsize=1)
def get_tax_rules() -> TaxRules:
    return build_tax_rules(get_settings())
