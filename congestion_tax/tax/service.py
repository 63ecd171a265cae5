from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, datetime
from typing import Any, Iterable

from congestion_tax.tax.calculator import CongestionTaxCalculator
from congestion_tax.tax.results import DailyTaxSummary, PassageCalculation, TaxCalculationResult
from congestion_tax.tax.rules import TaxRules, get_tax_rules
from congestion_tax.tax.vehicles import Vehicle

logger = logging.getLogger("congestion_tax")

TOLL_FREE_VEHICLE_REASON = "Toll-free vehicle type"
TOLL_FREE_DAY_REASON = "Toll-free day (weekend/holiday/July)"
REGULAR_DAY_REASON = "Regular toll day"
OUTSIDE_TOLL_HOURS_REASON = "Outside toll hours (18:30-05:59)"


def group_by_day(passage_times: Iterable[datetime]) -> dict[date, list[datetime]]:
    """Passages per calendar date, days ascending and times ascending within a day."""
    grouped: dict[date, list[datetime]] = defaultdict(list)
    for passage in passage_times:
        grouped[passage.date()].append(passage)
    return {day: sorted(grouped[day]) for day in sorted(grouped)}


def _day_reason(toll_free_vehicle: bool, toll_free_day: bool) -> str:
    if toll_free_vehicle:
        return TOLL_FREE_VEHICLE_REASON
    if toll_free_day:
        return TOLL_FREE_DAY_REASON
    return REGULAR_DAY_REASON


def _passage_reason(vehicle: Vehicle, fee: int, toll_free_day: bool) -> str:
    if vehicle.toll_free:
        return f"{TOLL_FREE_VEHICLE_REASON}: {vehicle.vehicle_type}"
    if toll_free_day:
        return TOLL_FREE_DAY_REASON
    if fee == 0:
        return OUTSIDE_TOLL_HOURS_REASON
    return f"Regular toll period - {fee} SEK"


class CongestionTaxService:
    def __init__(self, rules: TaxRules, calculator: CongestionTaxCalculator | None = None) -> None:
        self.rules = rules
        self.calculator = calculator or CongestionTaxCalculator(rules)

    def calculate_tax(self, vehicle_type: str | None, passage_times: Iterable[datetime] | None) -> TaxCalculationResult:
        vehicle = self.rules.resolve_vehicle(vehicle_type)
        passages = list(passage_times or [])
        logger.debug("Calculating tax for vehicle type %s with %s passages", vehicle.vehicle_type, len(passages))

        daily_summaries: list[DailyTaxSummary] = []
        passage_calculations: list[PassageCalculation] = []
        total_tax = 0
        for day, day_passages in group_by_day(passages).items():
            daily_tax = self.calculator.daily_tax(vehicle, day_passages)
            passage_calculations.extend(self._passage_calculations(vehicle, day_passages))
            # zero tax on a day with passages reads as toll-free even when only the hours were free
            toll_free_day = daily_tax == 0 and not vehicle.toll_free and bool(day_passages)
            daily_summaries.append(
                DailyTaxSummary(
                    date=day,
                    daily_tax=daily_tax,
                    passage_count=len(day_passages),
                    toll_free_day=toll_free_day,
                    reason=_day_reason(vehicle.toll_free, toll_free_day),
                )
            )
            total_tax += daily_tax
            logger.debug("Daily tax for %s: %s %s", day, daily_tax, self.rules.currency)

        logger.debug("Total tax across %s days: %s %s", len(daily_summaries), total_tax, self.rules.currency)
        return TaxCalculationResult(
            vehicle_type=vehicle.vehicle_type,
            total_tax=total_tax,
            toll_free_vehicle=vehicle.toll_free,
            daily_summaries=tuple(daily_summaries),
            passage_calculations=tuple(passage_calculations),
        )

    def _passage_calculations(self, vehicle: Vehicle, passages: list[datetime]) -> list[PassageCalculation]:
        calculations: list[PassageCalculation] = []
        for passage in passages:
            fee = 0 if vehicle.toll_free else self.calculator.toll_fee(passage, vehicle)
            toll_free_day = self.calculator.is_toll_free_date(passage)
            calculations.append(
                PassageCalculation(
                    passage_time=passage,
                    individual_fee=fee,
                    effective_fee=fee,
                    toll_free_day=toll_free_day,
                    included_in_total=fee > 0,
                    reason=_passage_reason(vehicle, fee, toll_free_day),
                )
            )
        return calculations

    def toll_schedule(self) -> dict[str, Any]:
        return {
            "timeSlots": [
                {"timeRange": time_range, "amount": amount}
                for time_range, amount in self.rules.schedule.time_ranges()
            ],
            "maxDailyAmount": self.rules.max_daily_tax,
            "singleChargeIntervalMinutes": self.rules.single_charge_interval_minutes,
            "currency": self.rules.currency,
            "tollFreeMonths": sorted(self.rules.calendar.toll_free_months),
            "tollFreeVehicles": [name for name in self.rules.vehicle_types if self.rules.is_toll_free_vehicle(name)],
            "tollFreeDays": "Weekends, public holidays, days before public holidays and toll-free months",
            "calendarYears": list(self.rules.calendar.covered_years),
        }

    def supported_vehicle_types(self) -> list[str]:
        return list(self.rules.vehicle_types)


def calculate_tax(
    vehicle_type: str | None,
    passage_times: Iterable[datetime] | None,
    *,
    rules: TaxRules | None = None,
) -> TaxCalculationResult:
    return CongestionTaxService(rules or get_tax_rules()).calculate_tax(vehicle_type, passage_times)
