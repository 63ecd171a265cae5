from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime


@dataclass(frozen=True)
class PassageCalculation:
    passage_time: datetime
    individual_fee: int
    # the single-charge rule is only applied to the day total, so this equals individual_fee
    effective_fee: int
    toll_free_day: bool
    included_in_total: bool
    reason: str


@dataclass(frozen=True)
class DailyTaxSummary:
    date: date
    daily_tax: int
    passage_count: int
    toll_free_day: bool
    reason: str


@dataclass(frozen=True)
class TaxCalculationResult:
    vehicle_type: str
    total_tax: int
    toll_free_vehicle: bool
    daily_summaries: tuple[DailyTaxSummary, ...]
    passage_calculations: tuple[PassageCalculation, ...]
