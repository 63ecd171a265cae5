from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from congestion_tax.tax.rules import TaxRules
from congestion_tax.tax.vehicles import Vehicle

logger = logging.getLogger("congestion_tax")


@dataclass(frozen=True)
class ChargeInterval:
    """Passages charged once, all within the window of the first one."""

    start: datetime
    passages: tuple[datetime, ...]
    fee: int


def whole_minutes_between(earlier: datetime, later: datetime) -> int:
    seconds = (later - earlier).total_seconds()
    return int(seconds / 60)


class CongestionTaxCalculator:
    def __init__(self, rules: TaxRules) -> None:
        self.rules = rules

    def is_toll_free_date(self, passage: datetime) -> bool:
        return self.rules.calendar.is_toll_free_date(passage)

    def toll_fee(self, passage: datetime, vehicle: Vehicle) -> int:
        if vehicle.toll_free or self.is_toll_free_date(passage):
            return 0
        return self.rules.schedule.fee_at(passage)

    def charge_intervals(self, vehicle: Vehicle, passages: Sequence[datetime]) -> list[ChargeInterval]:
        """Group one day's passages into single-charge intervals.

        The window is measured from the first passage of the open interval and
        does not slide: a passage more than the window after that anchor opens
        a new interval even if the previous passage was close to it.
        """
        if not passages:
            return []
        ordered = sorted(passages)
        window = self.rules.single_charge_interval_minutes
        intervals: list[ChargeInterval] = []

        anchor = ordered[0]
        members: list[datetime] = []
        current_max = self.toll_fee(anchor, vehicle)
        for passage in ordered:
            fee = self.toll_fee(passage, vehicle)
            if whole_minutes_between(anchor, passage) <= window:
                current_max = max(current_max, fee)
                members.append(passage)
                continue
            intervals.append(ChargeInterval(anchor, tuple(members), current_max))
            anchor = passage
            members = [passage]
            current_max = fee
        intervals.append(ChargeInterval(anchor, tuple(members), current_max))
        return intervals

    def daily_tax(self, vehicle: Vehicle, passages: Sequence[datetime]) -> int:
        """Total tax for passages that all fall on one calendar day, capped at the daily maximum."""
        if not passages:
            logger.debug("No passages provided for tax calculation")
            return 0
        if vehicle.toll_free:
            logger.debug("Vehicle type %s is toll-free", vehicle.vehicle_type)
            return 0

        intervals = self.charge_intervals(vehicle, passages)
        total = sum(interval.fee for interval in intervals)
        capped = min(total, self.rules.max_daily_tax)
        logger.debug(
            "Tax for %s passages in %s intervals: %s before cap, %s after",
            len(passages),
            len(intervals),
            total,
            capped,
        )
        return capped
