from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Mapping

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class TimeSlot:
    """Half-open ``[start_minute, end_minute)`` range of the day with its fee."""

    start_minute: int
    end_minute: int
    fee: int

    def contains(self, minute: int) -> bool:
        return self.start_minute <= minute < self.end_minute


def minute_of_day(value: time | datetime) -> int:
    return value.hour * 60 + value.minute


def format_minute(minute: int) -> str:
    return f"{minute // 60:02d}:{minute % 60:02d}"


def _parse_clock(text: str) -> int:
    hours, _, minutes = text.strip().partition(":")
    hour, minute = int(hours), int(minutes)
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"Invalid time of day {text!r}")
    return hour * 60 + minute


@dataclass(frozen=True)
class FeeSchedule:
    slots: tuple[TimeSlot, ...]
    _starts: tuple[int, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        ordered = tuple(sorted(self.slots, key=lambda slot: slot.start_minute))
        cursor = 0
        for slot in ordered:
            if slot.fee < 0:
                raise ValueError(f"Negative fee {slot.fee} at {format_minute(slot.start_minute)}")
            if slot.end_minute <= slot.start_minute:
                raise ValueError(f"Empty time slot starting {format_minute(slot.start_minute)}")
            if slot.start_minute < cursor:
                raise ValueError(f"Time slots overlap at {format_minute(slot.start_minute)}")
            if slot.start_minute > cursor:
                raise ValueError(
                    f"Time slots leave a gap between {format_minute(cursor)} and {format_minute(slot.start_minute)}"
                )
            cursor = slot.end_minute
        if cursor != MINUTES_PER_DAY:
            raise ValueError(f"Time slots end at {format_minute(cursor)} instead of covering the full day")
        object.__setattr__(self, "slots", ordered)
        object.__setattr__(self, "_starts", tuple(slot.start_minute for slot in ordered))

    @classmethod
    def from_time_ranges(cls, ranges: Mapping[str, int]) -> "FeeSchedule":
        """Build a schedule from ``"HH:MM-HH:MM"`` keys with inclusive end minutes.

        A range whose end is earlier than its start wraps past midnight and is
        split in two.
        """
        slots: list[TimeSlot] = []
        for label, fee in ranges.items():
            start_text, sep, end_text = label.partition("-")
            if not sep:
                raise ValueError(f"Time range {label!r} must look like HH:MM-HH:MM")
            start = _parse_clock(start_text)
            end = _parse_clock(end_text) + 1
            if end > start:
                slots.append(TimeSlot(start, end, fee))
            else:
                slots.append(TimeSlot(start, MINUTES_PER_DAY, fee))
                if end > 0:
                    slots.append(TimeSlot(0, end, fee))
        return cls(tuple(slots))

    def slot_for(self, value: time | datetime) -> TimeSlot:
        index = bisect_right(self._starts, minute_of_day(value)) - 1
        return self.slots[index]

    def fee_at(self, value: time | datetime) -> int:
        return self.slot_for(value).fee

    @property
    def fees(self) -> frozenset[int]:
        return frozenset(slot.fee for slot in self.slots)

    def time_ranges(self) -> list[tuple[str, int]]:
        # the last and first slots are shown as one overnight row when they share a fee
        slots = list(self.slots)
        overnight: tuple[int, int, int] | None = None
        if len(slots) > 1 and slots[0].fee == slots[-1].fee:
            overnight = (slots[-1].start_minute, slots[0].end_minute, slots[0].fee)
            slots = slots[1:-1]
        rows = [
            (f"{format_minute(slot.start_minute)}-{format_minute(slot.end_minute - 1)}", slot.fee)
            for slot in slots
        ]
        if overnight is not None:
            start, end, fee = overnight
            rows.append((f"{format_minute(start)}-{format_minute(end - 1)}", fee))
        return rows
