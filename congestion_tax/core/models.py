from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, NaiveDatetime, field_validator
from pydantic.alias_generators import to_camel

from congestion_tax.core.validate.request import parse_passage_time
from congestion_tax.errors import InvalidPassageTimesError
from congestion_tax.tax.results import TaxCalculationResult
from congestion_tax.tax.vehicles import VEHICLE_TYPES

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _parse_item(item: Any) -> Any:
    if isinstance(item, str):
        return parse_passage_time(item)
    if isinstance(item, datetime):
        return item
    raise InvalidPassageTimesError(
        f"Invalid date format '{item}'. Use ISO format: 2013-02-07T06:23:27"
    )


class TaxCalculationRequest(BaseModel):
    vehicle_type: str = Field(..., description="One of: " + ", ".join(VEHICLE_TYPES))
    passage_times: list[NaiveDatetime] = Field(..., min_length=1, description="Passage timestamps, yyyy-MM-ddTHH:mm:ss")

    model_config = _CAMEL

    @field_validator("vehicle_type")
    @classmethod
    def _known_vehicle_type(cls, value: str) -> str:
        if value.strip() not in VEHICLE_TYPES:
            raise ValueError(f"Vehicle type must be one of: {', '.join(VEHICLE_TYPES)}")
        return value.strip()

    @field_validator("passage_times", mode="before")
    @classmethod
    def _parse_passage_times(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [_parse_item(item) for item in value]
        return value


class PassageDetail(BaseModel):
    passage_time: datetime
    individual_fee: int
    toll_free_day: bool
    reason: str

    model_config = _CAMEL


class DailyTaxSummaryInfo(BaseModel):
    day: date = Field(..., alias="date")
    daily_tax: int
    passage_count: int
    toll_free_day: bool
    reason: str

    model_config = _CAMEL


class TaxCalculationResponse(BaseModel):
    vehicle_type: str
    total_tax: int
    toll_free_vehicle: bool
    passage_details: list[PassageDetail]
    daily_tax_summaries: list[DailyTaxSummaryInfo]
    calculated_at: datetime

    model_config = _CAMEL

    @classmethod
    def from_result(cls, result: TaxCalculationResult, calculated_at: datetime | None = None) -> "TaxCalculationResponse":
        return cls(
            vehicle_type=result.vehicle_type,
            total_tax=result.total_tax,
            toll_free_vehicle=result.toll_free_vehicle,
            passage_details=[
                PassageDetail(
                    passage_time=item.passage_time,
                    individual_fee=item.individual_fee,
                    toll_free_day=item.toll_free_day,
                    reason=item.reason,
                )
                for item in result.passage_calculations
            ],
            daily_tax_summaries=[
                DailyTaxSummaryInfo(
                    day=summary.date,
                    daily_tax=summary.daily_tax,
                    passage_count=summary.passage_count,
                    toll_free_day=summary.toll_free_day,
                    reason=summary.reason,
                )
                for summary in result.daily_summaries
            ],
            calculated_at=calculated_at or datetime.now(),
        )


class ErrorResponse(BaseModel):
    error_code: str
    message: str
    timestamp: datetime = Field(default_factory=datetime.now)
    http_status: int
    details: dict[str, Any] = Field(default_factory=dict)

    model_config = _CAMEL
