from __future__ import annotations

import os
from functools import lru_cache
from typing import Callable, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from congestion_tax.tax.vehicles import DEFAULT_TOLL_FREE_VEHICLES, VEHICLE_TYPES

T = TypeVar("T")

_DEFAULT_TOLL_FREE = ",".join(name for name in VEHICLE_TYPES if name in DEFAULT_TOLL_FREE_VEHICLES)


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return int(value)


def _env_list(name: str, default: str, cast: Callable[[str], T]) -> tuple[T, ...]:
    raw = os.getenv(name, default)
    return tuple(cast(item.strip()) for item in raw.split(",") if item.strip())


class Settings(BaseModel):
    max_daily_tax: int = Field(default_factory=lambda: _env_int("CONGESTION_MAX_DAILY_TAX", 60))
    single_charge_interval_minutes: int = Field(
        default_factory=lambda: _env_int("CONGESTION_SINGLE_CHARGE_MINUTES", 60)
    )
    toll_free_months: tuple[int, ...] = Field(
        default_factory=lambda: _env_list("CONGESTION_TOLL_FREE_MONTHS", "7", int)
    )
    toll_free_vehicles: tuple[str, ...] = Field(
        default_factory=lambda: _env_list("CONGESTION_TOLL_FREE_VEHICLES", _DEFAULT_TOLL_FREE, str)
    )
    max_passages_per_request: int = Field(default_factory=lambda: _env_int("CONGESTION_MAX_PASSAGES", 100))
    max_days_span: int = Field(default_factory=lambda: _env_int("CONGESTION_MAX_DAYS_SPAN", 7))
    holiday_file: str | None = Field(default_factory=lambda: os.getenv("CONGESTION_HOLIDAY_FILE") or None)
    currency: str = Field(default_factory=lambda: os.getenv("CONGESTION_CURRENCY", "SEK"))
    build_version: str = Field(default_factory=lambda: os.getenv("BUILD_VERSION", "dev"))
    build_sha: str = Field(default_factory=lambda: os.getenv("BUILD_SHA", "local"))

    model_config = ConfigDict(frozen=True)

    @field_validator("max_daily_tax", "single_charge_interval_minutes")
    @classmethod
    def _validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("daily maximum and single charge interval must be positive")
        return value

    @field_validator("max_passages_per_request", "max_days_span")
    @classmethod
    def _validate_limits(cls, value: int) -> int:
        return max(1, value)

    @field_validator("toll_free_months")
    @classmethod
    def _validate_months(cls, value: tuple[int, ...]) -> tuple[int, ...]:
        for month in value:
            if not 1 <= month <= 12:
                raise ValueError(f"CONGESTION_TOLL_FREE_MONTHS entries must be 1-12, got {month}")
        return value

    @field_validator("toll_free_vehicles")
    @classmethod
    def _validate_vehicles(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        unknown = [name for name in value if name not in VEHICLE_TYPES]
        if unknown:
            raise ValueError(f"Unknown toll-free vehicle types: {', '.join(unknown)}")
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
