import pytest
from pydantic import ValidationError

from congestion_tax.config import Settings, get_settings


def test_defaults() -> None:
    settings = Settings()
    assert settings.max_daily_tax == 60
    assert settings.single_charge_interval_minutes == 60
    assert settings.toll_free_months == (7,)
    assert settings.max_passages_per_request == 100
    assert settings.max_days_span == 7
    assert settings.holiday_file is None
    assert settings.currency == "SEK"
    assert "Car" not in settings.toll_free_vehicles
    assert "Motorcycle" in settings.toll_free_vehicles


def test_env_overrides(monkeypatch) -> None:
    monkeypatch.setenv("CONGESTION_MAX_DAILY_TAX", "75")
    monkeypatch.setenv("CONGESTION_SINGLE_CHARGE_MINUTES", "30")
    monkeypatch.setenv("CONGESTION_TOLL_FREE_MONTHS", "6, 7")
    monkeypatch.setenv("CONGESTION_TOLL_FREE_VEHICLES", "Emergency,Diplomat")
    monkeypatch.setenv("CONGESTION_MAX_PASSAGES", "0")
    monkeypatch.setenv("BUILD_VERSION", "1.2.3")
    settings = get_settings()
    assert settings.max_daily_tax == 75
    assert settings.single_charge_interval_minutes == 30
    assert settings.toll_free_months == (6, 7)
    assert settings.toll_free_vehicles == ("Emergency", "Diplomat")
    assert settings.max_passages_per_request == 1
    assert settings.build_version == "1.2.3"
    assert get_settings() is settings


def test_blank_env_falls_back(monkeypatch) -> None:
    monkeypatch.setenv("CONGESTION_MAX_DAILY_TAX", " ")
    assert Settings().max_daily_tax == 60


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("CONGESTION_MAX_DAILY_TAX", "0"),
        ("CONGESTION_SINGLE_CHARGE_MINUTES", "-5"),
        ("CONGESTION_TOLL_FREE_MONTHS", "13"),
        ("CONGESTION_TOLL_FREE_VEHICLES", "Spaceship"),
    ],
)
def test_invalid_env_rejected(monkeypatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(ValidationError):
        Settings()


def test_settings_are_frozen() -> None:
    settings = Settings()
    with pytest.raises(ValidationError):
        settings.max_daily_tax = 10  # type: ignore[misc]
