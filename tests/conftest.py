import pathlib
import sys

import pytest

ROOT = str(pathlib.Path(__file__).resolve().parents[1])
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from congestion_tax.config import get_settings
from congestion_tax.tax.calculator import CongestionTaxCalculator
from congestion_tax.tax.rules import default_tax_rules, get_tax_rules
from congestion_tax.tax.service import CongestionTaxService
from congestion_tax.tax.vehicles import resolve_vehicle


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    get_tax_rules.cache_clear()
    yield
    get_settings.cache_clear()
    get_tax_rules.cache_clear()


@pytest.fixture
def rules():
    return default_tax_rules()


@pytest.fixture
def calculator(rules):
    return CongestionTaxCalculator(rules)


@pytest.fixture
def service(rules):
    return CongestionTaxService(rules)


@pytest.fixture
def car():
    return resolve_vehicle("Car")


@pytest.fixture
def motorcycle():
    return resolve_vehicle("Motorcycle")
