import pytest

from congestion_tax.errors import CongestionTaxError, InvalidVehicleTypeError
from congestion_tax.tax import vehicles
from congestion_tax.tax.vehicles import (
    DEFAULT_TOLL_FREE_VEHICLES,
    VEHICLE_TYPES,
    VehicleCategory,
    list_vehicle_types,
    resolve_vehicle,
)


def test_registry_contents() -> None:
    assert list_vehicle_types() == [
        "Car",
        "Motorcycle",
        "Tractor",
        "Emergency",
        "Diplomat",
        "Foreign",
        "Military",
    ]
    assert VEHICLE_TYPES == tuple(list_vehicle_types())
    assert "Car" not in DEFAULT_TOLL_FREE_VEHICLES
    assert len(DEFAULT_TOLL_FREE_VEHICLES) == 6


@pytest.mark.parametrize("name", ["Motorcycle", "Tractor", "Emergency", "Diplomat", "Foreign", "Military"])
def test_toll_free_types(name: str) -> None:
    vehicle = resolve_vehicle(name)
    assert vehicle.toll_free
    assert vehicle.category is VehicleCategory.TOLL_FREE


def test_car_is_charged() -> None:
    vehicle = resolve_vehicle(" Car ")
    assert vehicle.vehicle_type == "Car"
    assert not vehicle.toll_free


@pytest.mark.parametrize("name", [None, "", "   "])
def test_blank_vehicle_type(name) -> None:
    with pytest.raises(InvalidVehicleTypeError, match="cannot be null or empty"):
        resolve_vehicle(name)


def test_unknown_vehicle_type_lists_supported() -> None:
    with pytest.raises(InvalidVehicleTypeError) as info:
        resolve_vehicle("Spaceship")
    assert str(info.value).startswith("Unsupported vehicle type: Spaceship. Supported types: Car, Motorcycle")
    assert isinstance(info.value, KeyError)
    assert isinstance(info.value, CongestionTaxError)
    assert info.value.error_code == "INVALID_VEHICLE_TYPE"


def test_lookup_is_case_sensitive() -> None:
    with pytest.raises(InvalidVehicleTypeError):
        resolve_vehicle("car")


def test_toll_free_override() -> None:
    assert resolve_vehicle("Car", toll_free_vehicles={"Car"}).toll_free
    assert not resolve_vehicle("Motorcycle", toll_free_vehicles=()).toll_free


def test_registry_is_read_only() -> None:
    with pytest.raises(TypeError):
        vehicles._REGISTRY["Spaceship"] = VehicleCategory.STANDARD  # type: ignore[index]
    assert not hasattr(vehicles, "register_vehicle_types")
    with pytest.raises(InvalidVehicleTypeError):
        resolve_vehicle("Spaceship")
