from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping

from congestion_tax.errors import InvalidVehicleTypeError


class VehicleCategory(str, Enum):
    STANDARD = "standard"
    TOLL_FREE = "toll_free"


@dataclass(frozen=True)
class Vehicle:
    vehicle_type: str
    category: VehicleCategory

    @property
    def toll_free(self) -> bool:
        return self.category is VehicleCategory.TOLL_FREE


_REGISTRY: Mapping[str, VehicleCategory] = MappingProxyType(
    {
        "Car": VehicleCategory.STANDARD,
        "Motorcycle": VehicleCategory.TOLL_FREE,
        "Tractor": VehicleCategory.TOLL_FREE,
        "Emergency": VehicleCategory.TOLL_FREE,
        "Diplomat": VehicleCategory.TOLL_FREE,
        "Foreign": VehicleCategory.TOLL_FREE,
        "Military": VehicleCategory.TOLL_FREE,
    }
)

VEHICLE_TYPES: tuple[str, ...] = tuple(_REGISTRY)
DEFAULT_TOLL_FREE_VEHICLES: frozenset[str] = frozenset(
    vehicle_type for vehicle_type, category in _REGISTRY.items() if category is VehicleCategory.TOLL_FREE
)


def list_vehicle_types() -> list[str]:
    return list(_REGISTRY)


def resolve_vehicle(
    vehicle_type: str | None,
    *,
    toll_free_vehicles: Iterable[str] | None = None,
) -> Vehicle:
    """Map a vehicle type identifier onto its category.

    ``toll_free_vehicles`` overrides the registry's own categories, which is
    how configured rules exempt a different set of types.
    """
    name = (vehicle_type or "").strip()
    if not name:
        raise InvalidVehicleTypeError("Vehicle type cannot be null or empty")
    try:
        category = _REGISTRY[name]
    except KeyError as exc:
        supported = ", ".join(_REGISTRY)
        raise InvalidVehicleTypeError(
            f"Unsupported vehicle type: {name}. Supported types: {supported}"
        ) from exc
    if toll_free_vehicles is not None:
        exempt = name in set(toll_free_vehicles)
        category = VehicleCategory.TOLL_FREE if exempt else VehicleCategory.STANDARD
    return Vehicle(vehicle_type=name, category=category)
