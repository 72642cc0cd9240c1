import logging
from typing import Iterable, Optional, Union

from ..models import Tour, Transfer, Vehicle

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 15


def is_vehicle_based(package: Union[Tour, Transfer]) -> bool:
    """Private transfers with an assigned vehicle are sold per vehicle, not per seat."""
    return isinstance(package, Transfer) and package.is_private and bool((package.vehicle or "").strip())


def find_vehicle(vehicles: Optional[Iterable[Vehicle]], name: str) -> Vehicle | None:
    for vehicle in vehicles or ():
        if vehicle.name == name:
            return vehicle
    return None


def assigned_vehicle(package: Union[Tour, Transfer], vehicles: Optional[Iterable[Vehicle]]) -> Vehicle | None:
    """The registry entry limiting ``package``'s slots, if it is sold per vehicle."""
    if not is_vehicle_based(package):
        return None
    vehicle = find_vehicle(vehicles, package.vehicle or "")
    if vehicle is None:
        logger.debug("vehicle %r for package %s not in registry; using seat capacity", package.vehicle, package.id)
    return vehicle


def resolve_capacity(
    package: Union[Tour, Transfer],
    vehicles: Optional[Iterable[Vehicle]] = None,
    *,
    default: int = DEFAULT_CAPACITY,
) -> int:
    """
    Effective maximum for any slot of ``package``.
    Vehicle units for private transfers, else the package maximum, else ``default``.
    Never raises: unresolved lookups fall through to the next rule.
    """
    vehicle = assigned_vehicle(package, vehicles)
    if vehicle is not None:
        return vehicle.units
    if package.maximum_person is not None:
        return package.maximum_person
    return default
