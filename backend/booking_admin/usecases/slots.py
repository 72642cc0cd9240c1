import datetime as dt
from typing import Union
from zoneinfo import ZoneInfo

from ..domain.aggregation import DailyOverview, Slot, compute_daily_overview, compute_slots
from ..domain.capacity import DEFAULT_CAPACITY, is_vehicle_based
from ..domain.errors import PackageNotFoundError
from ..domain.repositories import Repositories, TimeslotStore
from ..models import Booking, PackageType, Tour, Transfer
from ..utils.time import MYT, is_slot_time

# Bookings are fetched one day either side and matched locally on the
# business-timezone date, so backend date filtering cannot drop edge bookings.
_FETCH_MARGIN = dt.timedelta(days=1)


async def get_package(repos: Repositories, *, package_id: str, package_type: PackageType) -> Union[Tour, Transfer]:
    package = await repos.catalog.get_package(package_id, package_type)
    if package is None or package.package_type != package_type:
        raise PackageNotFoundError(f"{package_type} {package_id} not found")
    return package


async def fetch_bookings_around(repos: Repositories, day: dt.date, *, package_id: str | None = None) -> list[Booking]:
    return await repos.bookings.list_bookings(
        package_id=package_id,
        start_date=day - _FETCH_MARGIN,
        end_date=day + _FETCH_MARGIN,
    )


async def list_slots(
    repos: Repositories,
    *,
    package_id: str,
    package_type: PackageType,
    date: dt.date,
    tz: ZoneInfo = MYT,
    default_capacity: int = DEFAULT_CAPACITY,
) -> tuple[Union[Tour, Transfer], list[Slot]]:
    package = await get_package(repos, package_id=package_id, package_type=package_type)
    vehicles = await repos.vehicles.list_vehicles() if is_vehicle_based(package) else []
    bookings = await fetch_bookings_around(repos, date, package_id=package.id)
    records = await repos.timeslots.list_records(package_id=package.id, package_type=package_type, date=date)
    blackouts = await repos.blackouts.list_blackouts()
    slots = compute_slots(
        bookings,
        package,
        vehicles,
        date,
        timeslots=records,
        blackouts=blackouts,
        tz=tz,
        default_capacity=default_capacity,
    )
    return package, slots


async def daily_overview(
    repos: Repositories,
    *,
    date: dt.date,
    package_type: PackageType | None = None,
    tz: ZoneInfo = MYT,
    default_capacity: int = DEFAULT_CAPACITY,
) -> DailyOverview:
    packages = await repos.catalog.list_packages(package_type)
    vehicles = await repos.vehicles.list_vehicles()
    bookings = await fetch_bookings_around(repos, date)
    if package_type is not None:
        bookings = [b for b in bookings if b.package_type in (None, package_type)]
    records = {
        package.id: await repos.timeslots.list_records(
            package_id=package.id, package_type=PackageType(package.package_type), date=date
        )
        for package in packages
    }
    blackouts = await repos.blackouts.list_blackouts()
    return compute_daily_overview(
        bookings,
        packages,
        vehicles,
        date,
        timeslots=records,
        blackouts=blackouts,
        tz=tz,
        default_capacity=default_capacity,
    )


async def set_slot_availability(
    timeslots: TimeslotStore,
    *,
    package_id: str,
    package_type: PackageType,
    date: dt.date,
    time: str,
    is_available: bool,
) -> dict:
    if not is_slot_time(time):
        raise ValueError("time must be HH:MM")
    return await timeslots.set_availability(
        package_id=package_id,
        package_type=package_type,
        date=date,
        time=time,
        is_available=is_available,
    )


async def set_slot_minimum_person(
    timeslots: TimeslotStore,
    *,
    package_id: str,
    package_type: PackageType,
    date: dt.date,
    time: str,
    minimum_person: int,
) -> dict:
    if not is_slot_time(time):
        raise ValueError("time must be HH:MM")
    if minimum_person < 1:
        raise ValueError("minimum_person must be >= 1")
    return await timeslots.set_minimum_person(
        package_id=package_id,
        package_type=package_type,
        date=date,
        time=time,
        minimum_person=minimum_person,
    )
