from __future__ import annotations

import datetime as dt
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Sequence, Union
from zoneinfo import ZoneInfo

from ..models import BlackoutDate, Booking, PackageType, TimeslotRecord, Tour, Transfer, Vehicle
from ..utils.time import MYT, to_civil_date
from .capacity import DEFAULT_CAPACITY, assigned_vehicle, resolve_capacity
from .errors import MalformedInputError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Slot:
    package_id: str
    package_type: PackageType
    date: dt.date
    time: str
    capacity: int
    booked_count: int
    is_available: bool
    minimum_person: int
    per_vehicle: bool = False

    @property
    def available_units(self) -> int:
        return max(0, self.capacity - self.booked_count)

    @property
    def is_first_booking(self) -> bool:
        return self.booked_count == 0


@dataclass(frozen=True)
class PackageDay:
    package: Union[Tour, Transfer]
    slots: tuple[Slot, ...]

    @property
    def booked_count(self) -> int:
        return sum(slot.booked_count for slot in self.slots)


@dataclass(frozen=True)
class DailyOverview:
    date: dt.date
    packages: tuple[PackageDay, ...]
    skipped_bookings: int = 0

    def booked_for(self, package_type: PackageType) -> int:
        return sum(day.booked_count for day in self.packages if day.package.package_type == package_type)


def coerce_date(value: Any, tz: ZoneInfo = MYT) -> dt.date:
    civil = to_civil_date(value, tz)
    if civil is None:
        raise MalformedInputError(f"invalid date: {value!r}")
    return civil


def bookings_on(bookings: Iterable[Booking], day: dt.date, tz: ZoneInfo = MYT) -> list[Booking]:
    return [b for b in bookings if to_civil_date(b.date, tz) == day]


def compute_slots(
    bookings: Iterable[Booking],
    package: Union[Tour, Transfer],
    vehicles: Optional[Iterable[Vehicle]],
    date: Union[dt.date, str],
    *,
    timeslots: Iterable[TimeslotRecord] = (),
    blackouts: Iterable[BlackoutDate] = (),
    tz: ZoneInfo = MYT,
    default_capacity: int = DEFAULT_CAPACITY,
) -> list[Slot]:
    """
    Per-time occupancy of ``package`` on ``date``.

    Bookings are matched on the civil date in ``tz``; scheduled times without
    bookings appear with zero occupancy. Stored timeslot records override
    availability and the first-booking minimum; a blackout closes every slot.
    """
    day = coerce_date(date, tz)
    vehicle_list = list(vehicles or ())
    capacity = resolve_capacity(package, vehicle_list, default=default_capacity)
    per_vehicle = assigned_vehicle(package, vehicle_list) is not None

    booked: dict[str, int] = defaultdict(int)
    for booking in bookings_on(bookings, day, tz):
        if not booking.package_id or booking.package_id != package.id or not booking.time:
            continue
        booked[booking.time] += booking.occupancy

    records = {record.time: record for record in timeslots}
    blacked_out = any(b.date == day and b.applies_to(package.package_type) for b in blackouts)

    slots: list[Slot] = []
    for time in sorted(set(package.schedule) | set(booked)):
        record = records.get(time)
        is_available = record.is_available if record is not None else True
        minimum = record.minimum_person if record is not None and record.minimum_person else package.minimum_person
        slots.append(
            Slot(
                package_id=package.id,
                package_type=PackageType(package.package_type),
                date=day,
                time=time,
                capacity=capacity,
                booked_count=booked.get(time, 0),
                is_available=is_available and not blacked_out,
                minimum_person=minimum,
                per_vehicle=per_vehicle,
            )
        )
    return slots


def compute_daily_overview(
    bookings: Iterable[Booking],
    packages: Sequence[Union[Tour, Transfer]],
    vehicles: Optional[Iterable[Vehicle]],
    date: Union[dt.date, str],
    *,
    timeslots: Optional[Mapping[str, Iterable[TimeslotRecord]]] = None,
    blackouts: Iterable[BlackoutDate] = (),
    tz: ZoneInfo = MYT,
    default_capacity: int = DEFAULT_CAPACITY,
) -> DailyOverview:
    """Slots of every catalog package on ``date``.

    Packages missing from the catalog still appear when their bookings carry
    the package document; bookings resolvable by neither route are skipped.
    """
    day = coerce_date(date, tz)
    vehicle_list = list(vehicles or ())
    blackout_list = list(blackouts)
    day_bookings = bookings_on(bookings, day, tz)

    resolved: dict[str, Union[Tour, Transfer]] = {p.id: p for p in packages}
    skipped = 0
    for booking in day_bookings:
        if booking.package_id and booking.package_id in resolved:
            continue
        if booking.package_id and booking.embedded_package is not None:
            resolved[booking.package_id] = booking.embedded_package
            continue
        skipped += 1
        logger.warning("skipping booking %s: package %s cannot be resolved", booking.id, booking.package_id)

    days = tuple(
        PackageDay(
            package=package,
            slots=tuple(
                compute_slots(
                    day_bookings,
                    package,
                    vehicle_list,
                    day,
                    timeslots=(timeslots or {}).get(package.id, ()),
                    blackouts=blackout_list,
                    tz=tz,
                    default_capacity=default_capacity,
                )
            ),
        )
        for package in resolved.values()
    )
    return DailyOverview(date=day, packages=days, skipped_bookings=skipped)
