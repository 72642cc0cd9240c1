from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any, Protocol, Union

from ..models import BlackoutDate, Booking, PackageType, TimeslotRecord, Tour, Transfer, Vehicle


class PackageCatalog(Protocol):
    async def list_packages(self, package_type: PackageType | None = None) -> list[Union[Tour, Transfer]]: ...

    async def get_package(self, package_id: str, package_type: PackageType | None = None) -> Union[Tour, Transfer] | None: ...


class VehicleRegistry(Protocol):
    async def list_vehicles(self) -> list[Vehicle]: ...


class BookingStore(Protocol):
    async def list_bookings(
        self,
        *,
        package_id: str | None = None,
        package_type: PackageType | None = None,
        date: dt.date | None = None,
        time: str | None = None,
        status: str | None = None,
        start_date: dt.date | None = None,
        end_date: dt.date | None = None,
    ) -> list[Booking]: ...

    async def create(self, payload: dict[str, Any]) -> Booking: ...

    async def delete(self, booking_id: str) -> None: ...


class TimeslotStore(Protocol):
    async def list_records(self, *, package_id: str, package_type: PackageType, date: dt.date) -> list[TimeslotRecord]: ...

    async def set_availability(
        self,
        *,
        package_id: str,
        package_type: PackageType,
        date: dt.date,
        time: str,
        is_available: bool,
    ) -> dict[str, Any]: ...

    async def set_minimum_person(
        self,
        *,
        package_id: str,
        package_type: PackageType,
        date: dt.date,
        time: str,
        minimum_person: int,
    ) -> dict[str, Any]: ...


class BlackoutStore(Protocol):
    async def list_blackouts(self) -> list[BlackoutDate]: ...

    async def create(self, *, date: dt.date, package_type: str, description: str | None) -> BlackoutDate: ...

    async def delete(self, blackout_id: str) -> None: ...


@dataclass
class Repositories:
    """Backend collaborators handed to the use cases."""

    catalog: PackageCatalog
    vehicles: VehicleRegistry
    bookings: BookingStore
    timeslots: TimeslotStore
    blackouts: BlackoutStore
