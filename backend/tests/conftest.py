import datetime as dt
from typing import Any, Optional, Union

import pytest
from booking_admin.domain.errors import BackendError, BookingNotFoundError
from booking_admin.domain.repositories import Repositories
from booking_admin.models import BlackoutDate, Booking, PackageType, TimeslotRecord, Tour, Transfer, Vehicle


class FakeCatalog:
    def __init__(self, packages: list[Union[Tour, Transfer]]) -> None:
        self.packages = packages

    async def list_packages(self, package_type: Optional[PackageType] = None) -> list[Union[Tour, Transfer]]:
        return [p for p in self.packages if package_type is None or p.package_type == package_type]

    async def get_package(self, package_id: str, package_type: Optional[PackageType] = None) -> Union[Tour, Transfer, None]:
        return next((p for p in self.packages if p.id == package_id), None)


class FakeVehicles:
    def __init__(self, vehicles: list[Vehicle]) -> None:
        self.vehicles = vehicles
        self.calls = 0

    async def list_vehicles(self) -> list[Vehicle]:
        self.calls += 1
        return list(self.vehicles)


class FakeBookingStore:
    def __init__(self, bookings: list[Booking]) -> None:
        self.bookings = bookings
        self.created: list[dict[str, Any]] = []
        self.queries: list[dict[str, Any]] = []
        self.conflict = False

    async def list_bookings(self, **filters: Any) -> list[Booking]:
        self.queries.append(filters)
        return list(self.bookings)

    async def create(self, payload: dict[str, Any]) -> Booking:
        if self.conflict:
            raise BackendError(409, "slot is full")
        self.created.append(payload)
        booking = Booking.model_validate({"_id": f"b-{len(self.created)}", **payload})
        self.bookings.append(booking)
        return booking

    async def delete(self, booking_id: str) -> None:
        before = len(self.bookings)
        self.bookings = [b for b in self.bookings if b.id != booking_id]
        if len(self.bookings) == before:
            raise BookingNotFoundError(booking_id)


class FakeTimeslots:
    def __init__(self) -> None:
        self.records: dict[str, list[TimeslotRecord]] = {}
        self.updates: list[dict[str, Any]] = []

    async def list_records(self, *, package_id: str, package_type: PackageType, date: dt.date) -> list[TimeslotRecord]:
        return list(self.records.get(package_id, []))

    async def set_availability(self, **kwargs: Any) -> dict[str, Any]:
        self.updates.append(kwargs)
        return {"success": True}

    async def set_minimum_person(self, **kwargs: Any) -> dict[str, Any]:
        self.updates.append(kwargs)
        return {"success": True}


class FakeBlackouts:
    def __init__(self) -> None:
        self.items: list[BlackoutDate] = []

    async def list_blackouts(self) -> list[BlackoutDate]:
        return list(self.items)

    async def create(self, *, date: dt.date, package_type: str, description: Optional[str]) -> BlackoutDate:
        blackout = BlackoutDate(id=f"bo-{len(self.items) + 1}", date=date, package_type=package_type, description=description)
        self.items.append(blackout)
        return blackout

    async def delete(self, blackout_id: str) -> None:
        self.items = [b for b in self.items if b.id != blackout_id]


def make_tour(**overrides: object) -> Tour:
    data: dict[str, object] = {
        "_id": "tour-1",
        "title": "Mossy Forest",
        "type": "co-tour",
        "newPrice": 100,
        "childPrice": 50,
        "minimumPerson": 4,
        "maximumPerson": 15,
        "departureTimes": ["09:00", "14:00"],
    }
    data.update(overrides)
    return Tour.model_validate(data)


def make_transfer(**overrides: object) -> Transfer:
    data: dict[str, object] = {
        "_id": "tr-1",
        "title": "Private Highlands to KL",
        "type": "Private",
        "vehicle": "Van A",
        "newPrice": 350,
        "childPrice": 0,
        "minimumPerson": 1,
        "times": ["08:00"],
    }
    data.update(overrides)
    return Transfer.model_validate(data)


@pytest.fixture
def repos() -> Repositories:
    return Repositories(
        catalog=FakeCatalog([make_tour(), make_transfer()]),
        vehicles=FakeVehicles([Vehicle(name="Van A", units=3)]),
        bookings=FakeBookingStore([]),
        timeslots=FakeTimeslots(),
        blackouts=FakeBlackouts(),
    )


@pytest.fixture
def contact() -> dict[str, str]:
    return {"name": "Aina", "email": "aina@example.com", "phone": "+60123456789"}
