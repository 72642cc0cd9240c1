from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Callable, Iterable, TypeVar, Union

from pydantic import ValidationError

from ..domain.errors import BackendError, BookingNotFoundError
from ..domain.repositories import BlackoutStore, BookingStore, PackageCatalog, TimeslotStore, VehicleRegistry
from ..models import (
    BlackoutDate,
    Booking,
    PackageType,
    TimeslotRecord,
    Tour,
    Transfer,
    Vehicle,
    parse_package,
)
from .backend_client import BackendClient, unwrap

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _parse_many(items: Any, parse: Callable[[dict[str, Any]], T], what: str) -> list[T]:
    if not isinstance(items, list):
        logger.warning("expected a list of %s from backend, got %s", what, type(items).__name__)
        return []
    parsed: list[T] = []
    for item in _dicts(items):
        try:
            parsed.append(parse(item))
        except ValidationError as exc:
            logger.warning("skipping malformed %s record %s: %s", what, item.get("_id", item.get("id")), exc)
    return parsed


def _dicts(items: Iterable[Any]) -> Iterable[dict[str, Any]]:
    return (item for item in items if isinstance(item, dict))


def _iso(value: dt.date | None) -> str | None:
    return value.isoformat() if value is not None else None


class HttpPackageCatalog(PackageCatalog):
    def __init__(self, client: BackendClient) -> None:
        self.client = client

    async def list_packages(self, package_type: PackageType | None = None) -> list[Union[Tour, Transfer]]:
        kinds = [package_type] if package_type is not None else list(PackageType)
        packages: list[Union[Tour, Transfer]] = []
        for kind in kinds:
            payload = await self.client.get("/packages", type=kind.value)
            items = unwrap(payload, "packages", f"{kind.value}s")
            packages.extend(_parse_many(items, lambda item, k=kind: parse_package(item, k.value), "package"))
        return packages

    async def get_package(self, package_id: str, package_type: PackageType | None = None) -> Union[Tour, Transfer] | None:
        try:
            payload = await self.client.get(f"/packages/{package_id}", type=package_type.value if package_type else None)
        except BackendError as exc:
            if exc.status_code == 404:
                return None
            raise
        item = unwrap(payload, "package", "tour", "transfer")
        if not isinstance(item, dict):
            return None
        try:
            return parse_package(item, package_type.value if package_type else None)
        except ValidationError as exc:
            logger.warning("package %s from backend is malformed: %s", package_id, exc)
            return None


class HttpVehicleRegistry(VehicleRegistry):
    def __init__(self, client: BackendClient) -> None:
        self.client = client

    async def list_vehicles(self) -> list[Vehicle]:
        payload = await self.client.get("/vehicles")
        return _parse_many(unwrap(payload, "vehicles"), Vehicle.model_validate, "vehicle")


class HttpBookingStore(BookingStore):
    def __init__(self, client: BackendClient) -> None:
        self.client = client

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
    ) -> list[Booking]:
        payload = await self.client.get(
            "/bookings",
            packageId=package_id,
            packageType=package_type.value if package_type else None,
            date=_iso(date),
            time=time,
            status=status,
            startDate=_iso(start_date),
            endDate=_iso(end_date),
        )
        return _parse_many(unwrap(payload, "bookings"), Booking.model_validate, "booking")

    async def create(self, payload: dict[str, Any]) -> Booking:
        created = unwrap(await self.client.post("/bookings", payload), "booking")
        return Booking.model_validate(created if isinstance(created, dict) else {})

    async def delete(self, booking_id: str) -> None:
        try:
            await self.client.delete(f"/bookings/{booking_id}")
        except BackendError as exc:
            if exc.status_code == 404:
                raise BookingNotFoundError(booking_id) from exc
            raise


class HttpTimeslotStore(TimeslotStore):
    def __init__(self, client: BackendClient) -> None:
        self.client = client

    async def list_records(self, *, package_id: str, package_type: PackageType, date: dt.date) -> list[TimeslotRecord]:
        payload = await self.client.get(
            "/timeslots",
            packageId=package_id,
            packageType=package_type.value,
            date=date.isoformat(),
        )
        return _parse_many(unwrap(payload, "timeslots", "slots"), TimeslotRecord.model_validate, "timeslot")

    async def set_availability(
        self,
        *,
        package_id: str,
        package_type: PackageType,
        date: dt.date,
        time: str,
        is_available: bool,
    ) -> dict[str, Any]:
        body = {
            "packageId": package_id,
            "packageType": package_type.value,
            "date": date.isoformat(),
            "time": time,
            "isAvailable": is_available,
        }
        return await self.client.put("/timeslots/toggle-availability", body) or {}

    async def set_minimum_person(
        self,
        *,
        package_id: str,
        package_type: PackageType,
        date: dt.date,
        time: str,
        minimum_person: int,
    ) -> dict[str, Any]:
        body = {
            "packageType": package_type.value,
            "packageId": package_id,
            "date": date.isoformat(),
            "time": time,
            "minimumPerson": minimum_person,
        }
        return await self.client.put("/timeslots/minimum-person", body) or {}


class HttpBlackoutStore(BlackoutStore):
    def __init__(self, client: BackendClient) -> None:
        self.client = client

    async def list_blackouts(self) -> list[BlackoutDate]:
        payload = await self.client.get("/blackout-dates")
        return _parse_many(unwrap(payload, "blackoutDates"), BlackoutDate.model_validate, "blackout date")

    async def create(self, *, date: dt.date, package_type: str, description: str | None) -> BlackoutDate:
        body = {"date": date.isoformat(), "packageType": package_type, "description": description}
        created = unwrap(await self.client.post("/blackout-dates", body), "blackoutDate")
        if not isinstance(created, dict):
            created = body
        return BlackoutDate.model_validate(created)

    async def delete(self, blackout_id: str) -> None:
        await self.client.delete(f"/blackout-dates/{blackout_id}")
