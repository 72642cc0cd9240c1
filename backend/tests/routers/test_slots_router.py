from datetime import date
from typing import Any, List

import pytest
from booking_admin.config import Settings
from booking_admin.models import BlackoutDate, Booking, PackageType
from booking_admin.routers import slots as router
from booking_admin.schemas import MinimumPersonUpdate, ToggleAvailability
from booking_admin.utils.time import MYT
from fastapi import HTTPException

DAY = date(2025, 3, 1)


@pytest.fixture
def audit_messages(monkeypatch: pytest.MonkeyPatch) -> List[dict]:
    messages: List[dict] = []

    def fake_emit_audit_log(**kwargs: Any) -> None:
        messages.append(kwargs)

    monkeypatch.setattr(router, "emit_audit_log", fake_emit_audit_log)
    return messages


@pytest.mark.asyncio
async def test_list_slots_returns_schedule(repos) -> None:
    repos.bookings.bookings.append(
        Booking.model_validate({"_id": "b-1", "packageId": "tour-1", "date": "2025-03-01", "time": "14:00", "adults": 5})
    )
    result = await router.list_slots(
        package_type=PackageType.TOUR,
        package_id="tour-1",
        day=DAY,
        repos=repos,
        tz=MYT,
        settings=Settings(),
    )
    assert [s.time for s in result] == ["09:00", "14:00"]
    assert result[1].booked_count == 5
    assert result[1].available_units == 10
    assert result[1].model_dump(by_alias=True)["availableUnits"] == 10


@pytest.mark.asyncio
async def test_list_slots_unknown_package_is_404(repos) -> None:
    with pytest.raises(HTTPException) as excinfo:
        await router.list_slots(
            package_type=PackageType.TRANSFER,
            package_id="missing",
            day=DAY,
            repos=repos,
            tz=MYT,
            settings=Settings(),
        )
    assert excinfo.value.status_code == 404


@pytest.mark.asyncio
async def test_daily_overview_counts(repos) -> None:
    repos.bookings.bookings.append(
        Booking.model_validate(
            {"_id": "b-1", "packageType": "transfer", "packageId": "tr-1", "date": "2025-03-01", "time": "08:00", "adults": 4, "isVehicleBooking": True}
        )
    )
    repos.blackouts.items.append(BlackoutDate(date=DAY, package_type="tour"))
    result = await router.daily_overview(day=DAY, package_type=None, repos=repos, tz=MYT, settings=Settings())
    assert result.tour_count == 0
    assert result.transfer_count == 1
    tour_day = next(p for p in result.packages if p.package_id == "tour-1")
    assert not any(s.is_available for s in tour_day.slots)


@pytest.mark.asyncio
async def test_toggle_availability_emits_audit(repos, audit_messages: List[dict]) -> None:
    payload = ToggleAvailability(
        package_id="tour-1", package_type=PackageType.TOUR, date=DAY, time="09:00", is_available=False
    )
    result = await router.toggle_availability(payload=payload, repos=repos)
    assert result == {"success": True}
    assert audit_messages[0]["action"] == "timeslot.availability_changed"
    assert audit_messages[0]["extra"] == {"is_available": False}


@pytest.mark.asyncio
async def test_minimum_person_below_one_is_400(repos, audit_messages: List[dict]) -> None:
    payload = MinimumPersonUpdate(
        package_id="tour-1", package_type=PackageType.TOUR, date=DAY, time="09:00", minimum_person=0
    )
    with pytest.raises(HTTPException) as excinfo:
        await router.update_minimum_person(payload=payload, repos=repos)
    assert excinfo.value.status_code == 400
    assert audit_messages == []
    assert repos.timeslots.updates == []


@pytest.mark.asyncio
async def test_audit_failure_is_500(repos, monkeypatch: pytest.MonkeyPatch) -> None:
    def failing_emit(**kwargs: Any) -> None:
        raise RuntimeError("failed to emit audit log")

    monkeypatch.setattr(router, "emit_audit_log", failing_emit)
    payload = MinimumPersonUpdate(
        package_id="tour-1", package_type=PackageType.TOUR, date=DAY, time="09:00", minimum_person=2
    )
    with pytest.raises(HTTPException) as excinfo:
        await router.update_minimum_person(payload=payload, repos=repos)
    assert excinfo.value.status_code == 500
