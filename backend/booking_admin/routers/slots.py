from datetime import date
from typing import Optional
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..config import Settings, get_settings
from ..deps import get_business_zone, get_repositories
from ..domain.errors import PackageNotFoundError
from ..domain.repositories import Repositories
from ..models import PackageType
from ..schemas import DailyOverviewRead, MinimumPersonUpdate, SlotRead, ToggleAvailability
from ..usecases import slots as slot_usecase
from ..utils.audit_log import emit_audit_log

router = APIRouter(prefix="/timeslots", tags=["timeslots"])


@router.get("", response_model=list[SlotRead])
async def list_slots(
    package_type: PackageType = Query(..., alias="packageType"),
    package_id: str = Query(..., alias="packageId", min_length=1),
    day: date = Query(..., alias="date", description="Business-timezone date (YYYY-MM-DD)"),
    repos: Repositories = Depends(get_repositories),
    tz: ZoneInfo = Depends(get_business_zone),
    settings: Settings = Depends(get_settings),
) -> list[SlotRead]:
    try:
        _, slots = await slot_usecase.list_slots(
            repos,
            package_id=package_id,
            package_type=package_type,
            date=day,
            tz=tz,
            default_capacity=settings.default_slot_capacity,
        )
    except PackageNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="package not found")
    return [SlotRead.from_slot(slot) for slot in slots]


@router.get("/daily", response_model=DailyOverviewRead)
async def daily_overview(
    day: date = Query(..., alias="date"),
    package_type: Optional[PackageType] = Query(default=None, alias="packageType"),
    repos: Repositories = Depends(get_repositories),
    tz: ZoneInfo = Depends(get_business_zone),
    settings: Settings = Depends(get_settings),
) -> DailyOverviewRead:
    overview = await slot_usecase.daily_overview(
        repos,
        date=day,
        package_type=package_type,
        tz=tz,
        default_capacity=settings.default_slot_capacity,
    )
    return DailyOverviewRead.from_overview(overview)


@router.put("/toggle-availability")
async def toggle_availability(
    payload: ToggleAvailability,
    repos: Repositories = Depends(get_repositories),
) -> dict:
    try:
        result = await slot_usecase.set_slot_availability(
            repos.timeslots,
            package_id=payload.package_id,
            package_type=payload.package_type,
            date=payload.date,
            time=payload.time,
            is_available=payload.is_available,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    try:
        emit_audit_log(
            action="timeslot.availability_changed",
            package_id=payload.package_id,
            package_type=payload.package_type,
            date=payload.date,
            time=payload.time,
            extra={"is_available": payload.is_available},
        )
    except RuntimeError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed")
    return result


@router.put("/minimum-person")
async def update_minimum_person(
    payload: MinimumPersonUpdate,
    repos: Repositories = Depends(get_repositories),
) -> dict:
    try:
        result = await slot_usecase.set_slot_minimum_person(
            repos.timeslots,
            package_id=payload.package_id,
            package_type=payload.package_type,
            date=payload.date,
            time=payload.time,
            minimum_person=payload.minimum_person,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    try:
        emit_audit_log(
            action="timeslot.minimum_person_changed",
            package_id=payload.package_id,
            package_type=payload.package_type,
            date=payload.date,
            time=payload.time,
            extra={"minimum_person": payload.minimum_person},
        )
    except RuntimeError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed")
    return result
