from datetime import date
from typing import List, Optional
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from fastapi.responses import JSONResponse

from ..config import Settings, get_settings
from ..deps import get_business_zone, get_repositories
from ..domain.errors import (
    BookingNotFoundError,
    BookingRejectedError,
    MalformedInputError,
    PackageNotFoundError,
    SlotConflictError,
)
from ..domain.repositories import Repositories
from ..domain.services import BookingRequest
from ..models import PackageType
from ..schemas import BookingCreate, BookingCreated, BookingRead, Rejection, RevenueRead, SlotRead
from ..usecases import bookings as booking_usecase
from ..utils.audit_log import emit_audit_log

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("", response_model=List[BookingRead])
async def list_bookings(
    package_id: Optional[str] = Query(default=None, alias="packageId"),
    package_type: Optional[PackageType] = Query(default=None, alias="packageType"),
    day: Optional[date] = Query(default=None, alias="date"),
    time: Optional[str] = Query(default=None),
    status_filter: Optional[str] = Query(default=None, alias="status"),
    start_date: Optional[date] = Query(default=None, alias="startDate"),
    end_date: Optional[date] = Query(default=None, alias="endDate"),
    repos: Repositories = Depends(get_repositories),
    tz: ZoneInfo = Depends(get_business_zone),
) -> list[BookingRead]:
    try:
        bookings = await booking_usecase.list_bookings(
            repos.bookings,
            package_id=package_id,
            package_type=package_type,
            date=day,
            time=time,
            status=status_filter,
            start_date=start_date,
            end_date=end_date,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return [BookingRead.from_booking(b, tz) for b in bookings]


@router.get("/revenue", response_model=RevenueRead)
async def revenue(
    start: date = Query(..., alias="from"),
    end: date = Query(..., alias="to"),
    repos: Repositories = Depends(get_repositories),
    tz: ZoneInfo = Depends(get_business_zone),
    settings: Settings = Depends(get_settings),
) -> RevenueRead:
    try:
        summary = await booking_usecase.revenue_report(repos, start=start, end=end, tz=tz)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return RevenueRead.from_summary(summary, currency=settings.currency)


@router.post(
    "",
    response_model=BookingCreated,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": Rejection}, 422: {"model": Rejection}},
)
async def create_booking(
    payload: BookingCreate,
    repos: Repositories = Depends(get_repositories),
    tz: ZoneInfo = Depends(get_business_zone),
    settings: Settings = Depends(get_settings),
):
    request = BookingRequest(
        package_id=payload.package_id,
        date=payload.date,
        time=payload.time,
        adults=payload.adults,
        children=payload.children,
        pickup_location=payload.pickup_location,
        contact=payload.contact_info.to_contact(),
    )
    try:
        booking, decision, slot = await booking_usecase.create_booking(
            repos,
            request=request,
            package_type=payload.package_type,
            currency=settings.currency,
            tz=tz,
            default_capacity=settings.default_slot_capacity,
        )
    except PackageNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="package not found")
    except MalformedInputError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"reason": exc.kind, "detail": str(exc)},
        )
    except BookingRejectedError as exc:
        rejection = Rejection.from_decision(exc.decision)
        try:
            emit_audit_log(
                action="booking.rejected",
                package_id=payload.package_id,
                package_type=payload.package_type,
                date=payload.date,
                time=payload.time,
                guests=payload.adults + payload.children,
                reason=rejection.reason,
                message=rejection.detail,
            )
        except RuntimeError:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed")
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT if isinstance(exc, SlotConflictError) else 422,
            content=rejection.model_dump(mode="json", by_alias=True),
        )

    try:
        emit_audit_log(
            action="booking.created",
            package_id=payload.package_id,
            package_type=payload.package_type,
            date=slot.date,
            time=slot.time,
            booking_id=booking.id,
            guests=payload.adults + payload.children,
            extra={"total": decision.total},
        )
    except RuntimeError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed")

    return BookingCreated(
        booking=BookingRead.from_booking(booking, tz),
        total=decision.total or 0,
        slot=SlotRead.from_slot(slot),
    )


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_booking(
    booking_id: str = Path(..., min_length=1),
    repos: Repositories = Depends(get_repositories),
) -> None:
    try:
        await booking_usecase.delete_booking(repos.bookings, booking_id=booking_id)
    except BookingNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="booking not found")

    try:
        emit_audit_log(action="booking.deleted", booking_id=booking_id)
    except RuntimeError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed")
