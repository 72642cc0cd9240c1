import datetime as dt
import logging
from typing import Any, Union
from zoneinfo import ZoneInfo

from ..domain.aggregation import Slot, coerce_date
from ..domain.capacity import DEFAULT_CAPACITY
from ..domain.errors import BackendError, BookingRejectedError, SlotConflictError
from ..domain.repositories import BookingStore, Repositories
from ..domain.services import (
    BookingDecision,
    BookingRequest,
    RejectReason,
    RevenueSummary,
    summarize_revenue,
    validate_booking,
)
from ..models import Booking, PackageType, Tour, Transfer
from ..utils.time import MYT
from . import slots as slot_usecase

logger = logging.getLogger(__name__)


def build_booking_payload(
    request: BookingRequest,
    package: Union[Tour, Transfer],
    slot: Slot,
    decision: BookingDecision,
    *,
    currency: str,
) -> dict[str, Any]:
    """Backend payload for an accepted admin booking (admin bookings are pre-paid)."""
    contact = request.contact
    phone = contact.phone.strip()
    return {
        "packageType": str(package.package_type),
        "packageId": package.id,
        "date": slot.date.isoformat(),
        "time": slot.time,
        "adults": request.adults,
        "children": request.children,
        "pickupLocation": request.pickup_location.strip(),
        "contactInfo": {
            "name": contact.name.strip(),
            "email": contact.email.strip(),
            "phone": phone,
            "whatsapp": (contact.whatsapp or phone).strip(),
        },
        "subtotal": decision.total,
        "total": decision.total,
        "paymentInfo": {
            "amount": decision.total,
            "bankCharge": 0,
            "currency": currency,
            "paymentStatus": "succeeded",
        },
        "isVehicleBooking": slot.per_vehicle,
        "isAdminBooking": True,
    }


async def create_booking(
    repos: Repositories,
    *,
    request: BookingRequest,
    package_type: PackageType,
    currency: str = "MYR",
    tz: ZoneInfo = MYT,
    default_capacity: int = DEFAULT_CAPACITY,
) -> tuple[Booking, BookingDecision, Slot]:
    """
    Validate ``request`` against freshly read slot state and forward it to the
    bookings store. Raises BookingRejectedError when a rule fails, including
    when the store refuses the booking because the slot filled up meanwhile.
    """
    if not request.date or not request.time:
        package = await slot_usecase.get_package(repos, package_id=request.package_id, package_type=package_type)
        raise BookingRejectedError(validate_booking(request, None, package, tz=tz))

    day = coerce_date(request.date, tz)
    package, slots = await slot_usecase.list_slots(
        repos,
        package_id=request.package_id,
        package_type=package_type,
        date=day,
        tz=tz,
        default_capacity=default_capacity,
    )
    slot = next((s for s in slots if s.time == request.time), None)
    decision = validate_booking(request, slot, package, tz=tz)
    if not decision.accepted or slot is None:
        raise BookingRejectedError(decision)

    payload = build_booking_payload(request, package, slot, decision, currency=currency)
    try:
        created = await repos.bookings.create(payload)
    except BackendError as exc:
        if exc.status_code != 409:
            raise
        logger.info("bookings store refused %s %s at %s: %s", package.id, day, slot.time, exc.message)
        raise SlotConflictError(
            BookingDecision.reject(RejectReason.INSUFFICIENT_CAPACITY, exc.message or "slot is full")
        ) from exc
    return created, decision, slot


async def list_bookings(
    store: BookingStore,
    *,
    package_id: str | None = None,
    package_type: PackageType | None = None,
    date: dt.date | None = None,
    time: str | None = None,
    status: str | None = None,
    start_date: dt.date | None = None,
    end_date: dt.date | None = None,
) -> list[Booking]:
    if start_date is not None and end_date is not None and start_date > end_date:
        raise ValueError("start_date must not be after end_date")
    return await store.list_bookings(
        package_id=package_id,
        package_type=package_type,
        date=date,
        time=time,
        status=status,
        start_date=start_date,
        end_date=end_date,
    )


async def delete_booking(store: BookingStore, *, booking_id: str) -> None:
    await store.delete(booking_id)


async def revenue_report(
    repos: Repositories,
    *,
    start: dt.date,
    end: dt.date,
    tz: ZoneInfo = MYT,
) -> RevenueSummary:
    if start > end:
        raise ValueError("from must not be after to")
    bookings = await repos.bookings.list_bookings(
        start_date=start - dt.timedelta(days=1),
        end_date=end + dt.timedelta(days=1),
    )
    packages = await repos.catalog.list_packages()
    return summarize_revenue(bookings, start, end, packages={p.id: p for p in packages}, tz=tz)
