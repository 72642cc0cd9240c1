import datetime as dt
import math
import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Iterable, Mapping, Optional, Union
from zoneinfo import ZoneInfo

from ..models import Booking, ContactInfo, Tour, Transfer
from ..utils.time import MYT, to_civil_date
from .aggregation import Slot
from .errors import MalformedInputError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Private tours are priced per vehicle-sized group.
PRIVATE_GROUP_SIZE = 8


class RejectReason(StrEnum):
    SLOT_NOT_FOUND = "SLOT_NOT_FOUND"
    MINIMUM_NOT_MET = "MINIMUM_NOT_MET"
    ADULT_REQUIRED = "ADULT_REQUIRED"
    MAXIMUM_EXCEEDED = "MAXIMUM_EXCEEDED"
    INSUFFICIENT_CAPACITY = "INSUFFICIENT_CAPACITY"
    PICKUP_REQUIRED = "PICKUP_REQUIRED"
    INVALID_CONTACT = "INVALID_CONTACT"


@dataclass(frozen=True)
class BookingRequest:
    package_id: str
    date: Union[dt.date, str, None]
    time: str
    adults: int
    children: int = 0
    pickup_location: str = ""
    contact: ContactInfo = field(default_factory=ContactInfo)


@dataclass(frozen=True)
class BookingDecision:
    accepted: bool
    total: Optional[float] = None
    reason: Optional[RejectReason] = None
    detail: str = ""
    context: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def accept(cls, total: float) -> "BookingDecision":
        return cls(accepted=True, total=total)

    @classmethod
    def reject(cls, reason: RejectReason, detail: str, **context: Any) -> "BookingDecision":
        return cls(accepted=False, reason=reason, detail=detail, context=context)


def _require_count(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedInputError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise MalformedInputError(f"{name} must be >= 0")
    return value


def calculate_total(package: Union[Tour, Transfer], adults: int, children: int) -> float:
    if isinstance(package, Tour) and package.is_private:
        return math.ceil(adults / PRIVATE_GROUP_SIZE) * package.new_price
    return adults * package.new_price + children * package.child_price


def validate_booking(
    request: BookingRequest,
    slot: Optional[Slot],
    package: Union[Tour, Transfer],
    *,
    tz: ZoneInfo = MYT,
) -> BookingDecision:
    """
    Decide whether ``request`` may be booked into ``slot``.
    Checks run in a fixed order and the first failure is returned; business
    rule violations never raise. Raises MalformedInputError for wrongly typed
    guest counts or an unparseable date.
    """
    adults = _require_count(request.adults, "adults")
    children = _require_count(request.children, "children")

    if not request.date or not request.time:
        return BookingDecision.reject(RejectReason.SLOT_NOT_FOUND, "date and time are required")
    requested_day = to_civil_date(request.date, tz)
    if requested_day is None:
        raise MalformedInputError(f"invalid date: {request.date!r}")
    if (
        slot is None
        or slot.package_id != package.id
        or slot.time != request.time
        or slot.date != requested_day
    ):
        return BookingDecision.reject(
            RejectReason.SLOT_NOT_FOUND,
            f"no {request.time} slot on {requested_day.isoformat()}",
            time=request.time,
            date=requested_day.isoformat(),
        )
    if not slot.is_available:
        return BookingDecision.reject(
            RejectReason.SLOT_NOT_FOUND,
            f"the {slot.time} slot on {slot.date.isoformat()} is no longer available",
            time=slot.time,
            date=slot.date.isoformat(),
        )

    guests = adults + children
    if slot.is_first_booking:
        required = slot.minimum_person or package.minimum_person or 1
        if guests < required:
            return BookingDecision.reject(
                RejectReason.MINIMUM_NOT_MET,
                f"first booking for this slot: need {required}, have {guests} ({required - guests} more required)",
                required=required,
                requested=guests,
                shortfall=required - guests,
            )

    if adults < 1:
        return BookingDecision.reject(RejectReason.ADULT_REQUIRED, "at least 1 adult is required")

    if package.maximum_person is not None and guests > package.maximum_person:
        return BookingDecision.reject(
            RejectReason.MAXIMUM_EXCEEDED,
            f"maximum {package.maximum_person} guests allowed, requested {guests}",
            limit=package.maximum_person,
            requested=guests,
        )

    remaining = slot.available_units
    if guests > remaining:
        unit = "vehicles" if slot.per_vehicle else "seats"
        return BookingDecision.reject(
            RejectReason.INSUFFICIENT_CAPACITY,
            f"only {remaining} {unit} remaining for this slot",
            remaining=remaining,
            requested=guests,
        )

    if isinstance(package, Transfer) and not request.pickup_location.strip():
        return BookingDecision.reject(RejectReason.PICKUP_REQUIRED, "pickup location is required for transfers")

    contact_error = _contact_error(request.contact)
    if contact_error is not None:
        field_name, detail = contact_error
        return BookingDecision.reject(RejectReason.INVALID_CONTACT, detail, field=field_name)

    return BookingDecision.accept(calculate_total(package, adults, children))


def _contact_error(contact: ContactInfo) -> Optional[tuple[str, str]]:
    for field_name in ("name", "email", "phone"):
        if not getattr(contact, field_name, "").strip():
            return field_name, f"contact {field_name} is required"
    if not EMAIL_PATTERN.match(contact.email.strip()):
        return "email", "contact email is not a valid address"
    return None


@dataclass(frozen=True)
class RevenueLine:
    package_id: str
    title: str
    package_type: str
    sub_type: Optional[str]
    bookings: int
    guests: int
    revenue: float


@dataclass(frozen=True)
class RevenueSummary:
    start: dt.date
    end: dt.date
    total_revenue: float
    total_bookings: int
    total_guests: int
    lines: tuple[RevenueLine, ...]


def summarize_revenue(
    bookings: Iterable[Booking],
    start: dt.date,
    end: dt.date,
    *,
    packages: Optional[Mapping[str, Union[Tour, Transfer]]] = None,
    tz: ZoneInfo = MYT,
) -> RevenueSummary:
    """Revenue per package for bookings dated within ``[start, end]`` (cancelled ones excluded)."""
    if start > end:
        raise ValueError("start must not be after end")
    catalog = dict(packages or {})

    grouped: dict[str, list[Booking]] = {}
    for booking in bookings:
        if booking.is_cancelled:
            continue
        day = to_civil_date(booking.date, tz)
        if day is None or not start <= day <= end:
            continue
        grouped.setdefault(booking.package_id or "unknown", []).append(booking)

    lines = []
    for package_id, items in grouped.items():
        package = catalog.get(package_id) or next(
            (b.embedded_package for b in items if b.embedded_package is not None), None
        )
        package_type = package.package_type if package is not None else str(items[0].package_type or "")
        lines.append(
            RevenueLine(
                package_id=package_id,
                title=package.title if package is not None else package_id,
                package_type=package_type,
                sub_type=str(package.type) if package is not None else None,
                bookings=len(items),
                guests=sum(b.headcount for b in items),
                revenue=sum(b.total for b in items),
            )
        )
    lines.sort(key=lambda line: (-line.revenue, line.title))
    return RevenueSummary(
        start=start,
        end=end,
        total_revenue=sum(line.revenue for line in lines),
        total_bookings=sum(line.bookings for line in lines),
        total_guests=sum(line.guests for line in lines),
        lines=tuple(lines),
    )
