import datetime as dt
from typing import Any, Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .domain.aggregation import DailyOverview, PackageDay, Slot
from .domain.services import BookingDecision, RejectReason, RevenueSummary
from .models import BlackoutDate, BlackoutScope, Booking, ContactInfo, PackageType
from .utils.time import MYT, to_civil_date


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SlotRead(ApiModel):
    package_id: str
    package_type: PackageType
    date: dt.date
    time: str
    capacity: int
    booked_count: int
    available_units: int
    is_available: bool
    minimum_person: int
    per_vehicle: bool

    @classmethod
    def from_slot(cls, slot: Slot) -> "SlotRead":
        return cls(
            package_id=slot.package_id,
            package_type=slot.package_type,
            date=slot.date,
            time=slot.time,
            capacity=slot.capacity,
            booked_count=slot.booked_count,
            available_units=slot.available_units,
            is_available=slot.is_available,
            minimum_person=slot.minimum_person,
            per_vehicle=slot.per_vehicle,
        )


class PackageDayRead(ApiModel):
    package_id: str
    package_type: PackageType
    title: str
    sub_type: str
    booked_count: int
    slots: list[SlotRead]

    @classmethod
    def from_day(cls, day: PackageDay) -> "PackageDayRead":
        return cls(
            package_id=day.package.id,
            package_type=PackageType(day.package.package_type),
            title=day.package.title,
            sub_type=str(day.package.type),
            booked_count=day.booked_count,
            slots=[SlotRead.from_slot(s) for s in day.slots],
        )


class DailyOverviewRead(ApiModel):
    date: dt.date
    tour_count: int
    transfer_count: int
    skipped_bookings: int
    packages: list[PackageDayRead]

    @classmethod
    def from_overview(cls, overview: DailyOverview) -> "DailyOverviewRead":
        return cls(
            date=overview.date,
            tour_count=overview.booked_for(PackageType.TOUR),
            transfer_count=overview.booked_for(PackageType.TRANSFER),
            skipped_bookings=overview.skipped_bookings,
            packages=[PackageDayRead.from_day(day) for day in overview.packages],
        )


class ToggleAvailability(ApiModel):
    package_id: str
    package_type: PackageType
    date: dt.date
    time: str
    is_available: bool


class MinimumPersonUpdate(ApiModel):
    package_id: str
    package_type: PackageType
    date: dt.date
    time: str
    minimum_person: int


class ContactIn(ApiModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    whatsapp: Optional[str] = None

    def to_contact(self) -> ContactInfo:
        return ContactInfo(name=self.name, email=self.email, phone=self.phone, whatsapp=self.whatsapp)


class BookingCreate(ApiModel):
    package_type: PackageType
    package_id: str
    date: Optional[str] = None
    time: str = ""
    adults: int
    children: int = 0
    pickup_location: str = ""
    contact_info: ContactIn = Field(default_factory=ContactIn)


class BookingRead(ApiModel):
    id: Optional[str]
    package_id: Optional[str]
    package_type: Optional[PackageType]
    date: Optional[str]
    time: str
    adults: int
    children: int
    contact_info: ContactInfo
    pickup_location: str
    total: float
    is_vehicle_booking: bool
    status: Optional[str] = None

    @classmethod
    def from_booking(cls, booking: Booking, tz: ZoneInfo = MYT) -> "BookingRead":
        civil = to_civil_date(booking.date, tz)
        return cls(
            id=booking.id,
            package_id=booking.package_id,
            package_type=booking.package_type,
            date=civil.isoformat() if civil is not None else None,
            time=booking.time,
            adults=booking.adults,
            children=booking.children,
            contact_info=booking.contact_info,
            pickup_location=booking.pickup_location,
            total=booking.total,
            is_vehicle_booking=booking.is_vehicle_booking,
            status=booking.status,
        )


class BookingCreated(ApiModel):
    booking: BookingRead
    total: float
    slot: SlotRead


class Rejection(ApiModel):
    reason: RejectReason
    detail: str
    context: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_decision(cls, decision: BookingDecision) -> "Rejection":
        assert decision.reason is not None
        return cls(reason=decision.reason, detail=decision.detail, context=dict(decision.context))


class RevenueLineRead(ApiModel):
    package_id: str
    title: str
    package_type: str
    sub_type: Optional[str]
    bookings: int
    guests: int
    revenue: float


class RevenueRead(ApiModel):
    start: dt.date = Field(alias="from")
    end: dt.date = Field(alias="to")
    currency: str
    total_revenue: float
    total_bookings: int
    total_guests: int
    packages: list[RevenueLineRead]

    @classmethod
    def from_summary(cls, summary: RevenueSummary, *, currency: str) -> "RevenueRead":
        return cls(
            start=summary.start,
            end=summary.end,
            currency=currency,
            total_revenue=summary.total_revenue,
            total_bookings=summary.total_bookings,
            total_guests=summary.total_guests,
            packages=[
                RevenueLineRead(
                    package_id=line.package_id,
                    title=line.title,
                    package_type=line.package_type,
                    sub_type=line.sub_type,
                    bookings=line.bookings,
                    guests=line.guests,
                    revenue=line.revenue,
                )
                for line in summary.lines
            ],
        )


class BlackoutCreate(ApiModel):
    start: dt.date = Field(validation_alias="date")
    end: Optional[dt.date] = None
    package_type: BlackoutScope = BlackoutScope.ALL
    description: Optional[str] = None


class BlackoutRead(ApiModel):
    id: Optional[str]
    date: dt.date
    package_type: BlackoutScope
    description: Optional[str] = None

    @classmethod
    def from_blackout(cls, blackout: BlackoutDate) -> "BlackoutRead":
        return cls(
            id=blackout.id,
            date=blackout.date,
            package_type=blackout.package_type,
            description=blackout.description,
        )
