import datetime as dt
import logging
from enum import StrEnum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from .utils.time import is_slot_time, to_civil_date

logger = logging.getLogger(__name__)


class PackageType(StrEnum):
    TOUR = "tour"
    TRANSFER = "transfer"


class TourType(StrEnum):
    CO_TOUR = "co-tour"
    PRIVATE = "private"


class TransferType(StrEnum):
    VAN = "Van"
    VAN_FERRY = "Van + Ferry"
    PRIVATE = "Private"


class PackageStatus(StrEnum):
    ACTIVE = "active"
    SOLD = "sold"


class BlackoutScope(StrEnum):
    ALL = "all"
    TOUR = "tour"
    TRANSFER = "transfer"


class BackendModel(BaseModel):
    """Base for records exchanged with the booking backend (camelCase JSON)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def _enum_member(enum_cls: type[StrEnum], value: Any) -> Any:
    if isinstance(value, str):
        for member in enum_cls:
            if member.value.lower() == value.strip().lower():
                return member
    return value


def _check_times(values: list[str]) -> list[str]:
    cleaned = [v.strip() for v in values]
    for value in cleaned:
        if not is_slot_time(value):
            raise ValueError(f"invalid time {value!r}, expected HH:MM")
    return cleaned


class PackageBase(BackendModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    title: str = ""
    new_price: float = Field(default=0, ge=0)
    child_price: float = Field(default=0, ge=0)
    minimum_person: int = Field(default=1, ge=1)
    maximum_person: Optional[int] = Field(default=None, ge=1)
    status: PackageStatus = PackageStatus.ACTIVE

    @field_validator("child_price", mode="before")
    @classmethod
    def _null_child_price(cls, value: Any) -> Any:
        return 0 if value is None else value

    @model_validator(mode="after")
    def _check_person_limits(self) -> "PackageBase":
        if self.maximum_person is not None and self.maximum_person < self.minimum_person:
            raise ValueError("maximumPerson must be >= minimumPerson")
        return self


class Tour(PackageBase):
    package_type: Literal["tour"] = "tour"
    type: TourType = TourType.CO_TOUR
    period: Optional[str] = None
    departure_times: list[str] = Field(default_factory=list)

    @field_validator("type", mode="before")
    @classmethod
    def _tour_type(cls, value: Any) -> Any:
        return _enum_member(TourType, value)

    @field_validator("departure_times")
    @classmethod
    def _times(cls, value: list[str]) -> list[str]:
        return _check_times(value)

    @property
    def is_private(self) -> bool:
        return self.type == TourType.PRIVATE

    @property
    def schedule(self) -> list[str]:
        return sorted(set(self.departure_times))


class Transfer(PackageBase):
    package_type: Literal["transfer"] = "transfer"
    type: TransferType = TransferType.VAN
    vehicle: Optional[str] = None
    times: list[str] = Field(default_factory=list)
    origin: Optional[str] = Field(default=None, validation_alias=AliasChoices("from", "origin"))
    destination: Optional[str] = Field(default=None, validation_alias=AliasChoices("to", "destination"))

    @field_validator("type", mode="before")
    @classmethod
    def _transfer_type(cls, value: Any) -> Any:
        return _enum_member(TransferType, value)

    @field_validator("times")
    @classmethod
    def _times(cls, value: list[str]) -> list[str]:
        return _check_times(value)

    @property
    def is_private(self) -> bool:
        return self.type == TransferType.PRIVATE

    @property
    def schedule(self) -> list[str]:
        return sorted(set(self.times))


Package = Annotated[Union[Tour, Transfer], Field(discriminator="package_type")]

_package_adapter: TypeAdapter[Union[Tour, Transfer]] = TypeAdapter(Package)


def parse_package(data: dict[str, Any], package_type: Optional[str] = None) -> Union[Tour, Transfer]:
    """Parse a catalog record into its concrete package class.

    ``package_type`` fills in the discriminator for records that omit it,
    such as packages fetched from a kind-specific endpoint or embedded in a
    booking. Raises ``pydantic.ValidationError`` on malformed records.
    """
    payload = dict(data)
    if package_type is not None and not payload.get("packageType"):
        payload["packageType"] = str(package_type)
    return _package_adapter.validate_python(payload)


class Vehicle(BackendModel):
    name: str
    units: int = Field(ge=1)


class ContactInfo(BackendModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    whatsapp: Optional[str] = None


class Booking(BackendModel):
    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("_id", "id"))
    package_id: Optional[str] = None
    package_type: Optional[PackageType] = None
    embedded_package: Optional[Union[Tour, Transfer]] = Field(default=None, exclude=True)
    date: Optional[Union[dt.datetime, dt.date, str]] = None
    time: str = ""
    adults: int = Field(default=0, ge=0)
    children: int = Field(default=0, ge=0)
    contact_info: ContactInfo = Field(default_factory=ContactInfo)
    pickup_location: str = ""
    total: float = 0
    is_vehicle_booking: bool = False
    status: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _unpack_package_ref(cls, data: Any) -> Any:
        # packageId may arrive populated with the package document itself.
        if not isinstance(data, dict):
            return data
        ref = data.get("packageId", data.get("package_id"))
        if not isinstance(ref, dict):
            return data
        out = {k: v for k, v in data.items() if k not in ("packageId", "package_id")}
        out["package_id"] = ref.get("_id") or ref.get("id")
        package_type = data.get("packageType") or data.get("package_type") or ref.get("packageType")
        out["embedded_package"] = None
        if package_type:
            try:
                out["embedded_package"] = parse_package(ref, package_type)
            except ValidationError as exc:
                logger.debug("booking %s carries an unparseable package: %s", data.get("_id"), exc)
        return out

    @field_validator("adults", "children", mode="before")
    @classmethod
    def _null_count(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("pickup_location", mode="before")
    @classmethod
    def _null_pickup(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def headcount(self) -> int:
        return self.adults + self.children

    @property
    def occupancy(self) -> int:
        """Units this booking takes from its slot."""
        return 1 if self.is_vehicle_booking else self.headcount

    @property
    def is_cancelled(self) -> bool:
        return (self.status or "").lower() == "cancelled"


class TimeslotRecord(BackendModel):
    time: str
    is_available: bool = True
    minimum_person: Optional[int] = Field(default=None, ge=1)


class BlackoutDate(BackendModel):
    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("_id", "id"))
    date: dt.date
    package_type: BlackoutScope = BlackoutScope.ALL
    description: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def _civil_date(cls, value: Any) -> Any:
        civil = to_civil_date(value)
        return civil if civil is not None else value

    def applies_to(self, package_type: str) -> bool:
        return self.package_type == BlackoutScope.ALL or self.package_type.value == str(package_type)
