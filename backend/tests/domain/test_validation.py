from dataclasses import replace
from datetime import date

import pytest
from booking_admin.domain.aggregation import Slot
from booking_admin.domain.errors import MalformedInputError
from booking_admin.domain.services import BookingRequest, RejectReason, calculate_total, validate_booking
from booking_admin.models import ContactInfo, PackageType, Tour, Transfer

DAY = date(2025, 3, 1)
CONTACT = ContactInfo(name="Aina", email="aina@example.com", phone="+60123456789")


def _tour(**overrides: object) -> Tour:
    data: dict[str, object] = {
        "_id": "tour-1",
        "title": "Mossy Forest",
        "type": "co-tour",
        "newPrice": 100,
        "childPrice": 50,
        "minimumPerson": 4,
        "maximumPerson": 15,
        "departureTimes": ["09:00"],
    }
    data.update(overrides)
    return Tour.model_validate(data)


def _transfer(**overrides: object) -> Transfer:
    data: dict[str, object] = {
        "_id": "tr-1",
        "title": "Highlands to KL",
        "type": "Van",
        "newPrice": 60,
        "childPrice": 40,
        "minimumPerson": 1,
        "maximumPerson": 10,
        "times": ["08:00"],
    }
    data.update(overrides)
    return Transfer.model_validate(data)


def _slot(package: Tour | Transfer, *, time: str = "09:00", **overrides: object) -> Slot:
    values: dict[str, object] = {
        "package_id": package.id,
        "package_type": PackageType(package.package_type),
        "date": DAY,
        "time": time,
        "capacity": 15,
        "booked_count": 0,
        "is_available": True,
        "minimum_person": package.minimum_person,
    }
    values.update(overrides)
    return Slot(**values)  # type: ignore[arg-type]


def _request(**overrides: object) -> BookingRequest:
    values: dict[str, object] = {
        "package_id": "tour-1",
        "date": "2025-03-01",
        "time": "09:00",
        "adults": 4,
        "children": 0,
        "contact": CONTACT,
    }
    values.update(overrides)
    return BookingRequest(**values)  # type: ignore[arg-type]


def test_first_booking_below_minimum_is_rejected() -> None:
    tour = _tour()
    decision = validate_booking(_request(adults=2), _slot(tour), tour)
    assert not decision.accepted
    assert decision.reason == RejectReason.MINIMUM_NOT_MET
    assert "need 4, have 2" in decision.detail
    assert decision.context == {"required": 4, "requested": 2, "shortfall": 2}


def test_later_booking_skips_minimum() -> None:
    tour = _tour()
    decision = validate_booking(_request(adults=1), _slot(tour, booked_count=4), tour)
    assert decision.accepted
    assert decision.total == 100


def test_slot_minimum_override_applies() -> None:
    tour = _tour()
    decision = validate_booking(_request(adults=2), _slot(tour, minimum_person=2), tour)
    assert decision.accepted


def test_children_count_toward_minimum_but_adult_required() -> None:
    tour = _tour()
    decision = validate_booking(_request(adults=0, children=4), _slot(tour), tour)
    assert decision.reason == RejectReason.ADULT_REQUIRED


def test_maximum_exceeded() -> None:
    tour = _tour(maximumPerson=5)
    decision = validate_booking(_request(adults=6), _slot(tour), tour)
    assert decision.reason == RejectReason.MAXIMUM_EXCEEDED
    assert decision.context["limit"] == 5


def test_insufficient_seats() -> None:
    tour = _tour()
    decision = validate_booking(_request(adults=3), _slot(tour, booked_count=13), tour)
    assert decision.reason == RejectReason.INSUFFICIENT_CAPACITY
    assert decision.context["remaining"] == 2
    assert "2 seats" in decision.detail


def test_vehicle_slot_guests_limited_by_remaining_units() -> None:
    transfer = _transfer(type="Private", vehicle="Van A", maximumPerson=None)
    empty_slot = _slot(transfer, time="08:00", capacity=3, booked_count=0, per_vehicle=True)
    request = _request(package_id="tr-1", time="08:00", adults=4, pickup_location="Hotel Strawberry Park")

    decision = validate_booking(request, empty_slot, transfer)
    assert decision.reason == RejectReason.INSUFFICIENT_CAPACITY
    assert decision.context == {"remaining": 3, "requested": 4}
    assert "3 vehicles" in decision.detail

    assert validate_booking(replace(request, adults=3), empty_slot, transfer).accepted
    assert validate_booking(replace(request, adults=1), replace(empty_slot, booked_count=3), transfer).reason == (
        RejectReason.INSUFFICIENT_CAPACITY
    )


def test_co_tour_total() -> None:
    tour = _tour(minimumPerson=1)
    decision = validate_booking(_request(adults=2, children=1), _slot(tour), tour)
    assert decision.accepted
    assert decision.total == 250


def test_private_tour_priced_per_group_of_eight() -> None:
    tour = _tour(type="private", newPrice=300, minimumPerson=1, maximumPerson=None)
    decision = validate_booking(_request(adults=10), _slot(tour), tour)
    assert decision.total == 600
    assert calculate_total(tour, 8, 3) == 300


def test_transfer_requires_pickup_location() -> None:
    transfer = _transfer()
    request = _request(package_id="tr-1", time="08:00", adults=2, pickup_location="   ")
    decision = validate_booking(request, _slot(transfer, time="08:00"), transfer)
    assert decision.reason == RejectReason.PICKUP_REQUIRED


def test_tour_does_not_require_pickup() -> None:
    tour = _tour()
    assert validate_booking(_request(pickup_location=""), _slot(tour), tour).accepted


@pytest.mark.parametrize(
    "contact,field",
    [
        (ContactInfo(email="a@b.co", phone="1"), "name"),
        (ContactInfo(name="A", phone="1"), "email"),
        (ContactInfo(name="A", email="a@b.co", phone=" "), "phone"),
        (ContactInfo(name="A", email="not-an-email", phone="1"), "email"),
    ],
)
def test_invalid_contact(contact: ContactInfo, field: str) -> None:
    tour = _tour()
    decision = validate_booking(_request(contact=contact), _slot(tour), tour)
    assert decision.reason == RejectReason.INVALID_CONTACT
    assert decision.context["field"] == field


@pytest.mark.parametrize("overrides", [{"date": None}, {"time": ""}])
def test_missing_date_or_time_is_slot_not_found(overrides: dict) -> None:
    tour = _tour()
    assert validate_booking(_request(**overrides), _slot(tour), tour).reason == RejectReason.SLOT_NOT_FOUND


def test_mismatched_or_missing_slot_is_slot_not_found() -> None:
    tour = _tour()
    assert validate_booking(_request(), None, tour).reason == RejectReason.SLOT_NOT_FOUND
    assert validate_booking(_request(time="14:00"), _slot(tour), tour).reason == RejectReason.SLOT_NOT_FOUND
    assert validate_booking(_request(date="2025-03-02"), _slot(tour), tour).reason == RejectReason.SLOT_NOT_FOUND


def test_unavailable_slot_is_slot_not_found() -> None:
    tour = _tour()
    decision = validate_booking(_request(), _slot(tour, is_available=False), tour)
    assert decision.reason == RejectReason.SLOT_NOT_FOUND
    assert "no longer available" in decision.detail


def test_first_failing_check_wins() -> None:
    # Below minimum, over maximum capacity and missing contact at once: minimum is reported.
    tour = _tour()
    request = _request(adults=0, children=2, contact=ContactInfo())
    decision = validate_booking(request, _slot(tour, capacity=1), tour)
    assert decision.reason == RejectReason.MINIMUM_NOT_MET


@pytest.mark.parametrize("overrides", [{"adults": -1}, {"children": 1.5}, {"adults": True}, {"adults": "2"}])
def test_malformed_counts_raise(overrides: dict) -> None:
    tour = _tour()
    with pytest.raises(MalformedInputError):
        validate_booking(_request(**overrides), _slot(tour), tour)


def test_unparseable_date_raises() -> None:
    tour = _tour()
    with pytest.raises(MalformedInputError):
        validate_booking(_request(date="next tuesday"), _slot(tour), tour)


def test_validation_is_deterministic() -> None:
    tour = _tour()
    request, slot = _request(adults=2), _slot(tour)
    assert validate_booking(request, slot, tour) == validate_booking(request, slot, tour)
