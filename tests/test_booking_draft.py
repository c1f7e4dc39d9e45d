from datetime import date, datetime, timezone

import pytest

from tourbook.api.v1.schemas import BookingForm
from tourbook.core import ValidationError
from tourbook.services import AvailabilityIndex, BookingDraftBuilder

TODAY = date(2024, 2, 1)
NOW = datetime(2024, 2, 1, 9, 0, tzinfo=timezone.utc)


def form(**fields):
    data = {
        "fullName": "Ana Lee",
        "email": "ana@example.com",
        "phone": "+100000000",
        "departureDate": "2024-03-01",
        "adults": 2,
        "children": 1,
    }
    data.update(fields)
    return BookingForm.model_validate(data)


@pytest.fixture
def tour(make_tour):
    return make_tour(
        code="LW-01",
        price=80,
        tourDates={"scheduleType": "fixed", "singleDateRange": {"from": "2024-03-01", "to": "2024-03-03"}},
    )


def build(tour, booking_form, **kwargs):
    return BookingDraftBuilder().build(tour, booking_form, today=TODAY, now=NOW, **kwargs)


def test_price_breakdown(tour):
    draft = build(tour, form())
    pricing = draft.submission.pricing
    assert pricing.base_price == 80
    assert pricing.adult_price == pytest.approx(160)
    assert pricing.child_price == pytest.approx(56)
    assert pricing.total_price == pytest.approx(216)
    assert pricing.currency == "USD"


def test_submission_payload(tour):
    submission = build(tour, form(specialRequests="Window seat")).submission
    assert submission.tour_id == tour.id
    assert submission.tour_code == "LW-01"
    assert submission.departure_date == date(2024, 3, 1)
    assert (submission.participants.adults, submission.participants.children) == (2, 1)
    assert submission.contact_info.full_name == "Ana Lee"
    assert submission.special_requests == "Window seat"

    payload = submission.model_dump(mode="json", by_alias=True)
    assert payload["departureDate"] == "2024-03-01"
    assert payload["contactInfo"]["fullName"] == "Ana Lee"
    assert payload["pricing"]["totalPrice"] == pytest.approx(216)


def test_tour_code_derived_from_id(make_tour):
    tour = make_tour(id="64f1c0ffee1234abcd", price=10)
    submission = build(tour, form()).submission
    assert submission.tour_code == "TOUR-1234ABCD"


def test_discounted_date_uses_effective_price(make_tour):
    tour = make_tour(
        pricingOptions=[{
            "id": "std",
            "name": "Standard",
            "price": 100,
            "discount": {"enabled": True, "percentage": 20, "dateRange": {"from": "2024-01-01"}},
        }],
        tourDates={
            "scheduleType": "multiple",
            "departures": [{"dateRange": {"from": "2024-03-01"}, "selectedPricingOptions": ["std"]}],
        },
    )
    draft = build(tour, form())
    assert draft.original_price == 100
    assert draft.submission.pricing.base_price == pytest.approx(80)
    assert draft.submission.pricing.total_price == pytest.approx(216)


def test_prebuilt_index_is_used(tour):
    index = AvailabilityIndex.build(tour.model_copy(update={"price": 60}), today=TODAY, now=NOW)
    draft = build(tour, form(children=0), index=index)
    assert draft.submission.pricing.total_price == pytest.approx(120)


def test_unindexed_date_uses_tour_price(make_tour):
    tour = make_tour(price=90, saleEnabled=True, salePrice=70)
    draft = build(tour, form(adults=1, children=0, departureDate="2024-05-05"))
    assert draft.original_price == 90
    assert draft.submission.pricing.total_price == 70


def test_quote(tour):
    quote = build(tour, form()).to_quote()
    assert quote.original_price == 80
    assert quote.total_price == pytest.approx(216)
    assert quote.adults == 2
    assert quote.children == 1


@pytest.mark.parametrize("fields, field", [
    ({"fullName": "", "email": "", "phone": "", "departureDate": None}, "full_name"),
    ({"fullName": "   ", "email": "bad"}, "full_name"),
    ({"email": "", "phone": ""}, "email"),
    ({"email": "not-an-email", "phone": ""}, "phone"),
    ({"departureDate": ""}, "departure_date"),
    ({"email": "ana@example"}, "email"),
    ({"email": "ana @example.com"}, "email"),
    ({"email": "not-an-email", "departureDate": "2023-01-01"}, "email"),
    ({"departureDate": "2024-01-31"}, "departure_date"),
    ({"departureDate": "03/01/2024"}, "departure_date"),
    ({"adults": 0}, "adults"),
    ({"children": -1}, "children"),
])
def test_first_failing_field(tour, fields, field):
    with pytest.raises(ValidationError) as exc:
        build(tour, form(**fields))
    assert exc.value.field == field
    assert exc.value.status_code == 400
    assert exc.value.details == {"field": field}


def test_today_is_allowed(tour):
    draft = build(tour, form(departureDate="2024-02-01", children=0))
    assert draft.submission.departure_date == TODAY


def test_iso_datetime_departure(tour):
    draft = build(tour, form(departureDate="2024-03-01T00:00:00.000Z"))
    assert draft.submission.departure_date == date(2024, 3, 1)
