import logging
from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError as SchemaValidationError

from tourbook.services import AvailabilityIndex

TODAY = date(2024, 1, 1)
NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def multi_tour(make_tour):
    return make_tour(
        pricingOptions=[
            {"id": "std", "name": "Standard", "price": 100},
            {
                "id": "promo",
                "name": "Promo",
                "price": 120,
                "discount": {
                    "enabled": True,
                    "percentage": 25,
                    "dateRange": {"from": "2023-12-01", "to": "2024-02-01"},
                },
            },
        ],
        tourDates={
            "scheduleType": "multiple",
            "days": 2,
            "departures": [
                {
                    "id": "weekly",
                    "pattern": "weekly",
                    "startDate": "2024-01-01",
                    "endDate": "2024-01-22",
                    "selectedPricingOptions": ["std"],
                },
                {
                    "id": "special",
                    "dateRange": {"from": "2024-01-08"},
                    "selectedPricingOptions": ["promo"],
                },
            ],
        },
    )


def build(tour):
    return AvailabilityIndex.build(tour, today=TODAY, now=NOW)


def test_index_entries(multi_tour):
    index = build(multi_tour)
    assert index.dates() == [date(2024, 1, 1), date(2024, 1, 8), date(2024, 1, 15), date(2024, 1, 22)]
    assert list(index) == ["2024-01-01", "2024-01-08", "2024-01-15", "2024-01-22"]
    assert len(index) == 4

    entry = index.get("2024-01-15")
    assert entry.price == 100
    assert entry.effective_price == 100
    assert entry.discounted_price is None
    assert entry.end_date == date(2024, 1, 16)
    assert entry.departure_id == "weekly"


def test_later_departure_wins_collision(multi_tour, caplog):
    with caplog.at_level(logging.WARNING):
        index = build(multi_tour)

    entry = index.get(date(2024, 1, 8))
    assert entry.departure_id == "special"
    assert entry.price == 120
    assert entry.effective_price == pytest.approx(90)
    assert entry.discounted_price == pytest.approx(90)
    assert entry.has_discount
    assert entry.discount_percentage == 25
    assert index.collisions == ("2024-01-08",)
    assert "2024-01-08" in caplog.text


def test_lookup_helpers(multi_tour):
    index = build(multi_tour)
    assert date(2024, 1, 15) in index
    assert "2024-01-15" in index
    assert index.is_available(date(2024, 1, 22))
    assert not index.is_available(date(2024, 1, 2))
    assert index.get("2024-02-01") is None
    assert index.lowest_price() == pytest.approx(90)


def test_month_grouping(make_tour):
    tour = make_tour(tourDates={
        "scheduleType": "multiple",
        "departures": [{"pattern": "biweekly", "startDate": "2024-01-22", "endDate": "2024-02-29"}],
    })
    months = build(tour).by_month()
    assert list(months) == ["2024-01", "2024-02"]
    assert [e.date for e in months["2024-02"]] == [date(2024, 2, 5), date(2024, 2, 19)]


def test_sale_applies_to_every_date(multi_tour):
    tour = multi_tour.model_copy(update={"sale_enabled": True, "sale_price": 50})
    index = build(tour)
    assert {e.effective_price for e in index.entries()} == {50}
    assert all(e.discounted_price == 50 for e in index.entries())


def test_build_is_deterministic(multi_tour):
    assert build(multi_tour).entries() == build(multi_tour).entries()


def test_entries_are_frozen(multi_tour):
    entry = build(multi_tour).entries()[0]
    with pytest.raises(SchemaValidationError):
        entry.price = 1


def test_empty_schedule(make_tour):
    index = build(make_tour())
    assert len(index) == 0
    assert index.entries() == []
    assert index.lowest_price() is None
    assert index.collisions == ()


def test_past_dates_not_indexed(multi_tour):
    index = AvailabilityIndex.build(multi_tour, today=date(2024, 1, 10), now=NOW)
    assert index.dates() == [date(2024, 1, 15), date(2024, 1, 22)]
