from datetime import date, datetime, timezone

import pytest

from tourbook.api.v1.schemas import BookingPricing, CartBooking, Participants, Tour
from tourbook.infrastructure import MemoryCartStore, make_engine, make_session_factory

# Fixed clock for everything date-sensitive
TODAY = date(2024, 1, 1)
NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def make_tour():
    def _make(**fields):
        data = {"id": "64f1c0ffee1234abcd", "title": "Lake Walk", "price": 100}
        data.update(fields)
        return Tour.model_validate(data)
    return _make


@pytest.fixture
def make_cart_booking():
    def _make(reference="BK-1", adults=2, children=0, total=200.0, **fields):
        data = dict(
            booking_reference=reference,
            tour_id="t1",
            tour_title="Lake Walk",
            tour_code="LW-1",
            departure_date=date(2024, 3, 1),
            participants=Participants(adults=adults, children=children),
            contact_name="Ana Lee",
            contact_email="ana@example.com",
            contact_phone="+100000000",
            pricing=BookingPricing(
                base_price=total / max(adults, 1),
                adult_price=total,
                child_price=0,
                total_price=total,
            ),
        )
        data.update(fields)
        return CartBooking(**data)
    return _make


@pytest.fixture
def memory_store():
    return MemoryCartStore(key="cartBookings")


@pytest.fixture
def session_factory():
    engine = make_engine("sqlite://", echo=False)
    yield make_session_factory(engine)
    engine.dispose()
