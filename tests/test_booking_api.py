import json

import httpx
import pytest

from tourbook.api.v1.schemas import (
    BookingPricing, BookingSubmission, ContactInfo, Participants
)
from tourbook.core import ExternalServiceError, NotFoundError
from tourbook.infrastructure import BookingApiClient
from tourbook.statuses import BookingStatus, PaymentStatus

pytestmark = pytest.mark.anyio

TOUR = {"_id": "t-100", "title": "Lake Walk", "price": 80, "saleEnabled": False}


class Recorder:
    """MockTransport handler replaying queued responses"""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


def make_client(recorder, **kwargs):
    return BookingApiClient(
        base_url="http://booking.test",
        timeout=5,
        retry_attempts=3,
        retry_delay=0,
        transport=httpx.MockTransport(recorder),
        **kwargs,
    )


def submission():
    return BookingSubmission(
        tour_id="t-100",
        tour_title="Lake Walk",
        tour_code="LW-01",
        departure_date="2024-03-01",
        participants=Participants(adults=2, children=1),
        pricing=BookingPricing(base_price=80, adult_price=160, child_price=56, total_price=216),
        contact_info=ContactInfo(full_name="Ana Lee", email="ana@example.com", phone="+100000000"),
    )


async def test_get_tour_unwraps_envelope():
    recorder = Recorder(httpx.Response(200, json={"success": True, "data": TOUR, "message": "ok"}))
    client = make_client(recorder)

    tour = await client.get_tour("t-100")

    assert tour.id == "t-100"
    assert tour.price == 80
    assert recorder.requests[0].url.path == "/api/tours/t-100"
    await client.aclose()


async def test_get_tour_plain_body():
    client = make_client(Recorder(httpx.Response(200, json={"tour": TOUR})))
    assert (await client.get_tour("t-100")).title == "Lake Walk"


async def test_lookup_retries_busy_upstream():
    recorder = Recorder(
        httpx.Response(503),
        httpx.Response(502),
        httpx.Response(200, json={"data": TOUR}),
    )
    tour = await make_client(recorder).get_tour("t-100")
    assert tour.id == "t-100"
    assert len(recorder.requests) == 3


async def test_lookup_retries_transport_errors():
    recorder = Recorder(
        httpx.ConnectError("connection refused"),
        httpx.Response(200, json={"data": TOUR}),
    )
    await make_client(recorder).get_tour("t-100")
    assert len(recorder.requests) == 2


async def test_lookup_gives_up_after_attempts():
    recorder = Recorder(httpx.Response(503))
    with pytest.raises(ExternalServiceError) as exc:
        await make_client(recorder).get_tour("t-100")
    assert len(recorder.requests) == 3
    assert exc.value.status_code == 503
    assert exc.value.details == {"service": "booking-api", "upstream_status": 503}


async def test_missing_tour_is_not_retried():
    recorder = Recorder(httpx.Response(404, json={"success": False, "message": "Tour not found"}))
    with pytest.raises(NotFoundError):
        await make_client(recorder).get_tour("nope")
    assert len(recorder.requests) == 1


async def test_search_tours():
    recorder = Recorder(httpx.Response(200, json={"data": {"tours": [TOUR, {**TOUR, "_id": "t-101"}]}}))
    tours = await make_client(recorder).search_tours("lake", limit=5, category=None)
    assert [t.id for t in tours] == ["t-100", "t-101"]
    params = recorder.requests[0].url.params
    assert params["q"] == "lake"
    assert params["limit"] == "5"
    assert "category" not in params


async def test_create_booking():
    recorder = Recorder(httpx.Response(201, json={
        "success": True,
        "data": {"bookingReference": "BK-7F3A", "status": "pending", "paymentStatus": "unpaid"},
    }))
    reference, record = await make_client(recorder).create_booking(submission())

    assert reference == "BK-7F3A"
    assert record["status"] == "pending"
    request = recorder.requests[0]
    assert request.method == "POST"
    assert request.url.path == "/api/bookings"
    body = json.loads(request.content)
    assert body["tourId"] == "t-100"
    assert body["departureDate"] == "2024-03-01"
    assert body["contactInfo"]["fullName"] == "Ana Lee"
    assert body["pricing"]["totalPrice"] == 216
    assert "specialRequests" not in body


async def test_create_booking_nested_record():
    recorder = Recorder(httpx.Response(201, json={"data": {"booking": {"bookingReference": "BK-2"}}}))
    reference, record = await make_client(recorder).create_booking(submission())
    assert reference == "BK-2"
    assert record["bookingReference"] == "BK-2"


async def test_create_booking_is_sent_once():
    recorder = Recorder(httpx.Response(503))
    with pytest.raises(ExternalServiceError):
        await make_client(recorder).create_booking(submission())
    assert len(recorder.requests) == 1


async def test_create_booking_without_reference():
    recorder = Recorder(httpx.Response(201, json={"success": True, "data": {"status": "pending"}}))
    with pytest.raises(ExternalServiceError):
        await make_client(recorder).create_booking(submission())


async def test_update_booking_status():
    recorder = Recorder(httpx.Response(200, json={"data": {"status": "confirmed"}}))
    result = await make_client(recorder).update_booking_status("b-1", BookingStatus.confirmed, "Paid at desk")

    assert result == {"status": "confirmed"}
    request = recorder.requests[0]
    assert request.method == "PATCH"
    assert request.url.path == "/api/bookings/b-1/status"
    assert json.loads(request.content) == {"status": "confirmed", "notes": "Paid at desk"}


async def test_update_payment_status():
    recorder = Recorder(httpx.Response(200, json={"success": True}))
    await make_client(recorder).update_payment_status("b-1", PaymentStatus.partial, 50.0, "tx-9")

    request = recorder.requests[0]
    assert request.url.path == "/api/bookings/b-1/payment"
    assert json.loads(request.content) == {"paymentStatus": "partial", "paidAmount": 50.0, "transactionId": "tx-9"}


async def test_status_mutation_is_sent_once():
    recorder = Recorder(httpx.ConnectError("connection refused"))
    with pytest.raises(ExternalServiceError):
        await make_client(recorder).update_booking_status("b-1", BookingStatus.cancelled)
    assert len(recorder.requests) == 1


@pytest.mark.parametrize("body, expected", [
    ({"success": True, "data": "sk-live-123"}, "sk-live-123"),
    ({"success": True, "data": {"key": "sk-live-123"}}, "sk-live-123"),
    ({"success": True, "data": ""}, ""),
    ({"success": True, "data": None}, ""),
])
async def test_get_decrypted_key(body, expected):
    recorder = Recorder(httpx.Response(200, json=body))
    value = await make_client(recorder).get_decrypted_key("u-1", "stripe")
    assert value == expected
    request = recorder.requests[0]
    assert request.url.path == "/api/users/setting/u-1/key"
    assert request.url.params["keyType"] == "stripe"


async def test_invalid_json_body():
    recorder = Recorder(httpx.Response(200, content=b"<html>oops</html>"))
    with pytest.raises(ExternalServiceError):
        await make_client(recorder).update_booking_status("b-1", BookingStatus.confirmed)
