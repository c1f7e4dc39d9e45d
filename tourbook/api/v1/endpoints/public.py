"""Storefront endpoints: availability calendar, quotes and booking submission."""

from __future__ import annotations

from fastapi import APIRouter, Path
from starlette.concurrency import run_in_threadpool

from ....deps import BookingServiceDep, ClientDep, LedgerDep
from ....services import AvailabilityIndex, BookingDraftBuilder
from ..schemas import AvailabilityOut, BookingCreatedOut, BookingForm, QuoteOut

router = APIRouter()


@router.get("/tours/{tour_id}/availability", response_model=AvailabilityOut)
async def tour_availability(client: ClientDep, tour_id: str = Path(..., min_length=1)):
    """Bookable dates with per-adult prices for a tour."""
    tour = await client.get_tour(tour_id)
    index = AvailabilityIndex.build(tour)
    return AvailabilityOut(
        tour_id=tour.id,
        schedule_type=tour.tour_dates.schedule_type if tour.tour_dates else None,
        entries=index.entries(),
        collisions=list(index.collisions),
        lowest_price=index.lowest_price(),
    )


@router.post("/tours/{tour_id}/quote", response_model=QuoteOut)
async def tour_quote(client: ClientDep, form: BookingForm, tour_id: str = Path(..., min_length=1)):
    """Price a booking form without submitting it."""
    tour = await client.get_tour(tour_id)
    return BookingDraftBuilder().build(tour, form).to_quote()


@router.post("/tours/{tour_id}/bookings", response_model=BookingCreatedOut, status_code=201)
async def create_booking(
    client: ClientDep,
    service: BookingServiceDep,
    ledger: LedgerDep,
    form: BookingForm,
    tour_id: str = Path(..., min_length=1),
):
    """Submit a booking and add it to the visitor's cart."""
    tour = await client.get_tour(tour_id)
    booking = await service.submit(tour, form)
    return BookingCreatedOut(
        booking_reference=booking.booking_reference,
        booking=booking,
        cart_count=await run_in_threadpool(ledger.count),
    )
