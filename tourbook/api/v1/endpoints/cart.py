from __future__ import annotations

from fastapi import APIRouter, Query, Response

from ....deps import LedgerDep
from ..schemas import CartBooking, CartOut, CartSummary, CheckoutSummary, ParticipantsUpdate

router = APIRouter()


def _cart_out(ledger) -> CartOut:
    bookings = ledger.bookings()
    return CartOut(
        bookings=bookings,
        count=len(bookings),
        subtotal=sum(b.pricing.total_price for b in bookings),
    )


@router.get("", response_model=CartOut)
def get_cart(ledger: LedgerDep):
    return _cart_out(ledger)


@router.delete("", status_code=204)
def clear_cart(ledger: LedgerDep):
    ledger.clear()
    return Response(status_code=204)


@router.get("/summary", response_model=CartSummary)
def cart_summary(ledger: LedgerDep, promo_code: str | None = Query(None, max_length=32)):
    """Cart totals, optionally with a promo code applied."""
    return ledger.summary(promo_code)


@router.get("/checkout", response_model=CheckoutSummary)
def checkout_summary(ledger: LedgerDep):
    return ledger.checkout_summary()


@router.delete("/{booking_reference}", response_model=CartOut)
def remove_booking(ledger: LedgerDep, booking_reference: str):
    ledger.remove(booking_reference)
    return _cart_out(ledger)


@router.patch("/{booking_reference}/participants", response_model=CartBooking)
def update_participants(ledger: LedgerDep, booking_reference: str, body: ParticipantsUpdate):
    """Add or remove adults/children on a cart line and re-price it."""
    return ledger.update_participants(booking_reference, body.type, body.delta)
