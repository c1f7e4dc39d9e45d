import logging
from typing import Any, List, Optional, Tuple

from pydantic import ValidationError as SchemaValidationError

from ..api.v1.schemas.booking_schemas import CartBooking
from ..api.v1.schemas.cart_schemas import CartSummary, CheckoutSummary
from ..core.config import get_settings
from ..core.exceptions import NotFoundError, ValidationError
from ..infrastructure.cart_store import CartStore

logger = logging.getLogger(__name__)

# Children count as half a seat when a cart line is re-priced
CART_CHILD_WEIGHT = 0.5

PROMO_CODES = {
    "SAVE10": 0.10,
    "SAVE20": 0.20,
}

PARTICIPANT_MINIMUMS = {
    "adults": 1,
    "children": 0,
}


class CartLedger:
    """Confirmed bookings held for one visitor until checkout.

    Every mutation reloads the stored array, changes it and writes it back
    whole. Concurrent writers to the same key race; the last write wins.
    """

    def __init__(self, store: CartStore, tax_rate: Optional[float] = None):
        self.store = store
        self.tax_rate = get_settings().CHECKOUT_TAX_RATE if tax_rate is None else tax_rate

    # ---------- Reads ----------
    def _entries(self) -> List[Tuple[Any, Optional[CartBooking]]]:
        """Stored records paired with their parsed booking, None when unparseable"""
        entries = []
        for raw in self.store.load():
            try:
                booking = CartBooking.model_validate(raw)
            except SchemaValidationError:
                logger.warning("Skipping malformed cart booking under %s: %s", self.store.key, raw)
                booking = None
            entries.append((raw, booking))
        return entries

    def bookings(self) -> List[CartBooking]:
        return [booking for _, booking in self._entries() if booking is not None]

    def get(self, booking_reference: str) -> CartBooking:
        for booking in self.bookings():
            if booking.booking_reference == booking_reference:
                return booking
        raise NotFoundError("Booking", booking_reference)

    def count(self) -> int:
        return len(self.bookings())

    def subtotal(self) -> float:
        return sum(b.pricing.total_price for b in self.bookings())

    # ---------- Mutations ----------
    # Entries with raw set to None are rewritten from the booking; all other
    # stored records, including unparseable ones, are written back verbatim.
    def add(self, booking: CartBooking) -> List[CartBooking]:
        entries = [
            (raw, b) for raw, b in self._entries()
            if b is None or b.booking_reference != booking.booking_reference
        ]
        entries.append((None, booking))
        self._save(entries)
        return [b for _, b in entries if b is not None]

    def remove(self, booking_reference: str) -> List[CartBooking]:
        entries = self._entries()
        remaining = [
            (raw, b) for raw, b in entries
            if b is None or b.booking_reference != booking_reference
        ]
        if len(remaining) == len(entries):
            raise NotFoundError("Booking", booking_reference)
        self._save(remaining)
        return [b for _, b in remaining if b is not None]

    def clear(self) -> None:
        self.store.clear()

    def update_participants(self, booking_reference: str, type: str, delta: int) -> CartBooking:
        """Change adults or children on one line and re-price it.

        The stored total is divided by ``adults + children * 0.5`` to get a
        unit price, which is then multiplied by the new weighted head count.
        """
        if type not in PARTICIPANT_MINIMUMS:
            raise ValidationError("Participant type must be 'adults' or 'children'", field="type")

        entries = self._entries()
        for i, (_, booking) in enumerate(entries):
            if booking is not None and booking.booking_reference == booking_reference:
                break
        else:
            raise NotFoundError("Booking", booking_reference)

        participants = booking.participants
        unit_price = booking.pricing.total_price / self._weighted(participants.adults, participants.children)

        counts = {"adults": participants.adults, "children": participants.children}
        counts[type] = max(PARTICIPANT_MINIMUMS[type], counts[type] + delta)

        updated = booking.model_copy(update={
            "participants": participants.model_copy(update=counts),
            "pricing": booking.pricing.model_copy(update={
                "total_price": unit_price * self._weighted(counts["adults"], counts["children"]),
            }),
        })
        entries[i] = (None, updated)
        self._save(entries)
        return updated

    # ---------- Summaries ----------
    def summary(self, promo_code: Optional[str] = None) -> CartSummary:
        """Cart totals with an optional promo code applied to the subtotal"""
        subtotal = self.subtotal()
        code = None
        rate = 0.0
        if promo_code and promo_code.strip():
            code = promo_code.strip().upper()
            if code not in PROMO_CODES:
                raise ValidationError("Invalid promo code", field="promo_code")
            rate = PROMO_CODES[code]
        discount = subtotal * rate
        return CartSummary(
            subtotal=subtotal,
            promo_code=code,
            discount_rate=rate,
            discount_amount=discount,
            total=subtotal - discount,
            item_count=self.count(),
        )

    def checkout_summary(self) -> CheckoutSummary:
        subtotal = self.subtotal()
        tax = subtotal * self.tax_rate
        return CheckoutSummary(
            subtotal=subtotal,
            tax=tax,
            total=subtotal + tax,
            item_count=self.count(),
        )

    @staticmethod
    def _weighted(adults: int, children: int) -> float:
        return adults + children * CART_CHILD_WEIGHT

    def _save(self, entries: List[Tuple[Any, Optional[CartBooking]]]) -> None:
        self.store.save([
            raw if raw is not None else booking.model_dump(mode="json", by_alias=True)
            for raw, booking in entries
        ])
