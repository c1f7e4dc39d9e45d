import logging
from typing import Any, Dict, Optional

from starlette.concurrency import run_in_threadpool

from ..api.v1.schemas.booking_schemas import BookingForm, CartBooking
from ..api.v1.schemas.tour_schemas import Tour
from ..core.exceptions import ValidationError
from ..infrastructure.booking_api import BookingApiClient
from ..statuses import BookingStatus, PaymentStatus
from .availability_service import AvailabilityIndex
from .booking_draft_service import BookingDraftBuilder
from .cart_service import CartLedger

logger = logging.getLogger(__name__)


class BookingService:
    def __init__(
        self,
        client: BookingApiClient,
        ledger: Optional[CartLedger] = None,
        draft_builder: Optional[BookingDraftBuilder] = None,
    ):
        self.client = client
        self.ledger = ledger
        self.draft_builder = draft_builder or BookingDraftBuilder()

    async def submit(
        self,
        tour: Tour,
        form: BookingForm,
        index: Optional[AvailabilityIndex] = None,
        **clock,
    ) -> CartBooking:
        """Validate, submit and add the confirmed booking to the cart.

        Validation failures raise before anything is sent. A failed remote
        call leaves the cart as it was.
        """
        draft = self.draft_builder.build(tour, form, index=index, **clock)
        submission = draft.submission

        reference, _ = await self.client.create_booking(submission)
        logger.info("Booking %s created for tour %s on %s", reference, tour.id, submission.departure_date)

        booking = CartBooking(
            booking_reference=reference,
            tour_id=submission.tour_id,
            tour_title=submission.tour_title,
            tour_code=submission.tour_code,
            departure_date=submission.departure_date,
            participants=submission.participants,
            contact_name=submission.contact_info.full_name,
            contact_email=submission.contact_info.email,
            contact_phone=submission.contact_info.phone,
            special_requests=submission.special_requests,
            pricing=submission.pricing,
        )
        if self.ledger is not None:
            await run_in_threadpool(self.ledger.add, booking)
        return booking

    async def update_booking_status(
        self, booking_id: str, status: str, notes: Optional[str] = None
    ) -> Dict[str, Any]:
        """Relay an admin status change; the server owns the transition rules"""
        try:
            status = BookingStatus(status)
        except ValueError:
            raise ValidationError(
                f"Invalid status. Must be one of: {', '.join(s.value for s in BookingStatus)}",
                field="status"
            )
        return await self.client.update_booking_status(booking_id, status, notes)

    async def update_payment_status(
        self,
        booking_id: str,
        payment_status: str,
        paid_amount: Optional[float] = None,
        transaction_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        try:
            payment_status = PaymentStatus(payment_status)
        except ValueError:
            raise ValidationError(
                f"Invalid payment status. Must be one of: {', '.join(s.value for s in PaymentStatus)}",
                field="payment_status"
            )
        if paid_amount is not None and paid_amount < 0:
            raise ValidationError("Paid amount cannot be negative", field="paid_amount")
        return await self.client.update_payment_status(booking_id, payment_status, paid_amount, transaction_id)

    async def get_credential(self, user_id: str, key_type: str) -> str:
        if not key_type.strip():
            raise ValidationError("Key type is required", field="key_type")
        return await self.client.get_decrypted_key(user_id, key_type.strip())
