from typing import Optional, Union
from datetime import date
from pydantic import Field, field_validator

from ....statuses import BookingStatus, PaymentStatus
from .tour_schemas import CamelModel, coerce_calendar_date


class Participants(CamelModel):
    adults: int = Field(1, ge=1)
    children: int = Field(0, ge=0)


class ContactInfo(CamelModel):
    full_name: str
    email: str
    phone: str
    country: Optional[str] = None


class BookingPricing(CamelModel):
    """Per-booking price breakdown; base_price is the resolved per-adult price"""
    base_price: float
    adult_price: float
    child_price: float
    total_price: float
    currency: str = "USD"


class BookingForm(CamelModel):
    """Raw booking form input.

    Deliberately loose: the draft builder reports the first failing field
    itself, so nothing is rejected at parse time.
    """
    full_name: str = ""
    email: str = ""
    phone: str = ""
    departure_date: Union[date, str, None] = None
    adults: int = 1
    children: int = 0
    special_requests: str = ""


class BookingSubmission(CamelModel):
    """Payload sent to the booking server"""
    tour_id: str
    tour_title: str
    tour_code: str
    departure_date: date
    participants: Participants
    pricing: BookingPricing
    contact_info: ContactInfo
    special_requests: Optional[str] = None


class CartBooking(CamelModel):
    """Confirmed booking held in the cart until purchase"""
    booking_reference: str
    tour_id: str
    tour_title: str
    tour_code: str
    departure_date: date
    participants: Participants
    contact_name: str
    contact_email: str
    contact_phone: str
    special_requests: Optional[str] = None
    pricing: BookingPricing

    @field_validator("departure_date", mode="before")
    @classmethod
    def _calendar_date(cls, v):
        return coerce_calendar_date(v)


class BookingCreatedOut(CamelModel):
    booking_reference: str
    booking: CartBooking
    cart_count: int


class BookingStatusUpdate(CamelModel):
    """Admin booking status change"""
    status: BookingStatus
    notes: Optional[str] = None


class PaymentStatusUpdate(CamelModel):
    """Admin payment status change"""
    payment_status: PaymentStatus
    paid_amount: Optional[float] = Field(None, ge=0)
    transaction_id: Optional[str] = None


class CredentialOut(CamelModel):
    user_id: str
    key_type: str
    value: str
