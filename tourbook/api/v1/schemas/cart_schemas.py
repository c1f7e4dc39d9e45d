from typing import Optional, List, Literal
from pydantic import Field

from .tour_schemas import CamelModel
from .booking_schemas import CartBooking


class ParticipantsUpdate(CamelModel):
    type: Literal["adults", "children"]
    delta: int = Field(..., ge=-100, le=100)


class CartOut(CamelModel):
    bookings: List[CartBooking]
    count: int
    subtotal: float


class CartSummary(CamelModel):
    """Cart page totals; promo discounts apply to the subtotal only"""
    subtotal: float
    promo_code: Optional[str] = None
    discount_rate: float = 0
    discount_amount: float = 0
    total: float
    item_count: int


class CheckoutSummary(CamelModel):
    """Checkout page totals with flat tax on the subtotal"""
    subtotal: float
    tax: float
    total: float
    item_count: int
