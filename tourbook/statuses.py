from enum import Enum


class BookingStatus(str, Enum):
    """Server-held booking status.

    ``pending`` moves to ``confirmed`` or ``cancelled``; a confirmed booking
    can later be marked ``completed``. Transitions are owned by the booking
    server, the values are only checked for membership here.
    """

    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"
    completed = "completed"


class PaymentStatus(str, Enum):
    """Payment status, changed independently of the booking status"""

    unpaid = "unpaid"
    partial = "partial"
    paid = "paid"
    refunded = "refunded"
