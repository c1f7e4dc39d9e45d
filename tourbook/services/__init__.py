from .recurrence_service import RecurrenceExpander, ScheduleExpander
from .pricing_service import PriceResolver, ResolvedPrice
from .availability_service import AvailabilityIndex
from .booking_draft_service import BookingDraftBuilder, BookingDraft
from .cart_service import CartLedger
from .booking_service import BookingService

__all__ = [
    "RecurrenceExpander",
    "ScheduleExpander",
    "PriceResolver",
    "ResolvedPrice",
    "AvailabilityIndex",
    "BookingDraftBuilder",
    "BookingDraft",
    "CartLedger",
    "BookingService",
]
