from .tour_schemas import (
    CamelModel, DateRange, DiscountWindow, Discount, PricingOption, PricingGroup,
    Departure, TourDates, Tour
)
from .availability_schemas import AvailabilityEntry, AvailabilityOut, QuoteOut
from .booking_schemas import (
    Participants, ContactInfo, BookingPricing, BookingForm, BookingSubmission,
    CartBooking, BookingCreatedOut, BookingStatusUpdate, PaymentStatusUpdate,
    CredentialOut
)
from .cart_schemas import ParticipantsUpdate, CartOut, CartSummary, CheckoutSummary

__all__ = [
    # Tour schemas
    "CamelModel",
    "DateRange",
    "DiscountWindow",
    "Discount",
    "PricingOption",
    "PricingGroup",
    "Departure",
    "TourDates",
    "Tour",

    # Availability schemas
    "AvailabilityEntry",
    "AvailabilityOut",
    "QuoteOut",

    # Booking schemas
    "Participants",
    "ContactInfo",
    "BookingPricing",
    "BookingForm",
    "BookingSubmission",
    "CartBooking",
    "BookingCreatedOut",
    "BookingStatusUpdate",
    "PaymentStatusUpdate",
    "CredentialOut",

    # Cart schemas
    "ParticipantsUpdate",
    "CartOut",
    "CartSummary",
    "CheckoutSummary",
]
