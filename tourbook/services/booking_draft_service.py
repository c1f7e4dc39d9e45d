import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..api.v1.schemas.tour_schemas import Tour
from ..api.v1.schemas.booking_schemas import (
    BookingForm, BookingSubmission, BookingPricing, ContactInfo, Participants
)
from ..api.v1.schemas.availability_schemas import QuoteOut
from ..core.clock import local_now
from ..core.config import get_settings
from ..core.exceptions import ValidationError
from .availability_service import AvailabilityIndex
from .pricing_service import PriceResolver

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Children pay a fixed share of the resolved adult price
CHILD_PRICE_RATIO = 0.70


@dataclass(frozen=True)
class BookingDraft:
    submission: BookingSubmission
    original_price: float

    def to_quote(self) -> QuoteOut:
        pricing = self.submission.pricing
        return QuoteOut(
            departure_date=self.submission.departure_date,
            adults=self.submission.participants.adults,
            children=self.submission.participants.children,
            original_price=self.original_price,
            base_price=pricing.base_price,
            adult_price=pricing.adult_price,
            child_price=pricing.child_price,
            total_price=pricing.total_price,
            currency=pricing.currency,
        )


class BookingDraftBuilder:
    """Validates a booking form and prices it against a tour's availability"""

    def __init__(self, price_resolver: Optional[PriceResolver] = None, currency: Optional[str] = None):
        self.price_resolver = price_resolver or PriceResolver()
        self.currency = currency or get_settings().DEFAULT_CURRENCY

    def build(
        self,
        tour: Tour,
        form: BookingForm,
        index: Optional[AvailabilityIndex] = None,
        today: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> BookingDraft:
        """Return a priced draft or raise ValidationError for the first bad field"""
        now = now or local_now()
        today = today or now.date()

        departure_date = self._validate(form, today)

        index = index or AvailabilityIndex.build(tour, today=today, now=now, price_resolver=self.price_resolver)
        entry = index.get(departure_date)
        if entry is not None:
            original_price, unit_price = entry.price, entry.effective_price
        else:
            # Dates outside the index (flexible schedules) take the tour-level price
            resolved = self.price_resolver.resolve(tour, None, departure_date, now=now)
            original_price, unit_price = resolved.base_price, resolved.effective_price

        adult_price = unit_price * form.adults
        child_price = unit_price * form.children * CHILD_PRICE_RATIO

        submission = BookingSubmission(
            tour_id=tour.id,
            tour_title=tour.title,
            tour_code=tour.booking_code,
            departure_date=departure_date,
            participants=Participants(adults=form.adults, children=form.children),
            pricing=BookingPricing(
                base_price=unit_price,
                adult_price=adult_price,
                child_price=child_price,
                total_price=adult_price + child_price,
                currency=self.currency,
            ),
            contact_info=ContactInfo(
                full_name=form.full_name.strip(),
                email=form.email.strip(),
                phone=form.phone.strip(),
            ),
            special_requests=form.special_requests or None,
        )
        return BookingDraft(submission=submission, original_price=original_price)

    def _validate(self, form: BookingForm, today: date) -> date:
        if not form.full_name.strip():
            raise ValidationError("Full name is required", field="full_name")
        if not form.email.strip():
            raise ValidationError("Email is required", field="email")
        if not form.phone.strip():
            raise ValidationError("Phone is required", field="phone")
        if not form.departure_date:
            raise ValidationError("Departure date is required", field="departure_date")

        if not EMAIL_PATTERN.match(form.email.strip()):
            raise ValidationError("Please enter a valid email address", field="email")

        departure_date = self._parse_date(form.departure_date)
        if departure_date < today:
            raise ValidationError("Departure date cannot be in the past", field="departure_date")

        if form.adults < 1:
            raise ValidationError("At least one adult is required", field="adults")
        if form.children < 0:
            raise ValidationError("Children cannot be negative", field="children")

        return departure_date

    @staticmethod
    def _parse_date(value) -> date:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        try:
            return date.fromisoformat(str(value).strip()[:10])
        except ValueError:
            raise ValidationError("Invalid date format. Use YYYY-MM-DD", field="departure_date")
