from typing import Optional, List
from datetime import date

from ....core import discounts
from .tour_schemas import CamelModel


class AvailabilityEntry(CamelModel):
    """Bookable date with its per-adult price"""
    date: date
    end_date: Optional[date] = None
    price: float
    effective_price: float
    discounted_price: Optional[float] = None
    departure_id: Optional[str] = None
    departure_label: Optional[str] = None

    model_config = {
        **CamelModel.model_config,
        "frozen": True,
    }

    @property
    def has_discount(self) -> bool:
        return discounts.has_discount(self.price, self.effective_price)

    @property
    def discount_percentage(self) -> int:
        return discounts.discount_percentage(self.price, self.effective_price)


class AvailabilityOut(CamelModel):
    tour_id: str
    schedule_type: Optional[str] = None
    entries: List[AvailabilityEntry]
    collisions: List[str] = []
    lowest_price: Optional[float] = None


class QuoteOut(CamelModel):
    """Priced booking draft returned without submitting it"""
    departure_date: date
    adults: int
    children: int
    original_price: float
    base_price: float
    adult_price: float
    child_price: float
    total_price: float
    currency: str
