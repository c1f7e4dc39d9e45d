"""Per-adult price resolution for a tour departure.

This is the only place discounts are resolved. The availability index, the
booking draft and the cart all consume ``ResolvedPrice`` values produced here.

Precedence, first match wins:

1. tour-wide sale override (``sale_enabled`` and a sale price),
2. the departure's first selected pricing option, with its discount applied
   while ``now`` is inside the discount window,
3. the tour's base price.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional

from ..api.v1.schemas.tour_schemas import Tour, Departure, PricingOption, Discount
from ..core import discounts
from ..core.clock import local_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedPrice:
    base_price: float
    effective_price: float
    source: str  # "sale" | "option" | "discount" | "base"
    option_id: Optional[str] = None

    @property
    def has_discount(self) -> bool:
        return discounts.has_discount(self.base_price, self.effective_price)

    @property
    def discount_percentage(self) -> int:
        return discounts.discount_percentage(self.base_price, self.effective_price)


class PriceResolver:
    """Resolves the per-adult price of a tour on a given date"""

    def resolve(
        self,
        tour: Tour,
        departure: Optional[Departure] = None,
        on_date: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> ResolvedPrice:
        # on_date is part of the contract but discount windows are checked against now
        if tour.sale_enabled and tour.sale_price:
            return ResolvedPrice(
                base_price=tour.price,
                effective_price=tour.sale_price,
                source="sale",
            )

        option = self.selected_option(tour, departure)
        if option is not None:
            now = now or local_now()
            if now.tzinfo is None:
                now = now.replace(tzinfo=timezone.utc)
            effective = self._apply_discount(option.price, option.discount, now)
            return ResolvedPrice(
                base_price=option.price,
                effective_price=effective,
                source="option" if effective == option.price else "discount",
                option_id=option.id,
            )

        return ResolvedPrice(base_price=tour.price, effective_price=tour.price, source="base")

    @staticmethod
    def selected_option(tour: Tour, departure: Optional[Departure]) -> Optional[PricingOption]:
        """Pricing option named first on the departure, if the tour still has it"""
        if departure is None or not departure.selected_pricing_options:
            return None

        option_id = departure.selected_pricing_options[0]
        for option in tour.pricing_options:
            if option.id == option_id:
                return option
        for group in tour.pricing_groups:
            for option in group.options:
                if option.id == option_id:
                    return option

        logger.debug("Pricing option %s not found on tour %s", option_id, tour.id)
        return None

    @staticmethod
    def _apply_discount(base_price: float, discount: Optional[Discount], now: datetime) -> float:
        if discount is None or not discount.enabled:
            return base_price
        if discount.date_range is not None and not discount.date_range.contains(now):
            return base_price

        if discount.mode == "percentage":
            return base_price - base_price * discount.percentage / 100
        # Fixed mode: the discount price is the final price, even above base
        return discount.fixed_price or base_price
