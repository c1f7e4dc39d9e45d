import logging
from datetime import date, datetime
from types import MappingProxyType
from typing import Dict, List, Optional, Iterator, Mapping

from ..api.v1.schemas.tour_schemas import Tour
from ..api.v1.schemas.availability_schemas import AvailabilityEntry
from ..core.clock import local_now
from .recurrence_service import RecurrenceExpander, ScheduleExpander
from .pricing_service import PriceResolver

logger = logging.getLogger(__name__)


def date_key(value: date) -> str:
    return value.strftime("%Y-%m-%d")


class AvailabilityIndex:
    """Read-only ``YYYY-MM-DD`` -> AvailabilityEntry lookup for one tour.

    Built in one pass by ``AvailabilityIndex.build``; a change to the tour's
    departures or pricing means building a new index.

    When two departures land on the same date the one processed later (list
    order) wins. Every such date is kept in ``collisions`` so callers can
    surface it.
    """

    def __init__(self, tour_id: str, entries: Dict[str, AvailabilityEntry], collisions: List[str]):
        self.tour_id = tour_id
        self._entries: Mapping[str, AvailabilityEntry] = MappingProxyType(dict(entries))
        self.collisions = tuple(collisions)

    @classmethod
    def build(
        cls,
        tour: Tour,
        today: Optional[date] = None,
        now: Optional[datetime] = None,
        schedule_expander: Optional[ScheduleExpander] = None,
        recurrence_expander: Optional[RecurrenceExpander] = None,
        price_resolver: Optional[PriceResolver] = None,
    ) -> "AvailabilityIndex":
        now = now or local_now()
        today = today or now.date()
        schedule_expander = schedule_expander or ScheduleExpander()
        recurrence_expander = recurrence_expander or RecurrenceExpander()
        price_resolver = price_resolver or PriceResolver()

        days = tour.tour_dates.days if tour.tour_dates else 1
        entries: Dict[str, AvailabilityEntry] = {}
        collisions: List[str] = []

        for departure in schedule_expander.departures(tour.tour_dates):
            for instance in recurrence_expander.expand(departure, today=today):
                resolved = price_resolver.resolve(tour, departure, instance, now=now)
                key = date_key(instance)
                if key in entries:
                    collisions.append(key)
                    logger.warning(
                        "Tour %s has more than one departure on %s; keeping %s",
                        tour.id, key, departure.id or departure.label
                    )
                entries[key] = AvailabilityEntry(
                    date=instance,
                    end_date=ScheduleExpander.instance_end(instance, days),
                    price=resolved.base_price,
                    effective_price=resolved.effective_price,
                    discounted_price=(
                        resolved.effective_price
                        if resolved.effective_price != resolved.base_price else None
                    ),
                    departure_id=departure.id,
                    departure_label=departure.label,
                )

        return cls(tour.id, entries, collisions)

    def get(self, key) -> Optional[AvailabilityEntry]:
        if isinstance(key, date):
            key = date_key(key)
        return self._entries.get(key)

    def __contains__(self, key) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._entries))

    def is_available(self, value: date) -> bool:
        """False dates are the ones a date picker disables"""
        return value in self

    def entries(self) -> List[AvailabilityEntry]:
        return [self._entries[key] for key in sorted(self._entries)]

    def dates(self) -> List[date]:
        return [entry.date for entry in self.entries()]

    def by_month(self) -> Dict[str, List[AvailabilityEntry]]:
        """Entries grouped by ``YYYY-MM`` for the departure calendar"""
        months: Dict[str, List[AvailabilityEntry]] = {}
        for entry in self.entries():
            months.setdefault(entry.date.strftime("%Y-%m"), []).append(entry)
        return months

    def lowest_price(self) -> Optional[float]:
        if not self._entries:
            return None
        return min(entry.effective_price for entry in self._entries.values())
