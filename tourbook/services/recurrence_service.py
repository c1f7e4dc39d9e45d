"""Expansion of departure schedules into concrete calendar dates."""

import logging
from datetime import date, timedelta
from typing import List, Optional

from dateutil.relativedelta import relativedelta

from ..api.v1.schemas.tour_schemas import Departure, TourDates, DateRange
from ..core.clock import local_today

logger = logging.getLogger(__name__)

# Loop guard against malformed recurrence data
MAX_INSTANCES = 365

DAY_STEPS = {
    "daily": 1,
    "weekly": 7,
    "biweekly": 14,
}

MONTH_STEPS = {
    "monthly": 1,
    "quarterly": 3,
    "yearly": 12,
}

DEFAULT_PATTERN = "weekly"
FALLBACK_DAY_STEP = 7


class RecurrenceExpander:
    """Turns one departure into an ascending list of bookable dates.

    Past dates are dropped. Recurring departures are walked with a bounded
    loop: at most ``max_instances`` instances are generated per departure,
    whether or not they end up in the result.
    """

    def __init__(self, max_instances: int = MAX_INSTANCES):
        self.max_instances = max_instances

    def expand(self, departure: Departure, today: Optional[date] = None) -> List[date]:
        today = today or local_today()

        if not departure.recurs:
            start = departure.start_date
            return [start] if start >= today else []

        start = departure.start_date
        end = departure.end_date
        if start > end:
            return []

        pattern = departure.recurrence_pattern or DEFAULT_PATTERN
        dates: List[date] = []
        for n in range(self.max_instances):
            current = self._nth(start, pattern, n)
            if current > end:
                break
            if current >= today:
                dates.append(current)
        else:
            logger.debug(
                "Departure %s hit the %d instance cap before %s",
                departure.id or departure.label, self.max_instances, end
            )
        return dates

    @staticmethod
    def _nth(start: date, pattern: str, n: int) -> date:
        """Date of the n-th instance counted from start"""
        if pattern in MONTH_STEPS:
            # Counted from start so a 31st start clamps per month without drifting
            return start + relativedelta(months=MONTH_STEPS[pattern] * n)
        step = DAY_STEPS.get(pattern, FALLBACK_DAY_STEP)
        return start + timedelta(days=step * n)


class ScheduleExpander:
    """Turns a tour's schedule block into the departures to expand"""

    def departures(self, tour_dates: Optional[TourDates]) -> List[Departure]:
        if tour_dates is None:
            return []

        if tour_dates.schedule_type == "multiple":
            return list(tour_dates.departures)

        date_range = tour_dates.single_date_range or tour_dates.default_date_range
        if date_range is None:
            return []

        if (
            tour_dates.schedule_type == "fixed"
            and tour_dates.is_recurring
            and tour_dates.recurrence_end_date is not None
        ):
            return [Departure(
                label="Fixed Schedule",
                date_range=date_range,
                is_recurring=True,
                recurrence_pattern=tour_dates.recurrence_pattern,
                recurrence_end_date=tour_dates.recurrence_end_date,
                selected_pricing_options=tour_dates.selected_pricing_options,
            )]

        label = "Flexible Schedule" if tour_dates.schedule_type == "flexible" else "Fixed Schedule"
        return [Departure(
            label=label,
            date_range=DateRange(from_=date_range.from_, to=date_range.to),
            selected_pricing_options=tour_dates.selected_pricing_options,
        )]

    @staticmethod
    def instance_end(start: date, days: int) -> date:
        """Last day of a departure instance lasting ``days`` days"""
        return start + timedelta(days=max(days, 1) - 1)
