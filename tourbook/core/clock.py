"""Wall-clock helpers.

Everything that asks "what is today" or "what time is it now" goes through
this module so the storefront's calendar and the discount windows agree on a
single timezone (``Settings.TIMEZONE``).
"""

import logging
import re
from datetime import date, datetime
from typing import Optional

import pytz

from .config import get_settings

logger = logging.getLogger(__name__)

_OFFSET_PATTERN = re.compile(r"^UTC([+-])(\d{2}):(\d{2})$")


def parse_timezone(timezone_str: str):
    """
    Parse a timezone string which can be either:
    - A standard IANA timezone name (e.g., 'Europe/Moscow')
    - An offset-based string (e.g., 'UTC+03:00')

    Returns a pytz timezone object
    """
    try:
        return pytz.timezone(timezone_str)
    except pytz.exceptions.UnknownTimeZoneError:
        pass

    match = _OFFSET_PATTERN.match(timezone_str)
    if match:
        sign, hours, minutes = match.groups()
        total_offset = int(hours) * 60 + int(minutes)
        if sign == "-":
            total_offset = -total_offset
        return pytz.FixedOffset(total_offset)

    logger.warning("Could not parse timezone '%s', using UTC", timezone_str)
    return pytz.UTC


def local_now(timezone_str: Optional[str] = None) -> datetime:
    """Timezone-aware current time in the configured timezone"""
    tz = parse_timezone(timezone_str or get_settings().TIMEZONE)
    return datetime.now(pytz.UTC).astimezone(tz)


def local_today(timezone_str: Optional[str] = None) -> date:
    """Calendar date of ``local_now``"""
    return local_now(timezone_str).date()
