from .base import BaseRepository, IRepository
from .exceptions import (
    BaseError,
    NotFoundError,
    ValidationError,
    AuthenticationError,
    ExternalServiceError
)
from .config import Settings, get_settings
from .clock import parse_timezone, local_now, local_today
from .discounts import has_discount, discount_percentage

__all__ = [
    # Base classes
    "BaseRepository",
    "IRepository",

    # Exceptions
    "BaseError",
    "NotFoundError",
    "ValidationError",
    "AuthenticationError",
    "ExternalServiceError",

    # Config
    "Settings",
    "get_settings",

    # Clock
    "parse_timezone",
    "local_now",
    "local_today",

    # Discounts
    "has_discount",
    "discount_percentage",
]
