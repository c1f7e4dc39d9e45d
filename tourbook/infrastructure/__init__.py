from .database import make_engine, make_session_factory, session_scope
from .cart_store import CartStore, MemoryCartStore, JsonFileCartStore, SqlCartStore
from .booking_api import BookingApiClient

__all__ = [
    # Database
    "make_engine",
    "make_session_factory",
    "session_scope",

    # Cart storage
    "CartStore",
    "MemoryCartStore",
    "JsonFileCartStore",
    "SqlCartStore",

    # Remote API
    "BookingApiClient",
]
