from .cart_entry_repository import CartEntryRepository

__all__ = [
    "CartEntryRepository",
]
