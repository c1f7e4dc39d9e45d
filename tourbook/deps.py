from typing import Annotated
from fastapi import Depends, Request
from sqlalchemy.orm import sessionmaker

from .core import Settings, get_settings
from .infrastructure import BookingApiClient, CartStore, SqlCartStore
from .services import BookingService, CartLedger


def get_session_factory(request: Request) -> sessionmaker:
    return request.app.state.session_factory


def get_booking_client(request: Request) -> BookingApiClient:
    return request.app.state.booking_client


def get_cart_id(request: Request) -> str:
    """Cart id assigned by CartIDMiddleware"""
    return request.state.cart_id


def cart_key(cart_id: str, settings: Settings) -> str:
    return f"{settings.CART_STORAGE_KEY}:{cart_id}"


def get_cart_store(
    cart_id: Annotated[str, Depends(get_cart_id)],
    factory: Annotated[sessionmaker, Depends(get_session_factory)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> CartStore:
    return SqlCartStore(factory, key=cart_key(cart_id, settings))


def get_cart_ledger(
    store: Annotated[CartStore, Depends(get_cart_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> CartLedger:
    return CartLedger(store, tax_rate=settings.CHECKOUT_TAX_RATE)


def get_booking_service(
    client: Annotated[BookingApiClient, Depends(get_booking_client)],
    ledger: Annotated[CartLedger, Depends(get_cart_ledger)],
) -> BookingService:
    return BookingService(client, ledger)


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_settings)]
ClientDep = Annotated[BookingApiClient, Depends(get_booking_client)]
LedgerDep = Annotated[CartLedger, Depends(get_cart_ledger)]
BookingServiceDep = Annotated[BookingService, Depends(get_booking_service)]
