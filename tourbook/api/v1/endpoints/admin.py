"""Dashboard relays for booking status, payment status and stored credentials."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, Path

from ....deps import BookingServiceDep
from ....security import require_admin_key
from ..schemas import BookingStatusUpdate, CredentialOut, PaymentStatusUpdate

router = APIRouter(prefix="/admin", dependencies=[Depends(require_admin_key)])


@router.patch("/bookings/{booking_id}/status")
async def admin_update_booking_status(
    service: BookingServiceDep,
    body: BookingStatusUpdate,
    booking_id: str = Path(..., min_length=1),
) -> Dict[str, Any]:
    """Change a booking's status on the booking server."""
    return await service.update_booking_status(booking_id, body.status, body.notes)


@router.patch("/bookings/{booking_id}/payment")
async def admin_update_payment_status(
    service: BookingServiceDep,
    body: PaymentStatusUpdate,
    booking_id: str = Path(..., min_length=1),
) -> Dict[str, Any]:
    return await service.update_payment_status(
        booking_id, body.payment_status, body.paid_amount, body.transaction_id
    )


@router.get("/users/{user_id}/keys/{key_type}", response_model=CredentialOut)
async def admin_get_user_key(
    service: BookingServiceDep,
    user_id: str = Path(..., min_length=1),
    key_type: str = Path(..., min_length=1),
):
    """Decrypted credential stored for a user; empty when unset."""
    value = await service.get_credential(user_id, key_type)
    return CredentialOut(user_id=user_id, key_type=key_type, value=value)
