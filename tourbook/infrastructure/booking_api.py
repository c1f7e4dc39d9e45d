"""Client for the remote booking server."""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from ..api.v1.schemas.booking_schemas import BookingSubmission
from ..api.v1.schemas.tour_schemas import Tour
from ..core.config import get_settings
from ..core.exceptions import ExternalServiceError, NotFoundError
from ..statuses import BookingStatus, PaymentStatus

logger = logging.getLogger(__name__)

SERVICE_NAME = "booking-api"

# Upstream statuses worth another attempt on a lookup
RETRYABLE_STATUSES = {429, 502, 503, 504}


def unwrap(payload: Any) -> Any:
    """Return ``payload["data"]`` for ``{success, data, message}`` envelopes"""
    if isinstance(payload, dict) and payload.get("data") is not None:
        return payload["data"]
    return payload


class BookingApiClient:
    """Async adapter over the booking server's REST API.

    Tour lookups retry with a fixed delay. Submissions and status mutations
    are sent exactly once.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        retry_attempts: Optional[int] = None,
        retry_delay: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.base_url = base_url or settings.BOOKING_API_URL
        self.timeout = settings.BOOKING_API_TIMEOUT if timeout is None else timeout
        self.retry_attempts = settings.LOOKUP_RETRY_ATTEMPTS if retry_attempts is None else retry_attempts
        self.retry_delay = settings.LOOKUP_RETRY_DELAY if retry_delay is None else retry_delay
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _send(self, method: str, path: str, action: str, **kwargs) -> Any:
        """Send one request and return the unwrapped JSON body"""
        client = self._get_client()
        try:
            response = await client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.exception("Booking server returned %s while %s", e.response.status_code, action)
            raise ExternalServiceError(
                SERVICE_NAME,
                f"{action} failed with status {e.response.status_code}",
                upstream_status=e.response.status_code,
            )
        except httpx.RequestError as e:
            logger.exception("Booking server unreachable while %s", action)
            raise ExternalServiceError(SERVICE_NAME, f"{action} failed: {e}")

        if not response.content:
            return None
        try:
            return unwrap(response.json())
        except ValueError:
            logger.exception("Booking server sent a non-JSON body while %s", action)
            raise ExternalServiceError(SERVICE_NAME, f"{action} returned an invalid body")

    async def _lookup(self, path: str, action: str, **kwargs) -> Any:
        """GET with a fixed-delay retry on transport errors and busy upstreams"""
        for attempt in range(1, self.retry_attempts + 1):
            try:
                return await self._send("GET", path, action, **kwargs)
            except ExternalServiceError as e:
                upstream = e.details.get("upstream_status")
                retryable = upstream is None or upstream in RETRYABLE_STATUSES
                if not retryable or attempt == self.retry_attempts:
                    raise
                logger.warning(
                    "Retrying %s (attempt %s of %s) in %ss",
                    action, attempt + 1, self.retry_attempts, self.retry_delay
                )
                await asyncio.sleep(self.retry_delay)

    # ---------- Tours ----------
    async def get_tour(self, tour_id: str) -> Tour:
        try:
            data = await self._lookup(f"/api/tours/{tour_id}", f"fetching tour {tour_id}")
        except ExternalServiceError as e:
            if e.details.get("upstream_status") == 404:
                raise NotFoundError("Tour", tour_id)
            raise
        if isinstance(data, dict) and isinstance(data.get("tour"), dict):
            data = data["tour"]
        if not data:
            raise NotFoundError("Tour", tour_id)
        return Tour.model_validate(data)

    async def search_tours(self, query: str = "", limit: Optional[int] = None, **filters: Any) -> List[Tour]:
        params: Dict[str, Any] = {k: v for k, v in filters.items() if v is not None}
        if query:
            params["q"] = query
        if limit is not None:
            params["limit"] = limit
        data = await self._lookup("/api/tours/search", "searching tours", params=params)
        if isinstance(data, dict):
            data = data.get("tours") or data.get("items") or []
        return [Tour.model_validate(item) for item in data or []]

    # ---------- Bookings ----------
    async def create_booking(self, submission: BookingSubmission) -> Tuple[str, Dict[str, Any]]:
        """Submit a booking; returns its reference and the stored record"""
        payload = submission.model_dump(mode="json", by_alias=True, exclude_none=True)
        data = await self._send("POST", "/api/bookings", "creating booking", json=payload)

        record = data if isinstance(data, dict) else {}
        if isinstance(record.get("booking"), dict):
            record = {**record["booking"], **{k: v for k, v in record.items() if k != "booking"}}
        reference = record.get("bookingReference") or record.get("booking_reference")
        if not reference:
            logger.error("Booking server accepted a booking without a reference: %s", data)
            raise ExternalServiceError(SERVICE_NAME, "creating booking returned no booking reference")
        return str(reference), record

    async def update_booking_status(
        self, booking_id: str, status: BookingStatus, notes: Optional[str] = None
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"status": BookingStatus(status).value}
        if notes is not None:
            payload["notes"] = notes
        data = await self._send(
            "PATCH", f"/api/bookings/{booking_id}/status", f"updating booking {booking_id} status", json=payload
        )
        return data or {}

    async def update_payment_status(
        self,
        booking_id: str,
        payment_status: PaymentStatus,
        paid_amount: Optional[float] = None,
        transaction_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"paymentStatus": PaymentStatus(payment_status).value}
        if paid_amount is not None:
            payload["paidAmount"] = paid_amount
        if transaction_id is not None:
            payload["transactionId"] = transaction_id
        data = await self._send(
            "PATCH", f"/api/bookings/{booking_id}/payment", f"updating booking {booking_id} payment", json=payload
        )
        return data or {}

    # ---------- Credentials ----------
    async def get_decrypted_key(self, user_id: str, key_type: str) -> str:
        """Plaintext secret stored for the user, or an empty string when unset"""
        data = await self._send(
            "GET",
            f"/api/users/setting/{user_id}/key",
            f"fetching {key_type} key",
            params={"keyType": key_type},
        )
        if isinstance(data, dict):
            data = data.get("key") or data.get("value") or data.get(key_type)
        return data if isinstance(data, str) else ""
