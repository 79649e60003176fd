from __future__ import annotations

from functools import lru_cache

from loguru import logger

from tourbook.client import ApiClient, get_api_client
from tourbook.envelope import unwrap_entity, unwrap_list
from tourbook.errors import ApiError
from tourbook.models import can_transition_booking, can_transition_payment, is_terminal
from tourbook.normalize import normalize_booking
from tourbook.schemas import Booking, CreateBookingPayload

BOOKINGS_PATH = "/bookings"


def apply_status(
    booking: Booking,
    booking_status: str | None = None,
    payment_status: str | None = None,
) -> Booking:
    """
    Local copy of ``booking`` with new status values.
    Only call this after the matching mutation returned True.
    """
    update: dict[str, str] = {}
    if booking_status is not None:
        update["booking_status"] = booking_status
    if payment_status is not None:
        update["payment_status"] = payment_status
    return booking.model_copy(update=update)


class BookingManager:
    """
    Customer-facing booking operations.

    Failure policy:
      - create_booking raises ApiError: callers must tell "failed" from "absent"
      - list/detail reads log and degrade to [] / None
      - status mutations log and return False
    """

    def __init__(self, api: ApiClient) -> None:
        self.api = api

    # -- create -------------------------------------------------------------

    async def create_booking(self, payload: CreateBookingPayload) -> Booking:
        data = await self.api.post_json(BOOKINGS_PATH, payload.to_request_body())
        raw = unwrap_entity(data)
        if raw is None:
            raise ApiError("Booking response did not contain a booking")
        booking = normalize_booking(raw)
        logger.info(
            "Booking created: booking_id={} code={}", booking.booking_id, booking.booking_code
        )
        return booking

    # -- reads --------------------------------------------------------------

    async def _fetch_list(self, path: str, params: dict | None, what: str) -> list[Booking]:
        try:
            data = await self.api.get_json(path, params=params)
        except ApiError as exc:
            logger.warning("Failed to load {}: {}", what, exc.message)
            return []
        return [normalize_booking(raw) for raw in unwrap_list(data)]

    async def fetch_active_bookings(self) -> list[Booking]:
        return await self._fetch_list(f"{BOOKINGS_PATH}/active", None, "active bookings")

    async def fetch_booking_history(self) -> list[Booking]:
        return await self._fetch_list(f"{BOOKINGS_PATH}/history", None, "booking history")

    async def fetch_bookings_filtered(
        self,
        status: str | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
    ) -> list[Booking]:
        params = {
            k: v
            for k, v in (("status", status), ("date_from", date_from), ("date_to", date_to))
            if v
        }
        return await self._fetch_list(BOOKINGS_PATH, params or None, "filtered bookings")

    async def fetch_booking_detail(self, booking_id: str) -> Booking | None:
        try:
            data = await self.api.get_json(f"{BOOKINGS_PATH}/{booking_id}")
        except ApiError as exc:
            logger.warning("Failed to load booking {}: {}", booking_id, exc.message)
            return None
        raw = unwrap_entity(data)
        return normalize_booking(raw) if raw is not None else None

    # -- mutations ----------------------------------------------------------

    async def _mutate(self, method: str, path: str, body: dict, what: str) -> bool:
        try:
            await self.api.request(method, path, json=body)
        except ApiError as exc:
            logger.warning("Failed to {}: {}", what, exc.message)
            return False
        return True

    async def update_booking_status(
        self,
        booking_id: str,
        next_status: str,
        current_status: str | None = None,
    ) -> bool:
        """
        PUT the new status. ``current_status`` is only used to warn about
        transitions outside the client-side model; the request is sent anyway.
        """
        if current_status is not None and not can_transition_booking(current_status, next_status):
            logger.warning(
                "Booking {}: '{}' -> '{}' is outside the known lifecycle{}",
                booking_id,
                current_status,
                next_status,
                " (terminal state)" if is_terminal(current_status) else "",
            )
        return await self._mutate(
            "PUT",
            f"{BOOKINGS_PATH}/{booking_id}/admin-update-status",
            {"status": next_status},
            f"update status of booking {booking_id}",
        )

    async def update_payment_status(
        self,
        booking_id: str,
        next_payment_status: str,
        current_payment_status: str | None = None,
    ) -> bool:
        if current_payment_status is not None and not can_transition_payment(
            current_payment_status, next_payment_status
        ):
            logger.warning(
                "Booking {}: payment '{}' -> '{}' is outside the known lifecycle",
                booking_id,
                current_payment_status,
                next_payment_status,
            )
        return await self._mutate(
            "PUT",
            f"{BOOKINGS_PATH}/{booking_id}/admin-update-payment",
            {"payment_status": next_payment_status},
            f"update payment status of booking {booking_id}",
        )

    async def cancel_booking(self, booking_id: str, reason: str | None = None) -> bool:
        body = {"cancel_reason": reason} if reason else {}
        return await self._mutate(
            "PATCH",
            f"{BOOKINGS_PATH}/{booking_id}/cancel",
            body,
            f"cancel booking {booking_id}",
        )


@lru_cache(maxsize=1)
def get_booking_manager() -> BookingManager:
    return BookingManager(get_api_client())
