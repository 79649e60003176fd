from __future__ import annotations

from functools import lru_cache

from loguru import logger

from tourbook.bookings import BOOKINGS_PATH
from tourbook.client import ApiClient, get_api_client
from tourbook.envelope import unwrap_entity, unwrap_list
from tourbook.errors import ApiError
from tourbook.normalize import normalize_order
from tourbook.schemas import Order


class OrderManager:
    """Back-office view of bookings. Same failure policy as BookingManager."""

    def __init__(self, api: ApiClient) -> None:
        self.api = api

    async def fetch_orders(self) -> list[Order]:
        try:
            data = await self.api.get_json(BOOKINGS_PATH)
        except ApiError as exc:
            logger.warning("Failed to load orders: {}", exc.message)
            return []
        return [normalize_order(raw) for raw in unwrap_list(data)]

    async def fetch_order(self, order_id: str) -> Order | None:
        try:
            data = await self.api.get_json(f"{BOOKINGS_PATH}/{order_id}")
        except ApiError as exc:
            logger.warning("Failed to load order {}: {}", order_id, exc.message)
            return None
        raw = unwrap_entity(data)
        return normalize_order(raw) if raw is not None else None

    async def update_order_status(self, order_id: str, status: str) -> bool:
        try:
            await self.api.put_json(
                f"{BOOKINGS_PATH}/{order_id}/admin-update-status", {"status": status}
            )
        except ApiError as exc:
            logger.warning("Failed to update order {} status: {}", order_id, exc.message)
            return False
        return True

    async def update_payment_status(self, order_id: str, payment_status: str) -> bool:
        try:
            await self.api.put_json(
                f"{BOOKINGS_PATH}/{order_id}/admin-update-payment",
                {"payment_status": payment_status},
            )
        except ApiError as exc:
            logger.warning(
                "Failed to update order {} payment status: {}", order_id, exc.message
            )
            return False
        return True

    async def delete_order(self, order_id: str) -> bool:
        try:
            await self.api.delete(f"{BOOKINGS_PATH}/{order_id}")
        except ApiError as exc:
            logger.warning("Failed to delete order {}: {}", order_id, exc.message)
            return False
        logger.info("Order deleted: {}", order_id)
        return True


@lru_cache(maxsize=1)
def get_order_manager() -> OrderManager:
    return OrderManager(get_api_client())
