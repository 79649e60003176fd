from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from functools import lru_cache
from pathlib import Path

from loguru import logger

from tourbook.bookings import BOOKINGS_PATH
from tourbook.client import ApiClient, get_api_client
from tourbook.errors import ApiError, TicketNotAvailable
from tourbook.models import PaymentStatus
from tourbook.schemas import Booking

PDF_MEDIA_TYPE = "application/pdf"
DEFAULT_TRIP_DAYS = 7


@dataclass(frozen=True)
class TicketFile:
    filename: str
    content: bytes


def ticket_filename(booking: Booking) -> str:
    return f"Tiket-{booking.booking_code or booking.booking_id}.pdf"


def can_download_ticket(booking: Booking) -> bool:
    return booking.payment_status == PaymentStatus.PAID


def estimate_return_date(departure_date: str | None, duration: str | None) -> date | None:
    """
    Approximate return date: departure + N - 1 days, where N is the first
    number in a duration text such as "6 Hari 5 Malam" (7 when absent).

    This is a display heuristic, not backend data; prefer Booking.return_date
    when the backend sends it.
    """
    if not departure_date:
        return None
    try:
        departure = datetime.fromisoformat(departure_date.replace("Z", "+00:00")).date()
    except ValueError:
        return None
    match = re.search(r"\d+", duration or "")
    days = int(match.group()) if match else DEFAULT_TRIP_DAYS
    return departure + timedelta(days=max(days, 1) - 1)


class TicketClient:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    async def download_ticket(self, booking_id: str) -> bytes | None:
        """Raw ticket bytes, or None on any failure (including unpaid bookings)."""
        try:
            content = await self.api.get_bytes(
                f"{BOOKINGS_PATH}/{booking_id}/download-ticket", accept=PDF_MEDIA_TYPE
            )
        except ApiError as exc:
            logger.warning("Failed to download ticket for {}: {}", booking_id, exc.message)
            return None
        if not content:
            logger.warning("Empty ticket body for booking {}", booking_id)
            return None
        return content

    async def download_ticket_for(self, booking: Booking) -> TicketFile | None:
        """Gate on payment status before any request is made."""
        if not can_download_ticket(booking):
            raise TicketNotAvailable(booking.booking_id, booking.payment_status)
        if booking.booking_id is None:
            return None
        content = await self.download_ticket(booking.booking_id)
        if content is None:
            return None
        return TicketFile(filename=ticket_filename(booking), content=content)


def save_ticket(ticket: TicketFile, directory: str | Path) -> Path:
    target = Path(directory) / ticket.filename
    target.write_bytes(ticket.content)
    logger.info("Ticket saved to {}", target)
    return target


@lru_cache(maxsize=1)
def get_ticket_client() -> TicketClient:
    return TicketClient(get_api_client())
