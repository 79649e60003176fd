from __future__ import annotations

TRANSPORT_ERROR_MESSAGE = "Unable to reach the server"


class ApiError(Exception):
    """
    Uniform failure raised by the HTTP adapter.

    status_code is None when no response reached us (transport failure),
    otherwise the HTTP status the backend answered with.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def is_transport(self) -> bool:
        return self.status_code is None

    @classmethod
    def transport(cls) -> ApiError:
        return cls(TRANSPORT_ERROR_MESSAGE)

    @classmethod
    def from_status(cls, status_code: int, body: object = None) -> ApiError:
        message = None
        if isinstance(body, dict):
            message = body.get("message") or body.get("detail")
        if not isinstance(message, str) or not message:
            message = f"Request failed ({status_code})"
        return cls(message, status_code=status_code)

    def __repr__(self) -> str:
        return f"ApiError({self.message!r}, status_code={self.status_code})"


class TicketNotAvailable(Exception):
    """Raised before any request when a booking is not paid yet."""

    def __init__(self, booking_id: str | None, payment_status: str) -> None:
        super().__init__(
            f"Ticket for booking {booking_id} is only available once paid "
            f"(payment status: {payment_status})"
        )
        self.booking_id = booking_id
        self.payment_status = payment_status
