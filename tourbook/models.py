from enum import StrEnum


class BookingStatus(StrEnum):
    PENDING = "pending"  # created, awaiting confirmation
    CONFIRMED = "confirmed"  # accepted by the operator
    CANCELLED = "cancelled"  # cancelled by customer or admin
    DONE = "done"  # trip completed


class PaymentStatus(StrEnum):
    UNPAID = "unpaid"
    PAID = "paid"
    REFUNDED = "refunded"


# Client-side model of the backend state machine. The backend owns the rules;
# these tables are only used to warn and to drive UI affordances.
BOOKING_TRANSITIONS: dict[str, set[str]] = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.CANCELLED, BookingStatus.DONE},
    BookingStatus.CANCELLED: set(),
    BookingStatus.DONE: set(),
}

PAYMENT_TRANSITIONS: dict[str, set[str]] = {
    PaymentStatus.UNPAID: {PaymentStatus.PAID},
    PaymentStatus.PAID: {PaymentStatus.REFUNDED},
    PaymentStatus.REFUNDED: set(),
}

TERMINAL_STATUSES = frozenset({BookingStatus.CANCELLED, BookingStatus.DONE})


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES


def _allowed(table: dict[str, set[str]], current: str, nxt: str) -> bool:
    if current == nxt:
        return True
    if current not in table:
        # unknown statuses are not checked
        return True
    return nxt in table[current]


def can_transition_booking(current: str, nxt: str) -> bool:
    return _allowed(BOOKING_TRANSITIONS, current, nxt)


def can_transition_payment(current: str, nxt: str) -> bool:
    return _allowed(PAYMENT_TRANSITIONS, current, nxt)
