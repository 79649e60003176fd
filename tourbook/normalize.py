"""
Raw backend dicts → canonical entities.

Every canonical field is described by a ``FieldSpec``: the raw keys to try, in
order, plus a default and a coercion. The first candidate that is present
(not None and not "") wins, so canonical backend names are always listed
before their legacy aliases. Normalizers are total: any input, including
non-dicts, produces an entity.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import uuid4

from tourbook.models import BookingStatus, PaymentStatus
from tourbook.schemas import (
    AdminUser,
    Article,
    ArticleBlock,
    Booking,
    Buyer,
    CommunityPost,
    DashboardStats,
    Destination,
    ItineraryDay,
    Order,
    Package,
    PackageStat,
    TripRow,
    UserProfile,
)

_MISSING = object()


# ---------------------------------------------------------------------------
# Coercions: each one is total and returns its default on bad input
# ---------------------------------------------------------------------------


def to_str(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    return ""


def to_opt_str(value: Any) -> str | None:
    return to_str(value) or None


def to_int(value: Any, default: int = 0) -> int:
    if isinstance(value, bool):
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


def to_participants(value: Any) -> int:
    return max(to_int(value, 1), 1)


def to_float(value: Any, default: float = 0) -> float:
    if isinstance(value, bool):
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    return result if math.isfinite(result) else default


def to_opt_positive_float(value: Any) -> float | None:
    """Numeric or numeric string; zero, non-finite values and garbage become None."""
    return to_float(value) or None


def to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes"}
    return bool(value)


def to_list(value: Any) -> list:
    """A list stays a list, a scalar string becomes [string], anything else []."""
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        return [value]
    return []


def to_str_list(value: Any) -> list[str]:
    return [s for s in (to_str(v) for v in to_list(value)) if s]


def or_default(default: str) -> Callable[[Any], str]:
    """to_str that falls back to ``default`` for non-scalar values."""

    def _coerce(value: Any) -> str:
        return to_str(value) or default

    return _coerce


def new_id() -> str:
    return uuid4().hex


# ---------------------------------------------------------------------------
# Field mapping machinery
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldSpec:
    name: str
    candidates: Sequence[str]
    coerce: Callable[[Any], Any] = to_str
    default: Any = None
    default_factory: Callable[[], Any] | None = None

    def pick(self, raw: Mapping[str, Any]) -> Any:
        for key in self.candidates:
            value = raw.get(key)
            if value is not None and value != "":
                return value
        return _MISSING

    def resolve(self, raw: Mapping[str, Any]) -> Any:
        value = self.pick(raw)
        if value is _MISSING:
            if self.default_factory is not None:
                return self.default_factory()
            return self.default
        return self.coerce(value)


def apply_fields(fields: Sequence[FieldSpec], raw: Any) -> dict[str, Any]:
    source = raw if isinstance(raw, Mapping) else {}
    return {f.name: f.resolve(source) for f in fields}


# ---------------------------------------------------------------------------
# Booking & order
# ---------------------------------------------------------------------------

BOOKING_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("booking_id", ("booking_id", "id", "_id"), to_opt_str),
    FieldSpec("user_id", ("user_id", "userId"), to_opt_str),
    FieldSpec("package_id", ("package_id", "packageId"), to_opt_str),
    FieldSpec("booking_code", ("booking_code", "bookingCode", "code"), to_opt_str),
    FieldSpec("booking_date", ("booking_date", "created_at"), to_opt_str),
    FieldSpec("departure_date", ("booking_departure_date", "departure_date"), to_opt_str),
    FieldSpec("return_date", ("booking_return_date", "return_date"), to_opt_str),
    FieldSpec(
        "total_participants",
        ("booking_total_participants", "total_participants"),
        to_participants,
        default=1,
    ),
    FieldSpec("total_price", ("booking_total_price", "total_price"), to_str, default=""),
    FieldSpec(
        "booking_status",
        ("booking_status", "status"),
        or_default(BookingStatus.PENDING),
        default=BookingStatus.PENDING,
    ),
    FieldSpec(
        "payment_status",
        ("booking_payment_status", "payment_status"),
        or_default(PaymentStatus.UNPAID),
        default=PaymentStatus.UNPAID,
    ),
    FieldSpec("payment_deadline", ("booking_payment_deadline", "payment_deadline"), to_opt_str),
    FieldSpec("fullname", ("booking_fullname", "fullname", "full_name"), default=""),
    FieldSpec("phone_number", ("booking_phone_number", "phone_number"), default=""),
    FieldSpec("email", ("booking_email", "email"), default=""),
    FieldSpec("passport_number", ("booking_passport_number", "passport_number"), default=""),
    FieldSpec("passport_expiry", ("booking_passport_expiry", "passport_expiry"), default=""),
    FieldSpec("nationality", ("booking_nationality", "nationality"), default=""),
    FieldSpec("package_name", ("package_name",), to_opt_str),
    FieldSpec("package_image", ("package_image",), to_opt_str),
    FieldSpec("package_location", ("package_location", "destination_name"), to_opt_str),
    FieldSpec("package_continent", ("package_benua", "destination_location"), to_opt_str),
    FieldSpec("package_period_start", ("package_periode_start",), to_opt_str),
    FieldSpec("package_period_end", ("package_periode_end",), to_opt_str),
    FieldSpec("package_airline", ("package_maskapai",), to_opt_str),
    FieldSpec("package_airport", ("package_bandara",), to_opt_str),
    FieldSpec("has_review", ("has_review", "hasReview"), to_bool, default=False),
)


def normalize_booking(raw: Any) -> Booking:
    return Booking(**apply_fields(BOOKING_FIELDS, raw))


ORDER_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("id", ("booking_id", "id", "_id", "orderId"), default=""),
    FieldSpec("booking_code", ("booking_code", "bookingCode"), default=""),
    FieldSpec(
        "fullname",
        ("booking_fullname", "fullname", "full_name", "name", "customer_name"),
        default="-",
    ),
    FieldSpec("email", ("booking_email", "email"), default=""),
    FieldSpec("phone_number", ("booking_phone_number", "phone_number", "phoneNumber"), default=""),
    FieldSpec("passport_number", ("booking_passport_number", "passport_number"), default=""),
    FieldSpec("passport_expiry", ("booking_passport_expiry", "passport_expiry"), default=""),
    FieldSpec("nationality", ("booking_nationality", "nationality"), default=""),
    FieldSpec("package_name", ("package_name", "packageName", "tour_name"), default="-"),
    FieldSpec("departure_date", ("booking_departure_date", "departure_date"), default=""),
    FieldSpec("return_date", ("booking_return_date", "return_date"), default=""),
    FieldSpec(
        "total_participants",
        ("booking_total_participants", "total_participants"),
        to_participants,
        default=1,
    ),
    FieldSpec(
        "status",
        ("booking_status", "status", "state"),
        or_default(BookingStatus.PENDING),
        default=BookingStatus.PENDING,
    ),
    FieldSpec(
        "payment_status",
        ("booking_payment_status", "payment_status"),
        or_default(PaymentStatus.UNPAID),
        default=PaymentStatus.UNPAID,
    ),
    FieldSpec("special_requests", ("special_requests", "specialRequests", "notes"), default=""),
    FieldSpec("created_date", ("booking_date", "date", "created_at"), default=""),
    FieldSpec("created_time", ("time", "created_time"), default=""),
    FieldSpec("amount", ("booking_total_price", "total_price", "payment", "amount", "total"), to_opt_str),
)


def normalize_order(raw: Any) -> Order:
    return Order(**apply_fields(ORDER_FIELDS, raw))


# ---------------------------------------------------------------------------
# Destinations & packages
# ---------------------------------------------------------------------------

ITINERARY_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("destinations", ("destinasi", "destination", "destinations"), to_str_list, default_factory=list),
    FieldSpec("meals", ("makan", "food", "meals"), to_str_list, default_factory=list),
    FieldSpec("mosques", ("masjid", "mosque", "mosques"), to_str_list, default_factory=list),
    FieldSpec("transport", ("transportasi", "transport"), to_str_list, default_factory=list),
)


def normalize_itinerary(value: Any) -> list[ItineraryDay]:
    days = []
    for idx, item in enumerate(to_list(value), start=1):
        source = item if isinstance(item, Mapping) else {}
        day = to_str(source.get("day")) or f"Day {idx}"
        days.append(ItineraryDay(day=day, **apply_fields(ITINERARY_FIELDS, source)))
    return days


def _gallery(raw: Mapping[str, Any]) -> list[str]:
    return to_str_list(raw.get("gallery") or raw.get("images"))


DESTINATION_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("id", ("id", "_id", "destinationId", "packageId"), default_factory=new_id),
    FieldSpec("title", ("title", "name", "package_name"), default="Untitled package"),
    FieldSpec("location", ("location", "country", "city", "region"), default="-"),
    FieldSpec("price", ("price", "minPrice"), to_opt_positive_float),
    FieldSpec("image", ("image", "thumbnail", "cover"), to_opt_str),
    FieldSpec(
        "period",
        ("period", "periods", "departure_dates", "departureDates"),
        to_str_list,
        default_factory=list,
    ),
    FieldSpec("duration", ("duration", "durations", "duration_text"), default=""),
    FieldSpec("airline", ("airline", "airlines"), default=""),
    FieldSpec("airport", ("airport", "departure_airport"), default=""),
    FieldSpec("description", ("description", "details"), default=""),
)

PACKAGE_FIELDS: tuple[FieldSpec, ...] = DESTINATION_FIELDS + (
    FieldSpec("continent", ("continent", "region"), default=""),
    FieldSpec("departure", ("departure",), default=""),
)


def _catalog_values(fields: Sequence[FieldSpec], raw: Any) -> dict[str, Any]:
    source = raw if isinstance(raw, Mapping) else {}
    values = apply_fields(fields, source)
    if values["image"] is None:
        gallery = _gallery(source)
        values["image"] = gallery[0] if gallery else None
    itinerary = normalize_itinerary(source.get("itinerary") or source.get("itineraries"))
    values["itinerary"] = itinerary or None
    return values


def normalize_destination(raw: Any) -> Destination:
    return Destination(**_catalog_values(DESTINATION_FIELDS, raw))


def normalize_package(raw: Any) -> Package:
    return Package(**_catalog_values(PACKAGE_FIELDS, raw))


# ---------------------------------------------------------------------------
# Articles
# ---------------------------------------------------------------------------

_MONTHS = (
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
)


def format_display_date(value: str) -> str:
    """ISO date → "5 Januari 2025"; unparseable input is returned as is."""
    if not value:
        return ""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return f"{parsed.day} {_MONTHS[parsed.month - 1]} {parsed.year}"


ARTICLE_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("id", ("id", "_id"), default_factory=new_id),
    FieldSpec("title", ("title", "name"), default="Untitled article"),
    FieldSpec("date", ("date", "published_at", "createdAt"), default=""),
    FieldSpec("time", ("time", "published_time"), default=""),
    FieldSpec("status", ("status", "state"), default="Draft"),
    FieldSpec("content", ("content", "body"), default=""),
    FieldSpec("image", ("image", "thumbnail", "cover"), to_opt_str),
    FieldSpec("link", ("link", "url"), default=""),
    FieldSpec("author", ("author", "created_by"), default=""),
    FieldSpec("tag", ("tag", "label"), default=""),
)

BLOCK_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("type", ("type",), default="text"),
    FieldSpec("value", ("value",), default=""),
    FieldSpec("label", ("label",), to_opt_str),
)


def normalize_article(raw: Any) -> Article:
    source = raw if isinstance(raw, Mapping) else {}
    values = apply_fields(ARTICLE_FIELDS, source)
    gallery = _gallery(source)
    if values["image"] is None and gallery:
        values["image"] = gallery[0]
    blocks = [
        ArticleBlock(**apply_fields(BLOCK_FIELDS, b))
        for b in to_list(source.get("blocks"))
        if isinstance(b, Mapping)
    ]
    return Article(
        **values,
        display_date=to_str(source.get("displayDate")) or format_display_date(values["date"]),
        gallery=gallery,
        blocks=blocks or None,
    )


# ---------------------------------------------------------------------------
# Users, community, profile
# ---------------------------------------------------------------------------

USER_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("id", ("id", "_id"), default_factory=new_id),
    FieldSpec("name", ("name", "fullname", "fullName"), default="User"),
    FieldSpec("email", ("email",), default=""),
    FieldSpec("phone", ("phone", "phone_number"), default=""),
    FieldSpec("registered", ("registered", "created_at"), default=""),
    FieldSpec("role", ("role", "user_role"), to_opt_str),
    FieldSpec("password", ("password",), to_opt_str),
)


def normalize_user(raw: Any) -> AdminUser:
    return AdminUser(**apply_fields(USER_FIELDS, raw))


COMMUNITY_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("id", ("id", "_id"), default_factory=new_id),
    FieldSpec("title", ("title", "subject"), default="Untitled"),
    FieldSpec("body", ("body", "content"), default=""),
    FieldSpec("author", ("author", "created_by"), default="Anonymous"),
    FieldSpec("rating", ("rating",), to_opt_positive_float),
    FieldSpec("time_ago", ("timeAgo", "time_ago", "created_at"), default=""),
    FieldSpec("avatar", ("avatar", "avatar_url"), default=""),
)


def normalize_community_post(raw: Any) -> CommunityPost:
    return CommunityPost(**apply_fields(COMMUNITY_FIELDS, raw))


PROFILE_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("id", ("id", "_id", "user_id"), default=""),
    FieldSpec("fullname", ("fullname", "full_name", "name"), default=""),
    FieldSpec("email", ("email",), default=""),
    FieldSpec("role", ("role", "user_role"), default=""),
    FieldSpec("avatar_url", ("avatar_url", "avatar"), to_opt_str),
)


def normalize_profile(raw: Any) -> UserProfile:
    return UserProfile(**apply_fields(PROFILE_FIELDS, raw))


# ---------------------------------------------------------------------------
# Dashboard sections
# ---------------------------------------------------------------------------

STATS_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("total_booking", ("totalBooking", "total_booking", "booking"), to_int, default=0),
    FieldSpec("profit", ("profit", "revenue"), to_float, default=0),
    FieldSpec("active_buyers", ("pembeliAktif", "active_buyers", "active"), to_int, default=0),
)

PACKAGE_STAT_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("name", ("name", "title"), default="-"),
    FieldSpec("percentage", ("percentage", "progress"), to_float, default=0),
    FieldSpec("image_url", ("imageUrl", "image_url", "image"), to_opt_str),
)

BUYER_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("name", ("nama", "name"), default="-"),
    FieldSpec("total_booking", ("totalBooking", "total_booking", "bookings"), to_int, default=0),
    FieldSpec("total_reviews", ("totalUlasan", "total_reviews", "reviews"), to_int, default=0),
)

TRIP_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("buyer", ("buyer",), default="-"),
    FieldSpec("tour", ("tour",), default="-"),
    FieldSpec("price", ("price",), to_float, default=0),
)


def normalize_dashboard_stats(raw: Any) -> DashboardStats | None:
    """
    Accepts the object form ``{totalBooking, profit, ...}`` and the list form
    ``[{key, value}, ...]``. Returns None when nothing recognisable is present.
    """
    if isinstance(raw, list):
        raw = {
            to_str(item.get("key")): item.get("value")
            for item in raw
            if isinstance(item, Mapping)
        }
    if not isinstance(raw, Mapping):
        return None
    if all(f.pick(raw) is _MISSING for f in STATS_FIELDS):
        return None
    return DashboardStats(**apply_fields(STATS_FIELDS, raw))


def _normalize_rows(raw: Any, fields: Sequence[FieldSpec], model: type) -> list:
    return [model(**apply_fields(fields, item)) for item in to_list(raw) if isinstance(item, Mapping)]


def normalize_package_stats(raw: Any) -> list[PackageStat]:
    return _normalize_rows(raw, PACKAGE_STAT_FIELDS, PackageStat)


def normalize_buyers(raw: Any) -> list[Buyer]:
    return _normalize_rows(raw, BUYER_FIELDS, Buyer)


def normalize_trips(raw: Any) -> list[TripRow]:
    return _normalize_rows(raw, TRIP_FIELDS, TripRow)


def normalize_status_distribution(raw: Any) -> dict[str, int]:
    """Mapping ``{label: count}`` or list ``[{label, value}]`` → ``{label: count}``."""
    if isinstance(raw, list):
        return {
            to_str(item.get("label")): to_int(item.get("value"))
            for item in raw
            if isinstance(item, Mapping) and to_str(item.get("label"))
        }
    if isinstance(raw, Mapping):
        return {to_str(k): to_int(v) for k, v in raw.items() if to_str(k)}
    return {}
