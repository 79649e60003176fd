from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from tourbook.models import BookingStatus, PaymentStatus

# ---------------------------------------------------------------------------
# Bookings & orders
# ---------------------------------------------------------------------------


class Booking(BaseModel):
    """
    Canonical booking. Status fields are open strings: the backend may send
    values outside BookingStatus / PaymentStatus and they are kept verbatim.
    Package snapshot fields are display-only.
    """

    booking_id: str | None = None
    user_id: str | None = None
    package_id: str | None = None
    booking_code: str | None = None
    booking_date: str | None = None
    departure_date: str | None = None
    return_date: str | None = None
    total_participants: int = Field(default=1, ge=1)
    total_price: str = ""
    booking_status: str = BookingStatus.PENDING
    payment_status: str = PaymentStatus.UNPAID
    payment_deadline: str | None = None

    fullname: str = ""
    phone_number: str = ""
    email: str = ""
    passport_number: str = ""
    passport_expiry: str = ""
    nationality: str = ""

    package_name: str | None = None
    package_image: str | None = None
    package_location: str | None = None
    package_continent: str | None = None
    package_period_start: str | None = None
    package_period_end: str | None = None
    package_airline: str | None = None
    package_airport: str | None = None

    has_review: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID


class Order(BaseModel):
    """Admin projection of a booking."""

    id: str = ""
    booking_code: str = ""
    fullname: str = "-"
    email: str = ""
    phone_number: str = ""
    passport_number: str = ""
    passport_expiry: str = ""
    nationality: str = ""
    package_name: str = "-"
    departure_date: str = ""
    return_date: str = ""
    total_participants: int = Field(default=1, ge=1)
    status: str = BookingStatus.PENDING
    payment_status: str = PaymentStatus.UNPAID
    special_requests: str = ""
    created_date: str = ""
    created_time: str = ""
    amount: str | None = None


class BookingPassenger(BaseModel):
    name: str
    age: int | None = Field(default=None, ge=0)
    gender: str | None = None
    passport_number: str | None = None
    date_of_birth: date | None = None
    nationality: str | None = None
    relationship: str | None = None

    def to_request_body(self) -> dict[str, Any]:
        body = {
            "nama": self.name,
            "umur": self.age,
            "jenis_kelamin": self.gender,
            "nomor_paspor": self.passport_number,
            "tanggal_lahir": self.date_of_birth.isoformat() if self.date_of_birth else None,
            "kewarganegaraan": self.nationality,
            "hubungan": self.relationship,
        }
        return {k: v for k, v in body.items() if v is not None}


class CreateBookingPayload(BaseModel):
    package_id: str
    total_participants: int = Field(ge=1)
    departure_date: date | None = None
    fullname: str = Field(min_length=1)
    email: EmailStr
    phone_number: str = Field(min_length=1)
    whatsapp_contact: str = ""
    passport_number: str = Field(min_length=1)
    passport_expiry: date
    nationality: str = Field(min_length=1)
    notes: str | None = Field(default=None, max_length=1000)
    passengers: list[BookingPassenger] = Field(default_factory=list)
    payment_method: str | None = None

    def to_request_body(self) -> dict[str, Any]:
        """Backend-shaped body for POST /bookings; unset optionals are omitted."""
        body = {
            "package_id": self.package_id,
            "total_participants": self.total_participants,
            "departure_date": self.departure_date.isoformat() if self.departure_date else None,
            "fullname": self.fullname,
            "email": self.email,
            "phone_number": self.phone_number,
            "whatsapp_contact": self.whatsapp_contact or self.phone_number,
            "passport_number": self.passport_number,
            "passport_expiry": self.passport_expiry.isoformat(),
            "nationality": self.nationality,
            "notes": self.notes,
            "booking_passengers": [p.to_request_body() for p in self.passengers] or None,
            "payment_method": self.payment_method,
        }
        return {k: v for k, v in body.items() if v is not None}


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class ItineraryDay(BaseModel):
    day: str
    destinations: list[str] = Field(default_factory=list)
    meals: list[str] = Field(default_factory=list)
    mosques: list[str] = Field(default_factory=list)
    transport: list[str] = Field(default_factory=list)


class Destination(BaseModel):
    id: str
    title: str
    location: str
    price: float | None = None
    image: str | None = None
    period: list[str] = Field(default_factory=list)
    duration: str = ""
    airline: str = ""
    airport: str = ""
    description: str = ""
    itinerary: list[ItineraryDay] | None = None


class Package(Destination):
    continent: str = ""
    departure: str = ""


class ArticleBlock(BaseModel):
    type: str = "text"  # text | image | link
    value: str = ""
    label: str | None = None


class Article(BaseModel):
    id: str
    title: str
    display_date: str = ""
    date: str = ""
    time: str = ""
    status: str = "Draft"
    content: str = ""
    image: str | None = None
    gallery: list[str] = Field(default_factory=list)
    link: str = ""
    blocks: list[ArticleBlock] | None = None
    author: str = ""
    tag: str = ""


class AdminUser(BaseModel):
    id: str
    name: str
    email: str = ""
    phone: str = ""
    registered: str = ""
    role: str | None = None
    password: str | None = Field(default=None, exclude=True, repr=False)


class CommunityPost(BaseModel):
    id: str
    title: str
    body: str = ""
    author: str = "Anonymous"
    rating: float | None = None
    time_ago: str = ""
    avatar: str = ""


# ---------------------------------------------------------------------------
# Auth & local state
# ---------------------------------------------------------------------------


class UserProfile(BaseModel):
    id: str
    fullname: str = ""
    email: str = ""
    role: str = ""
    avatar_url: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role.lower() == "admin" or "admin" in self.email.lower()


class ReviewDraft(BaseModel):
    id: str
    destination_id: str
    rating: int = Field(ge=1, le=5)
    text: str
    title: str | None = None
    package_name: str | None = None
    image: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("destination_id", mode="before")
    @classmethod
    def coerce_destination_id(cls, v: Any) -> str:
        return str(v)


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


class DashboardStats(BaseModel):
    total_booking: int = 0
    profit: float = 0
    active_buyers: int = 0


class PackageStat(BaseModel):
    name: str
    percentage: float = 0
    image_url: str | None = None


class Buyer(BaseModel):
    name: str
    total_booking: int = 0
    total_reviews: int = 0


class TripRow(BaseModel):
    buyer: str
    tour: str
    price: float = 0


class DashboardPayload(BaseModel):
    stats: DashboardStats
    packages: list[PackageStat]
    buyers: list[Buyer]
    status: dict[str, int]
    trips: list[TripRow]

    @property
    def total_status(self) -> int:
        return sum(self.status.values())
