"""
All test-data builders in one place.
Import from here in every test file; never define dummy data inline.
"""

from __future__ import annotations

from datetime import date

from tourbook.schemas import BookingPassenger, CreateBookingPayload, UserProfile

# ---------------------------------------------------------------------------
# Stable IDs
# ---------------------------------------------------------------------------

BOOKING_ID = "B1"
BOOKING_CODE = "TRV-2025-0001"
USER_ID = "U1"
PACKAGE_ID = "P1"
TOKEN = "token-abc"


# ---------------------------------------------------------------------------
# Raw backend payloads (what the API sends, before normalization)
# ---------------------------------------------------------------------------


def raw_booking(**overrides) -> dict:
    base = dict(
        booking_id=BOOKING_ID,
        user_id=USER_ID,
        package_id=PACKAGE_ID,
        booking_code=BOOKING_CODE,
        booking_date="2025-11-01",
        booking_departure_date="2025-12-20",
        booking_return_date="2025-12-25",
        booking_total_participants=2,
        booking_total_price="42000000",
        booking_status="confirmed",
        booking_payment_status="unpaid",
        booking_payment_deadline="2025-11-03T23:59:00Z",
        booking_fullname="Sonya Nur Fadillah",
        booking_phone_number="+628123456789",
        booking_email="sonya@example.com",
        booking_passport_number="X1234567",
        booking_passport_expiry="2030-01-01",
        booking_nationality="Indonesia",
        package_name="Paket Tour Korea",
        package_image="https://cdn.example.com/korea.jpg",
        package_location="Seoul",
        package_benua="Asia",
        package_periode_start="2025-12-20",
        package_periode_end="2025-12-25",
        package_maskapai="Garuda Indonesia",
        package_bandara="CGK",
        has_review=False,
    )
    return {**base, **overrides}


def legacy_booking(**overrides) -> dict:
    """Same booking as raw_booking() but with the short legacy field names."""
    base = dict(
        id=BOOKING_ID,
        user_id=USER_ID,
        package_id=PACKAGE_ID,
        booking_code=BOOKING_CODE,
        departure_date="2025-12-20",
        total_participants=2,
        total_price="42000000",
        status="confirmed",
        payment_status="unpaid",
        fullname="Sonya Nur Fadillah",
        phone_number="+628123456789",
        email="sonya@example.com",
        passport_number="X1234567",
        passport_expiry="2030-01-01",
        nationality="Indonesia",
        destination_name="Seoul",
        destination_location="Asia",
    )
    return {**base, **overrides}


def raw_order(**overrides) -> dict:
    base = dict(
        raw_booking(),
        special_requests="Vegetarian meals",
    )
    return {**base, **overrides}


def raw_package(**overrides) -> dict:
    base = dict(
        id=PACKAGE_ID,
        name="Paket Tour Japan",
        country="Japan",
        price="17000000",
        images=["https://cdn.example.com/japan-1.jpg", "https://cdn.example.com/japan-2.jpg"],
        departure_dates="2026-03-01",
        duration="6 Hari 5 Malam",
        airline="Japan Airlines",
        airport="CGK",
        description="Sakura season",
        region="Asia",
        itinerary=[
            {"day": "Hari 1", "destinasi": ["Tokyo"], "makan": "Sushi", "masjid": [], "transportasi": "Bus"},
            {"destination": "Kyoto", "food": ["Ramen"]},
        ],
    )
    return {**base, **overrides}


def raw_article(**overrides) -> dict:
    base = dict(
        _id="A1",
        name="Tips Liburan ke Korea",
        published_at="2025-01-05",
        body="<p>Isi artikel</p>",
        gallery="https://cdn.example.com/article.jpg",
        url="https://blog.example.com/korea",
        created_by="Admin",
        label="Tips",
        blocks=[{"type": "text", "value": "Paragraf"}, "junk"],
    )
    return {**base, **overrides}


def raw_dashboard(**overrides) -> dict:
    base = dict(
        stats={"totalBooking": 321, "profit": 50000000, "pembeliAktif": 120},
        packages=[{"name": "Paket Tour Turki", "percentage": 80, "imageUrl": "turki.jpg"}],
        buyers=[{"nama": "Budi", "totalBooking": 3, "totalUlasan": 1}],
        status={"pending": 5, "confirmed": 10},
        trips=[{"buyer": "Budi", "tour": "Turki", "price": 30000000}],
    )
    return {**base, **overrides}


def login_response(**overrides) -> dict:
    base = dict(
        id=USER_ID,
        fullname="Sonya Nur Fadillah",
        email="sonya@example.com",
        role="user",
        avatar_url=None,
        token=TOKEN,
    )
    return {"data": {**base, **overrides}}


# ---------------------------------------------------------------------------
# Request payload / model factories
# ---------------------------------------------------------------------------


def create_booking_payload(**overrides) -> CreateBookingPayload:
    base = dict(
        package_id=PACKAGE_ID,
        total_participants=2,
        departure_date=date(2025, 12, 20),
        fullname="Sonya Nur Fadillah",
        email="sonya@example.com",
        phone_number="+628123456789",
        passport_number="X1234567",
        passport_expiry=date(2030, 1, 1),
        nationality="Indonesia",
        passengers=[BookingPassenger(name="Elsa Marta", age=30)],
        payment_method="bank_transfer",
    )
    return CreateBookingPayload(**{**base, **overrides})


def make_profile(**overrides) -> UserProfile:
    base = dict(id=USER_ID, fullname="Sonya Nur Fadillah", email="sonya@example.com", role="user")
    return UserProfile(**{**base, **overrides})
