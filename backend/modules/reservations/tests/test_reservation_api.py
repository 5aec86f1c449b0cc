# backend/modules/reservations/tests/test_reservation_api.py

"""
Tests for reservation API endpoints.
"""

import pytest
from datetime import time
from fastapi import status

from ..models.reservation_models import Reservation, ReservationStatus
from .factories import BOOKING_DATE, DiningTableFactory, HolidayFactory

BASE = "/api/v1/reservations"


def booking_payload(**overrides):
    payload = {
        "reservation_date": BOOKING_DATE.isoformat(),
        "start_time": "19:00",
        "party_size": 4,
        "contact_name": "Test Guest",
        "contact_email": "guest@example.com",
    }
    payload.update(overrides)
    return payload


class TestCustomerEndpoints:
    """Booking, viewing and cancelling as a customer"""

    @pytest.fixture(autouse=True)
    def setup(self, opening_hours, four_top):
        pass

    def test_requires_authentication(self, client):
        response = client.post(f"{BASE}/", json=booking_payload())
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error_code"] == "UNAUTHORIZED"

    def test_invalid_token_rejected(self, client):
        response = client.post(
            f"{BASE}/", json=booking_payload(), headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_create_reservation(self, client, customer_headers):
        response = client.post(f"{BASE}/", json=booking_payload(), headers=customer_headers)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["status"] == "confirmed"
        assert data["table_number"] == "T4"
        assert data["user_id"] == 1
        assert data["duration_minutes"] == 90

    def test_second_booking_conflicts(self, client, customer_headers, other_customer_headers):
        client.post(f"{BASE}/", json=booking_payload(), headers=customer_headers)

        response = client.post(f"{BASE}/", json=booking_payload(), headers=other_customer_headers)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error_code"] == "NO_AVAILABILITY"

    def test_outside_hours(self, client, customer_headers):
        response = client.post(
            f"{BASE}/", json=booking_payload(start_time="23:00"), headers=customer_headers
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error_code"] == "INVALID_SLOT"

    def test_closed_holiday(self, client, customer_headers):
        HolidayFactory(date=BOOKING_DATE, is_closed=True)

        response = client.post(f"{BASE}/", json=booking_payload(), headers=customer_headers)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_invalid_party_size(self, client, customer_headers):
        response = client.post(
            f"{BASE}/", json=booking_payload(party_size=0), headers=customer_headers
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_availability(self, client):
        response = client.get(
            f"{BASE}/availability",
            params={"date": BOOKING_DATE.isoformat(), "party_size": 2},
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["is_closed"] is False
        assert data["open_time"] == "11:00:00"
        assert data["time_slots"][0]["time"] == "11:00:00"
        assert data["is_fully_booked"] is False

    def test_availability_rejects_off_grid_duration(self, client, customer_headers):
        params = {"date": BOOKING_DATE.isoformat(), "party_size": 2, "duration_minutes": 20}

        response = client.get(f"{BASE}/availability", params=params)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error_code"] == "INVALID_SLOT"

        # Booking the same duration is rejected the same way
        booking = client.post(
            f"{BASE}/", json=booking_payload(duration_minutes=20), headers=customer_headers
        )
        assert booking.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_availability_rejects_oversized_party(self, client):
        response = client.get(
            f"{BASE}/availability", params={"date": BOOKING_DATE.isoformat(), "party_size": 21}
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error_code"] == "INVALID_PARTY_SIZE"

    def test_available_tables(self, client):
        response = client.get(
            f"{BASE}/availability/tables",
            params={"date": BOOKING_DATE.isoformat(), "start_time": "19:00", "party_size": 2},
        )

        assert response.status_code == status.HTTP_200_OK
        assert [t["table_number"] for t in response.json()] == ["T4"]

    def test_my_reservations(self, client, customer_headers):
        client.post(f"{BASE}/", json=booking_payload(), headers=customer_headers)

        response = client.get(f"{BASE}/my-reservations", headers=customer_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total"] == 1
        assert data["has_next"] is False

    def test_view_is_owner_only(self, client, customer_headers, other_customer_headers, staff_headers):
        created = client.post(f"{BASE}/", json=booking_payload(), headers=customer_headers).json()

        assert client.get(f"{BASE}/{created['id']}", headers=customer_headers).status_code == 200
        assert client.get(f"{BASE}/{created['id']}", headers=staff_headers).status_code == 200
        response = client.get(f"{BASE}/{created['id']}", headers=other_customer_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_cancel(self, client, customer_headers):
        created = client.post(f"{BASE}/", json=booking_payload(), headers=customer_headers).json()

        response = client.post(
            f"{BASE}/{created['id']}/cancel", json={"reason": "Sick"}, headers=customer_headers
        )
        again = client.post(f"{BASE}/{created['id']}/cancel", headers=customer_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "cancelled"
        assert again.status_code == status.HTTP_200_OK
        assert again.json()["cancellation_reason"] == "Sick"

    def test_unknown_reservation(self, client, customer_headers):
        response = client.get(f"{BASE}/9999", headers=customer_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestPaymentConfirmation:

    def test_gateway_confirms_pending(self, client, db_session, opening_hours, customer_headers, payment_gateway_headers):
        HolidayFactory(date=BOOKING_DATE, is_closed=False, requires_deposit=True)
        DiningTableFactory(table_number="T4", capacity=4)
        created = client.post(f"{BASE}/", json=booking_payload(), headers=customer_headers).json()
        assert created["status"] == "pending"

        response = client.post(
            f"{BASE}/{created['id']}/payment-confirmation",
            json={"payment_reference": "pay_42"},
            headers=payment_gateway_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "confirmed"
        assert response.json()["payment_reference"] == "pay_42"

    def test_customer_cannot_confirm(self, client, opening_hours, four_top, customer_headers):
        created = client.post(f"{BASE}/", json=booking_payload(), headers=customer_headers).json()

        response = client.post(
            f"{BASE}/{created['id']}/payment-confirmation",
            json={"payment_reference": "pay_42"},
            headers=customer_headers,
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestStaffEndpoints:

    @pytest.fixture(autouse=True)
    def setup(self, opening_hours, four_top):
        pass

    def test_customer_cannot_use_staff_routes(self, client, customer_headers):
        response = client.get(
            f"{BASE}/staff/daily",
            params={"reservation_date": BOOKING_DATE.isoformat()},
            headers=customer_headers,
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_book_on_behalf_and_daily_sheet(self, client, staff_headers, db_session):
        response = client.post(
            f"{BASE}/staff/", json=booking_payload(user_id=7), headers=staff_headers
        )
        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["user_id"] == 7
        assert response.json()["source"] == "staff"

        daily = client.get(
            f"{BASE}/staff/daily",
            params={"reservation_date": BOOKING_DATE.isoformat(), "status": "confirmed"},
            headers=staff_headers,
        )
        assert daily.status_code == status.HTTP_200_OK
        assert daily.json()["total"] == 1

    def test_lookup_and_cancel(self, client, customer_headers, staff_headers, db_session):
        created = client.post(f"{BASE}/", json=booking_payload(), headers=customer_headers).json()

        found = client.get(f"{BASE}/staff/lookup/{created['confirmation_code']}", headers=staff_headers)
        assert found.json()["id"] == created["id"]

        response = client.post(f"{BASE}/staff/{created['id']}/cancel", headers=staff_headers)
        assert response.json()["cancelled_by"] == "staff"

        reservation = db_session.get(Reservation, created["id"])
        assert reservation.status == ReservationStatus.CANCELLED


class TestAdminEndpoints:

    def test_manager_creates_table(self, client, manager_headers):
        response = client.post(
            f"{BASE}/admin/tables",
            json={"table_number": "20", "capacity": 6, "section": "patio"},
            headers=manager_headers,
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["capacity"] == 6

    def test_host_cannot_create_table(self, client, staff_headers):
        response = client.post(
            f"{BASE}/admin/tables",
            json={"table_number": "20", "capacity": 6},
            headers=staff_headers,
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_duplicate_table_conflict(self, client, manager_headers):
        client.post(f"{BASE}/admin/tables", json={"table_number": "1", "capacity": 2}, headers=manager_headers)

        response = client.post(
            f"{BASE}/admin/tables", json={"table_number": "1", "capacity": 4}, headers=manager_headers
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error_code"] == "INVALID_CONFIGURATION"

    def test_opening_hours_and_holidays(self, client, manager_headers, customer_headers):
        day = BOOKING_DATE.weekday()
        response = client.put(
            f"{BASE}/admin/opening-hours/{day}",
            json={"open_time": "12:00", "close_time": "20:00"},
            headers=manager_headers,
        )
        assert response.status_code == status.HTTP_200_OK

        response = client.post(
            f"{BASE}/admin/holidays",
            json={"date": BOOKING_DATE.isoformat(), "name": "Inventory", "is_closed": True},
            headers=manager_headers,
        )
        assert response.status_code == status.HTTP_201_CREATED
        holiday_id = response.json()["id"]

        availability = client.get(
            f"{BASE}/availability", params={"date": BOOKING_DATE.isoformat(), "party_size": 2}
        ).json()
        assert availability["is_closed"] is True

        assert client.delete(f"{BASE}/admin/holidays/{holiday_id}", headers=manager_headers).status_code == 204

        availability = client.get(
            f"{BASE}/availability", params={"date": BOOKING_DATE.isoformat(), "party_size": 2}
        ).json()
        assert availability["close_time"] == "20:00:00"

    def test_invalid_hours_rejected(self, client, manager_headers):
        response = client.put(
            f"{BASE}/admin/opening-hours/1",
            json={"open_time": "22:00", "close_time": "11:00"},
            headers=manager_headers,
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
