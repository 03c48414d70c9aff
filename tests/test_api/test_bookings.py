"""Tests for the bookings endpoints."""

import uuid
from datetime import date, timedelta

import pytest
from httpx import AsyncClient

from weekstay.models.house import House
from weekstay.models.user import User

pytestmark = pytest.mark.asyncio

BOOKINGS = "/api/v1/bookings"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _week(weeks_ahead: int = 0) -> tuple[str, str]:
    """Return a Tuesday..Monday (check_in, check_out) pair as ISO strings."""
    check_in = date(2024, 6, 4) + timedelta(weeks=weeks_ahead)
    return check_in.isoformat(), (check_in + timedelta(days=6)).isoformat()


async def _book(client: AsyncClient, headers: dict, house: House, weeks_ahead: int = 0):
    start, end = _week(weeks_ahead)
    return await client.post(
        BOOKINGS,
        json={"house_id": str(house.id), "start_date": start, "end_date": end},
        headers=headers,
    )


# ---------------------------------------------------------------------------
# POST /api/v1/bookings
# ---------------------------------------------------------------------------


class TestCreateBooking:
    async def test_create_success(
        self, client: AsyncClient, renter_headers: dict, house: House, renter: User
    ) -> None:
        response = await _book(client, renter_headers, house)
        assert response.status_code == 201
        data = response.json()
        assert data["house_id"] == str(house.id)
        assert data["user_id"] == str(renter.id)
        assert data["check_in"] == "2024-06-04"
        assert data["check_out"] == "2024-06-10"
        assert data["status"] == "confirmed"
        assert renter.credits == 1

    async def test_accepts_datetimes_with_offsets(
        self, client: AsyncClient, renter_headers: dict, house: House
    ) -> None:
        response = await client.post(
            BOOKINGS,
            json={
                "house_id": str(house.id),
                "start_date": "2024-06-04T09:00:00Z",
                "end_date": "2024-06-10T18:00:00+00:00",
            },
            headers=renter_headers,
        )
        assert response.status_code == 201
        assert response.json()["check_in"] == "2024-06-04"

    async def test_overlap_returns_conflict_code(
        self, client: AsyncClient, renter_headers: dict, house: House, renter: User
    ) -> None:
        await _book(client, renter_headers, house)
        response = await client.post(
            BOOKINGS,
            json={"house_id": str(house.id), "start_date": "2024-06-08", "end_date": "2024-06-17"},
            headers=renter_headers,
        )
        assert response.status_code == 400
        assert response.json() == {"detail": "These dates are not available", "code": "DateConflict"}
        assert renter.credits == 1

    async def test_wrong_weekdays_rejected(
        self, client: AsyncClient, renter_headers: dict, house: House
    ) -> None:
        response = await client.post(
            BOOKINGS,
            json={"house_id": str(house.id), "start_date": "2024-06-05", "end_date": "2024-06-11"},
            headers=renter_headers,
        )
        assert response.status_code == 400
        assert response.json()["code"] == "InvalidWindow"
        assert "Tuesday" in response.json()["detail"]

    async def test_end_on_last_calendar_day_rejected(
        self, client: AsyncClient, renter_headers: dict, house: House
    ) -> None:
        response = await client.post(
            BOOKINGS,
            json={"house_id": str(house.id), "start_date": "9999-12-28", "end_date": "9999-12-31"},
            headers=renter_headers,
        )
        assert response.status_code == 400
        assert response.json()["code"] == "InvalidWindow"

    async def test_no_credits(
        self, client: AsyncClient, house: House, make_user, headers_for
    ) -> None:
        broke = await make_user(credits=0)
        response = await _book(client, headers_for(broke), house)
        assert response.status_code == 400
        assert response.json()["code"] == "InsufficientCredits"

    async def test_unknown_house(self, client: AsyncClient, renter_headers: dict) -> None:
        start, end = _week()
        response = await client.post(
            BOOKINGS,
            json={"house_id": str(uuid.uuid4()), "start_date": start, "end_date": end},
            headers=renter_headers,
        )
        assert response.status_code == 404
        assert response.json()["detail"] == "House not found"

    async def test_unparseable_date(self, client: AsyncClient, renter_headers: dict, house: House) -> None:
        response = await client.post(
            BOOKINGS,
            json={"house_id": str(house.id), "start_date": "someday", "end_date": "2024-06-10"},
            headers=renter_headers,
        )
        assert response.status_code == 422

    async def test_admin_books_for_free(
        self, client: AsyncClient, admin_headers: dict, house: House, admin_user: User
    ) -> None:
        response = await _book(client, admin_headers, house)
        assert response.status_code == 201
        assert admin_user.credits == 0

    async def test_requires_auth(self, client: AsyncClient, house: House) -> None:
        start, end = _week()
        response = await client.post(
            BOOKINGS, json={"house_id": str(house.id), "start_date": start, "end_date": end}
        )
        assert response.status_code in (401, 403)

    async def test_inactive_user_rejected(
        self, client: AsyncClient, house: House, make_user, headers_for
    ) -> None:
        dormant = await make_user(credits=3, is_active=False)
        response = await _book(client, headers_for(dormant), house)
        assert response.status_code == 403


# ---------------------------------------------------------------------------
# GET /api/v1/bookings/me and /house/{house_id}
# ---------------------------------------------------------------------------


class TestListBookings:
    async def test_my_bookings_include_cancelled_and_house_name(
        self, client: AsyncClient, renter_headers: dict, house: House
    ) -> None:
        later = (await _book(client, renter_headers, house, weeks_ahead=2)).json()
        await _book(client, renter_headers, house)
        await client.patch(f"{BOOKINGS}/{later['id']}/cancel", headers=renter_headers)

        response = await client.get(f"{BOOKINGS}/me", headers=renter_headers)
        assert response.status_code == 200
        data = response.json()
        assert [b["check_in"] for b in data] == ["2024-06-04", "2024-06-18"]
        assert [b["status"] for b in data] == ["confirmed", "cancelled"]
        assert all(b["house_name"] == "Lake House" for b in data)

    async def test_my_bookings_only_mine(
        self, client: AsyncClient, renter_headers: dict, house: House, make_user, headers_for
    ) -> None:
        await _book(client, renter_headers, house)
        other = await make_user(credits=1)
        response = await client.get(f"{BOOKINGS}/me", headers=headers_for(other))
        assert response.json() == []

    async def test_house_bookings_hide_cancelled(
        self, client: AsyncClient, renter_headers: dict, house: House
    ) -> None:
        kept = (await _book(client, renter_headers, house)).json()
        dropped = (await _book(client, renter_headers, house, weeks_ahead=1)).json()
        await client.patch(f"{BOOKINGS}/{dropped['id']}/cancel", headers=renter_headers)

        response = await client.get(f"{BOOKINGS}/house/{house.id}", headers=renter_headers)
        assert response.status_code == 200
        assert [b["id"] for b in response.json()] == [kept["id"]]


# ---------------------------------------------------------------------------
# PATCH /api/v1/bookings/{id}/cancel
# ---------------------------------------------------------------------------


class TestCancelBooking:
    async def test_cancel_refunds(
        self, client: AsyncClient, renter_headers: dict, house: House, renter: User
    ) -> None:
        booking = (await _book(client, renter_headers, house)).json()
        response = await client.patch(f"{BOOKINGS}/{booking['id']}/cancel", headers=renter_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"
        assert renter.credits == 2

    async def test_cancel_twice(
        self, client: AsyncClient, renter_headers: dict, house: House, renter: User
    ) -> None:
        booking = (await _book(client, renter_headers, house)).json()
        await client.patch(f"{BOOKINGS}/{booking['id']}/cancel", headers=renter_headers)
        response = await client.patch(f"{BOOKINGS}/{booking['id']}/cancel", headers=renter_headers)
        assert response.status_code == 400
        assert response.json()["code"] == "AlreadyCancelled"
        assert renter.credits == 2

    async def test_cannot_cancel_someone_elses(
        self, client: AsyncClient, renter_headers: dict, house: House, admin_headers: dict
    ) -> None:
        booking = (await _book(client, renter_headers, house)).json()
        response = await client.patch(f"{BOOKINGS}/{booking['id']}/cancel", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "Booking not found or unauthorized"


# ---------------------------------------------------------------------------
# Admin: GET /api/v1/bookings and DELETE /api/v1/bookings/{id}
# ---------------------------------------------------------------------------


class TestAdminBookings:
    async def test_list_all(
        self, client: AsyncClient, renter_headers: dict, admin_headers: dict, house: House, renter: User
    ) -> None:
        await _book(client, renter_headers, house)
        response = await client.get(BOOKINGS, headers=admin_headers)
        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["username"] == renter.username
        assert data[0]["house_name"] == house.name

    async def test_list_all_forbidden_for_renters(self, client: AsyncClient, renter_headers: dict) -> None:
        response = await client.get(BOOKINGS, headers=renter_headers)
        assert response.status_code == 403

    async def test_delete_without_refund(
        self,
        client: AsyncClient,
        renter_headers: dict,
        admin_headers: dict,
        house: House,
        renter: User,
    ) -> None:
        booking = (await _book(client, renter_headers, house)).json()
        response = await client.delete(f"{BOOKINGS}/{booking['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == {"message": "Booking deleted"}
        assert renter.credits == 1

        mine = await client.get(f"{BOOKINGS}/me", headers=renter_headers)
        assert mine.json() == []

    async def test_delete_unknown(self, client: AsyncClient, admin_headers: dict) -> None:
        response = await client.delete(f"{BOOKINGS}/{uuid.uuid4()}", headers=admin_headers)
        assert response.status_code == 404

    async def test_delete_forbidden_for_renters(
        self, client: AsyncClient, renter_headers: dict, house: House
    ) -> None:
        booking = (await _book(client, renter_headers, house)).json()
        response = await client.delete(f"{BOOKINGS}/{booking['id']}", headers=renter_headers)
        assert response.status_code == 403
