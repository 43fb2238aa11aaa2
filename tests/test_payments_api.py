from datetime import timedelta

import pytest

from shared.helpers.datetime_helper import utc_now


def tomorrow_at(hour):
    return (utc_now() + timedelta(days=1)).replace(hour=hour, minute=0, second=0, microsecond=0)


@pytest.fixture
def org(make_org, make_lot):
    org = make_org(rate="60.00")
    make_lot(org, total_slots=3)
    return org


@pytest.fixture
def visitor(make_user):
    return make_user()


@pytest.fixture
def booking_id(client, auth_headers, org, visitor):
    response = client.post("/api/bookings", headers=auth_headers(visitor), json={
        "org_id": str(org.id),
        "vehicle_number": "TN09BC5678",
        "start_time": tomorrow_at(9).isoformat(),
        "end_time": tomorrow_at(10).isoformat(),
    })
    return response.json()["data"]["id"]


def test_pay_booking_confirms_it(client, auth_headers, visitor, booking_id):
    headers = auth_headers(visitor)
    response = client.post("/api/payments", headers=headers,
                           json={"booking_id": booking_id, "payment_method": "card"})

    assert response.status_code == 200
    payment = response.json()["data"]
    assert payment["amount"] == 60
    assert payment["purpose"] == "booking"
    assert payment["transaction_id"].startswith("TXN")

    booking = client.get(f"/api/bookings/{booking_id}", headers=headers).json()["data"]
    assert booking["status"] == "confirmed"
    assert booking["payment_status"] == "paid"


def test_paying_twice_is_rejected(client, auth_headers, visitor, booking_id):
    headers = auth_headers(visitor)
    client.post("/api/payments", headers=headers, json={"booking_id": booking_id, "payment_method": "upi"})

    response = client.post("/api/payments", headers=headers,
                           json={"booking_id": booking_id, "payment_method": "upi"})

    assert response.status_code == 400
    assert "Nothing is due" in response.json()["message"]


def test_free_method_fails_when_amount_due(client, auth_headers, visitor, booking_id):
    response = client.post("/api/payments", headers=auth_headers(visitor),
                           json={"booking_id": booking_id, "payment_method": "free"})

    assert response.status_code == 402
    assert response.json()["status_code"] == "500"


def test_payment_history(client, auth_headers, visitor, booking_id, make_user):
    headers = auth_headers(visitor)
    client.post("/api/payments", headers=headers, json={"booking_id": booking_id, "payment_method": "cash"})

    per_booking = client.get(f"/api/payments/booking/{booking_id}", headers=headers).json()["data"]
    history = client.get("/api/payments/history", headers=headers).json()["data"]

    assert per_booking["total"] == 1
    assert history["total"] == 1
    assert history["payments"][0]["method"] == "cash"

    other = client.get("/api/payments/history", headers=auth_headers(make_user())).json()["data"]
    assert other["total"] == 0


def test_cannot_pay_someone_elses_booking(client, auth_headers, make_user, booking_id):
    response = client.post("/api/payments", headers=auth_headers(make_user()),
                           json={"booking_id": booking_id, "payment_method": "card"})
    assert response.status_code == 404
