import uuid

import pytest


@pytest.fixture
def org(make_org):
    return make_org(name="Tech Park", rate="30.00")


@pytest.fixture
def admin_headers(org, make_user, auth_headers):
    return auth_headers(make_user("org_admin", org_id=org.id))


def add_lot(client, headers, name="Level 1", total_slots=10, priority_order=1):
    return client.post("/api/parking-lots", headers=headers, json={
        "name": name, "total_slots": total_slots, "priority_order": priority_order})


def test_create_and_read_org(client, auth_headers, make_user):
    admin = make_user("org_admin", org_id=uuid.uuid4())
    response = client.post("/api/organizations", headers=auth_headers(admin), json={
        "name": "Harbour View", "visitor_hourly_rate": 25, "operating_hours": "24x7"})

    assert response.status_code == 200
    org_id = response.json()["data"]["id"]

    fetched = client.get(f"/api/organizations/{org_id}", headers=auth_headers(make_user()))
    assert fetched.json()["data"]["visitor_hourly_rate"] == 25
    assert any(o["id"] == org_id for o in
               client.get("/api/organizations", headers=auth_headers(make_user())).json()["data"])


def test_only_admins_create_orgs(client, auth_headers, make_user):
    response = client.post("/api/organizations", headers=auth_headers(make_user()),
                           json={"name": "Nope", "visitor_hourly_rate": 10})
    assert response.status_code == 403


def test_unknown_org_is_404(client, auth_headers, make_user):
    response = client.get(f"/api/organizations/{uuid.uuid4()}", headers=auth_headers(make_user()))

    assert response.status_code == 404
    assert response.json()["status_code"] == "203"


def test_admin_updates_own_org_only(client, org, admin_headers, make_org, make_user, auth_headers):
    response = client.put(f"/api/organizations/{org.id}", headers=admin_headers,
                          json={"visitor_hourly_rate": 45})
    assert response.json()["data"]["visitor_hourly_rate"] == 45

    other_admin = make_user("org_admin", org_id=make_org(name="Rival").id)
    response = client.put(f"/api/organizations/{org.id}", headers=auth_headers(other_admin),
                          json={"visitor_hourly_rate": 1})
    assert response.status_code == 403


def test_lots_listed_in_priority_order(client, org, admin_headers, make_user, auth_headers):
    add_lot(client, admin_headers, name="Overflow", total_slots=20, priority_order=2)
    add_lot(client, admin_headers, name="Main", total_slots=5, priority_order=1)

    lots = client.get(f"/api/organizations/{org.id}/parking-lots",
                      headers=auth_headers(make_user())).json()["data"]

    assert [lot["lot_name"] for lot in lots] == ["Main", "Overflow"]
    assert lots[0]["available_slots"] == 5
    assert set(lots[0]) >= {"lot_id", "lot_name", "priority_order", "total_slots", "available_slots"}


def test_duplicate_lot_name_rejected(client, admin_headers):
    add_lot(client, admin_headers, name="Main")
    response = add_lot(client, admin_headers, name="Main")

    assert response.status_code == 400
    assert response.json()["status_code"] == "201"


def test_update_and_deactivate_lot(client, org, admin_headers, make_user, auth_headers):
    lot_id = add_lot(client, admin_headers).json()["data"]["lot_id"]

    updated = client.put(f"/api/parking-lots/{lot_id}", headers=admin_headers,
                         json={"total_slots": 4}).json()["data"]
    assert updated["total_slots"] == 4
    assert updated["available_slots"] == 4

    removed = client.delete(f"/api/parking-lots/{lot_id}", headers=admin_headers).json()["data"]
    assert removed["is_active"] is False

    lots = client.get(f"/api/organizations/{org.id}/parking-lots",
                      headers=auth_headers(make_user())).json()["data"]
    assert lots == []


def test_lot_needs_positive_slots(client, admin_headers):
    assert add_lot(client, admin_headers, total_slots=0).status_code == 422


def test_visitor_cannot_manage_lots(client, auth_headers, make_user):
    assert add_lot(client, auth_headers(make_user())).status_code == 403
