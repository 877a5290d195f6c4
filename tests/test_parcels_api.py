from courier_hub.shared.database.models import Parcel
from conftest import PARCEL_PAYLOAD, auth, make_parcel, make_rider, make_user, reload

CUSTOMER = "customer@example.com"
OTHER = "other@example.com"
ADMIN = "admin@example.com"


def test_requests_without_token_are_unauthenticated(client):
    response = client.get("/parcels")
    assert response.status_code == 401
    assert response.json()["error_code"] == "unauthenticated"


def test_unknown_user_is_unauthenticated(client):
    response = client.get("/parcels", headers=auth("ghost@example.com"))
    assert response.status_code == 401
    assert response.json()["error"] == "User not found"


def test_create_parcel_sets_owner_and_initial_state(client, db):
    make_user(db, CUSTOMER)

    response = client.post("/parcels", json=PARCEL_PAYLOAD, headers=auth(CUSTOMER))

    assert response.status_code == 201
    body = response.json()
    assert body["created_by"] == CUSTOMER
    assert body["delivery_status"] == "pending"
    assert body["payment_status"] == "unpaid"
    assert body["tracking_id"].startswith("PCL-")
    assert len(body["id"]) == 24


def test_create_parcel_ignores_client_supplied_status(client, db):
    make_user(db, CUSTOMER)
    payload = dict(PARCEL_PAYLOAD, delivery_status="delivered", payment_status="paid", created_by=OTHER)

    body = client.post("/parcels", json=payload, headers=auth(CUSTOMER)).json()

    assert body["delivery_status"] == "pending"
    assert body["payment_status"] == "unpaid"
    assert body["created_by"] == CUSTOMER


def test_create_parcel_validation_error_is_400(client, db):
    make_user(db, CUSTOMER)
    payload = dict(PARCEL_PAYLOAD, cost=0)

    response = client.post("/parcels", json=payload, headers=auth(CUSTOMER))

    assert response.status_code == 400
    assert response.json()["error_code"] == "invalid_input"


def test_customer_only_sees_own_parcels(client, db):
    make_user(db, CUSTOMER)
    make_user(db, OTHER)
    mine = make_parcel(db, CUSTOMER)
    theirs = make_parcel(db, OTHER)

    body = client.get("/parcels", headers=auth(CUSTOMER)).json()

    assert [p["id"] for p in body["data"]] == [mine.id]
    assert body["pagination"]["total"] == 1
    assert client.get(f"/parcels/{theirs.id}", headers=auth(CUSTOMER)).status_code == 404


def test_customer_cannot_widen_scope_with_email_filter(client, db):
    make_user(db, CUSTOMER)
    make_user(db, OTHER)
    make_parcel(db, OTHER)

    body = client.get("/parcels", params={"email": OTHER}, headers=auth(CUSTOMER)).json()

    assert body["data"] == []


def test_admin_filters_by_creator_email(client, db):
    make_user(db, ADMIN, role="admin")
    make_parcel(db, CUSTOMER)
    other = make_parcel(db, OTHER)

    body = client.get("/parcels", params={"email": OTHER}, headers=auth(ADMIN)).json()

    assert [p["id"] for p in body["data"]] == [other.id]


def test_rider_sees_only_parcels_holding_a_leg(client, db):
    make_rider(db, "rider@example.com")
    collecting = make_parcel(db, CUSTOMER, assigned_to_collect="rider@example.com", delivery_status="collecting")
    delivering = make_parcel(db, CUSTOMER, assigned_to_deliver="rider@example.com", delivery_status="delivering")
    make_parcel(db, CUSTOMER, assigned_to_collect="someone@example.com", delivery_status="collecting")

    body = client.get("/parcels", headers=auth("rider@example.com")).json()

    assert {p["id"] for p in body["data"]} == {collecting.id, delivering.id}


def test_third_page_holds_the_oldest_records(client, db):
    make_user(db, ADMIN, role="admin")
    created = [make_parcel(db, CUSTOMER) for _ in range(25)]

    body = client.get("/parcels", params={"page": 3, "limit": 10}, headers=auth(ADMIN)).json()

    assert body["pagination"] == {"total": 25, "page": 3, "limit": 10, "totalPages": 3}
    # newest first: page 3 is records 21-25, i.e. the five created first
    assert [p["id"] for p in body["data"]] == [p.id for p in reversed(created[:5])]


def test_invalid_page_is_rejected(client, db):
    make_user(db, ADMIN, role="admin")
    assert client.get("/parcels", params={"page": 0}, headers=auth(ADMIN)).status_code == 400


def test_malformed_parcel_id_is_invalid_input(client, db):
    make_user(db, CUSTOMER)

    response = client.get("/parcels/not-an-id", headers=auth(CUSTOMER))

    assert response.status_code == 400
    assert response.json()["error_code"] == "invalid_input"


def test_owner_updates_pending_parcel(client, db):
    make_user(db, CUSTOMER)
    parcel = make_parcel(db, CUSTOMER)

    response = client.put(f"/parcels/{parcel.id}", json={"title": "Books", "cost": 220}, headers=auth(CUSTOMER))

    assert response.status_code == 200
    assert response.json()["title"] == "Books"
    assert response.json()["cost"] == 220


def test_update_cannot_touch_lifecycle_fields(client, db):
    make_user(db, CUSTOMER)
    parcel = make_parcel(db, CUSTOMER)

    client.put(
        f"/parcels/{parcel.id}",
        json={"title": "Books", "delivery_status": "delivered", "payment_status": "paid"},
        headers=auth(CUSTOMER),
    )

    stored = reload(db, Parcel, id=parcel.id)
    assert stored.title == "Books"
    assert stored.delivery_status == "pending"
    assert stored.payment_status == "unpaid"


def test_paid_parcel_cannot_be_updated_or_deleted(client, db):
    make_user(db, CUSTOMER)
    parcel = make_parcel(db, CUSTOMER, payment_status="paid")

    update = client.put(f"/parcels/{parcel.id}", json={"title": "Books"}, headers=auth(CUSTOMER))
    delete = client.delete(f"/parcels/{parcel.id}", headers=auth(CUSTOMER))

    assert update.status_code == 403
    assert delete.status_code == 403
    assert reload(db, Parcel, id=parcel.id).title == "Documents"


def test_parcel_in_delivery_cannot_be_deleted_by_owner(client, db):
    make_user(db, CUSTOMER)
    parcel = make_parcel(db, CUSTOMER, delivery_status="collecting", assigned_to_collect="r@example.com")

    assert client.delete(f"/parcels/{parcel.id}", headers=auth(CUSTOMER)).status_code == 403


def test_non_owner_cannot_update(client, db):
    make_user(db, OTHER)
    parcel = make_parcel(db, CUSTOMER)

    response = client.put(f"/parcels/{parcel.id}", json={"title": "Mine now"}, headers=auth(OTHER))

    assert response.status_code == 404
    assert reload(db, Parcel, id=parcel.id).title == "Documents"


def test_owner_deletes_pending_parcel(client, db):
    make_user(db, CUSTOMER)
    parcel = make_parcel(db, CUSTOMER)

    response = client.delete(f"/parcels/{parcel.id}", headers=auth(CUSTOMER))

    assert response.status_code == 200
    assert reload(db, Parcel, id=parcel.id) is None


def test_admin_deletes_any_parcel(client, db):
    make_user(db, ADMIN, role="admin")
    parcel = make_parcel(db, CUSTOMER, delivery_status="delivered", payment_status="paid")

    assert client.delete(f"/parcels/{parcel.id}", headers=auth(ADMIN)).status_code == 200
    assert client.delete(f"/parcels/{parcel.id}", headers=auth(ADMIN)).status_code == 404


def test_status_count_is_sorted_by_status(client, db):
    make_parcel(db, CUSTOMER)
    make_parcel(db, CUSTOMER)
    make_parcel(db, CUSTOMER, delivery_status="delivered")
    make_parcel(db, CUSTOMER, delivery_status="collecting")

    body = client.get("/parcels/status-count").json()

    assert body == [
        {"status": "collecting", "count": 1},
        {"status": "delivered", "count": 1},
        {"status": "pending", "count": 2},
    ]


def test_update_cannot_blank_routing_fields(client, db):
    make_user(db, CUSTOMER)
    parcel = make_parcel(db, CUSTOMER)

    response = client.put(f"/parcels/{parcel.id}", json={"receiver_district": ""}, headers=auth(CUSTOMER))

    assert response.status_code == 400
    assert reload(db, Parcel, id=parcel.id).receiver_district == "Dhaka"
