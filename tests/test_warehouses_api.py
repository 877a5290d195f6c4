from courier_hub.shared.database.models import Warehouse
from conftest import auth, make_user


def add_warehouse(db, region, district, status="active"):
    db.add(Warehouse(region=region, district=district, status=status, covered_area=[district]))
    db.commit()


def test_lists_active_hubs_filtered_by_region(client, db):
    make_user(db, "customer@example.com")
    add_warehouse(db, "Dhaka", "Gazipur")
    add_warehouse(db, "Dhaka", "Dhaka")
    add_warehouse(db, "Sylhet", "Sylhet")
    add_warehouse(db, "Dhaka", "Narsingdi", status="inactive")

    response = client.get("/warehouses", params={"region": "Dhaka"}, headers=auth("customer@example.com"))

    assert response.status_code == 200
    body = response.json()
    assert [w["district"] for w in body["data"]] == ["Dhaka", "Gazipur"]
    assert body["pagination"]["total"] == 2


def test_warehouses_require_authentication(client):
    assert client.get("/warehouses").status_code == 401


def test_warehouses_are_paginated(client, db):
    make_user(db, "customer@example.com")
    for district in ("Bogura", "Dhaka", "Gazipur"):
        add_warehouse(db, "Dhaka", district)

    body = client.get("/warehouses", params={"page": 2, "limit": 2}, headers=auth("customer@example.com")).json()

    assert [w["district"] for w in body["data"]] == ["Gazipur"]
    assert body["pagination"]["totalPages"] == 2
