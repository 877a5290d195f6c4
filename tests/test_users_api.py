from courier_hub.shared.database.models import RiderApplication, User
from conftest import auth, make_application, make_user, reload

ADMIN = "admin@example.com"
CUSTOMER = "customer@example.com"


def test_first_login_creates_user(client, db):
    response = client.post("/users", json={"name": "New Person"}, headers=auth("new@example.com"))

    assert response.status_code == 201
    body = response.json()
    assert body["created"] is True
    assert body["user"]["role"] == "user"
    assert body["user"]["name"] == "New Person"


def test_repeat_login_only_refreshes(client, db):
    client.post("/users", headers=auth("new@example.com"))

    response = client.post("/users", json={"name": "Changed"}, headers=auth("new@example.com"))

    assert response.status_code == 200
    assert response.json()["created"] is False
    assert db.query(User).filter(User.email == "new@example.com").count() == 1


def test_role_in_login_body_is_ignored(client, db):
    response = client.post("/users", json={"role": "admin", "email": "x@example.com"}, headers=auth("new@example.com"))

    assert response.json()["user"]["role"] == "user"
    assert response.json()["user"]["email"] == "new@example.com"


def test_login_requires_token(client):
    assert client.post("/users").status_code == 401
    assert client.post("/users", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_role_lookup(client, db):
    make_user(db, CUSTOMER)
    assert client.get("/users/role", headers=auth(CUSTOMER)).json() == {"role": "user"}


def test_profile_update_is_allow_listed(client, db):
    make_user(db, CUSTOMER)

    response = client.put(
        "/users/profile",
        json={"name": "Renamed", "phone": "01555555555", "role": "admin", "email": "evil@example.com"},
        headers=auth(CUSTOMER),
    )

    assert response.status_code == 200
    stored = reload(db, User, email=CUSTOMER)
    assert stored.name == "Renamed"
    assert stored.phone == "01555555555"
    assert stored.role == "user"


def test_empty_profile_update_is_invalid(client, db):
    make_user(db, CUSTOMER)
    assert client.put("/users/profile", json={}, headers=auth(CUSTOMER)).status_code == 400


def test_admin_lists_users_by_role(client, db):
    make_user(db, ADMIN, role="admin")
    make_user(db, CUSTOMER)
    make_user(db, "rider@example.com", role="rider")

    body = client.get("/users", params={"role": "rider"}, headers=auth(ADMIN)).json()

    assert [u["email"] for u in body["data"]] == ["rider@example.com"]


def test_user_admin_endpoints_reject_customers(client, db):
    make_user(db, CUSTOMER)
    assert client.get("/users", headers=auth(CUSTOMER)).status_code == 403
    assert client.delete(f"/users/{ADMIN}", headers=auth(CUSTOMER)).status_code == 403


def test_admin_sets_role(client, db):
    make_user(db, ADMIN, role="admin")
    make_user(db, CUSTOMER)

    response = client.patch(f"/users/{CUSTOMER}/role", json={"role": "admin"}, headers=auth(ADMIN))

    assert response.status_code == 200
    assert reload(db, User, email=CUSTOMER).role == "admin"


def test_admin_cannot_demote_self(client, db):
    make_user(db, ADMIN, role="admin")
    response = client.patch(f"/users/{ADMIN}/role", json={"role": "user"}, headers=auth(ADMIN))
    assert response.status_code == 400


def test_delete_user_cascades_to_application(client, db, identity_provider):
    make_user(db, ADMIN, role="admin")
    make_user(db, CUSTOMER)
    make_application(db, CUSTOMER)

    response = client.delete(f"/users/{CUSTOMER}", headers=auth(ADMIN))

    assert response.status_code == 200
    assert reload(db, User, email=CUSTOMER) is None
    assert reload(db, RiderApplication, email=CUSTOMER) is None
    assert identity_provider.deleted == [(f"uid-{CUSTOMER}", CUSTOMER)]


def test_delete_user_survives_identity_provider_failure(client, db, identity_provider):
    make_user(db, ADMIN, role="admin")
    make_user(db, CUSTOMER)
    identity_provider.fail_delete = True

    response = client.delete(f"/users/{CUSTOMER}", headers=auth(ADMIN))

    assert response.status_code == 200
    assert reload(db, User, email=CUSTOMER) is None


def test_delete_missing_user_is_not_found(client, db):
    make_user(db, ADMIN, role="admin")
    assert client.delete("/users/ghost@example.com", headers=auth(ADMIN)).status_code == 404
