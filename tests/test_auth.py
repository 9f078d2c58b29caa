from conftest import API


def test_register_first_user_then_login(client):
    resp = client.post(
        f"{API}/auth/register", json={"email": "owner@example.com", "password": "hunter22", "name": "Owner"}
    )
    assert resp.status_code == 201
    assert resp.json()["email"] == "owner@example.com"

    resp = client.post(f"{API}/auth/register", json={"email": "second@example.com", "password": "hunter22", "name": "Two"})
    assert resp.status_code == 403

    resp = client.post(f"{API}/auth/login", json={"email": "owner@example.com", "password": "hunter22"})
    assert resp.status_code == 200
    token = resp.json()["access_token"]

    me = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["name"] == "Owner"


def test_login_with_wrong_password(client, admin):
    resp = client.post(f"{API}/auth/login", json={"email": admin.email, "password": "wrong-one"})
    assert resp.status_code == 401
    assert resp.json()["success"] is False


def test_business_routes_require_a_token(client):
    resp = client.get(f"{API}/vendors/")
    assert resp.status_code in (401, 403)

    resp = client.get(f"{API}/vendors/", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401


def test_inactive_user_is_rejected(client, admin, auth_headers, db):
    admin.is_active = False
    db.commit()
    assert client.get(f"{API}/auth/me", headers=auth_headers).status_code == 403


def test_change_password(client, admin, auth_headers):
    resp = client.post(
        f"{API}/auth/change-password", json={"old_password": "nope", "new_password": "newpass1"}, headers=auth_headers
    )
    assert resp.status_code == 400

    resp = client.post(
        f"{API}/auth/change-password", json={"old_password": "secret123", "new_password": "newpass1"}, headers=auth_headers
    )
    assert resp.status_code == 200
    assert client.post(f"{API}/auth/login", json={"email": admin.email, "password": "newpass1"}).status_code == 200


def test_root(client):
    assert client.get("/").json()["message"].startswith("Welcome")
