from app.models.user import User
from app.schemas.user import NAV_ITEMS
from app.services.users import verify_password, visible_tabs


def create(client, **overrides):
    payload = {
        "email": "Recruiter@Company.com",
        "password": "hunter22",
        "role": "user",
        "accessible_tabs": ["jobs", "colleges"],
    }
    payload.update(overrides)
    return client.post("/api/v1/users", json=payload)


def test_visible_tabs():
    assert visible_tabs("superAdmin", []) == list(NAV_ITEMS)
    assert visible_tabs("user", ["colleges", "jobs", "users"]) == ["jobs", "colleges"]


def test_create_stores_bcrypt_hash(client, db):
    response = create(client)
    assert response.status_code == 201
    assert response.json()["email"] == "recruiter@company.com"

    user = db.query(User).one()
    assert user.password_hash != "hunter22"
    assert verify_password("hunter22", user.password_hash)


def test_user_role_needs_a_tab(client):
    response = create(client, accessible_tabs=[])
    assert response.status_code == 422
    assert "At least one tab" in response.json()["message"]


def test_super_admin_keeps_empty_tab_list(client):
    body = create(client, role="superAdmin", accessible_tabs=["jobs"]).json()
    assert body["accessible_tabs"] == []
    assert "users" in body["visible_tabs"]


def test_duplicate_email_rejected(client):
    create(client)
    response = create(client, email="recruiter@company.com")
    assert response.status_code == 400


def test_login_and_update_password(client):
    uid = create(client).json()["uid"]

    ok = client.post("/api/v1/auth/login", json={"email": "recruiter@company.com", "password": "hunter22"})
    assert ok.status_code == 200
    assert ok.json()["visible_tabs"] == ["jobs", "colleges"]

    client.put(
        "/api/v1/users",
        json={"uid": uid, "role": "user", "accessible_tabs": ["overview"], "password": "newpass99"},
    )

    stale = client.post("/api/v1/auth/login", json={"email": "recruiter@company.com", "password": "hunter22"})
    assert stale.status_code == 400
    assert stale.json()["message"] == "Invalid email or password."

    fresh = client.post("/api/v1/auth/login", json={"email": "recruiter@company.com", "password": "newpass99"})
    assert fresh.json()["accessible_tabs"] == ["overview"]


def test_delete_user(client, db):
    uid = create(client).json()["uid"]
    response = client.request("DELETE", "/api/v1/users", json={"uid": uid})
    assert response.status_code == 200
    assert db.query(User).count() == 0
