from tests.conftest import PASSWORD, auth_headers


def test_login_success(client, seed_users):
    resp = client.post("/api/auth/login", json={"email": "Admin@Example.com", "password": PASSWORD})
    assert resp.status_code == 200
    data = resp.json()
    assert "access_token" in data
    assert "refresh_token" in data
    assert data["token_type"] == "bearer"
    assert data["user"]["role"] == "admin"


def test_login_wrong_password(client, seed_users):
    resp = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "Wrong!Pass123"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid email or password"


def test_login_unknown_email(client, seed_users):
    resp = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": PASSWORD})
    assert resp.status_code == 401


def test_login_inactive_account(client, db, seed_users):
    seed_users["meera"].is_active = False
    db.commit()
    resp = client.post("/api/auth/login", json={"email": "meera@example.com", "password": PASSWORD})
    assert resp.status_code == 403


def test_register_trainer(client):
    resp = client.post(
        "/api/auth/register",
        json={"full_name": "New Trainer", "email": "New@Example.com", "password": "Fresh@Pass99"},
    )
    assert resp.status_code == 201, resp.text
    user = resp.json()["user"]
    assert user["role"] == "trainer"
    assert user["email"] == "new@example.com"


def test_register_duplicate_email(client, seed_users):
    resp = client.post(
        "/api/auth/register",
        json={"full_name": "Asha Again", "email": "ASHA@example.com", "password": "Fresh@Pass99"},
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Email already exists"


def test_register_weak_password(client):
    resp = client.post(
        "/api/auth/register",
        json={"full_name": "Weak Pass", "email": "weak@example.com", "password": "alllowercase1"},
    )
    assert resp.status_code == 422


def test_register_admin_requires_invite_code(client):
    payload = {"full_name": "Would Be Admin", "email": "boss@example.com", "password": "Fresh@Pass99", "role": "admin"}
    denied = client.post("/api/auth/register", json={**payload, "admin_invite_code": "guess"})
    assert denied.status_code == 403

    allowed = client.post("/api/auth/register", json={**payload, "admin_invite_code": "test-invite"})
    assert allowed.status_code == 201
    assert allowed.json()["user"]["role"] == "admin"


def test_me_authenticated(client, seed_users):
    resp = client.get("/api/auth/me", headers=auth_headers(client, "asha@example.com"))
    assert resp.status_code == 200
    assert resp.json()["email"] == "asha@example.com"
    assert "password_hash" not in resp.json()


def test_me_unauthenticated(client):
    resp = client.get("/api/auth/me")
    assert resp.status_code in (401, 403)  # HTTPBearer raises 401 or 403 depending on version


def test_refresh_token_is_not_an_access_token(client, seed_users):
    tokens = client.post("/api/auth/login", json={"email": "asha@example.com", "password": PASSWORD}).json()
    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {tokens['refresh_token']}"})
    assert resp.status_code == 401


def test_refresh_rotates_token(client, seed_users):
    tokens = client.post("/api/auth/login", json={"email": "asha@example.com", "password": PASSWORD}).json()

    rotated = client.post("/api/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert rotated.status_code == 200
    assert rotated.json()["refresh_token"] != tokens["refresh_token"]

    reused = client.post("/api/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert reused.status_code == 401


def test_logout_revokes_refresh_token(client, seed_users):
    tokens = client.post("/api/auth/login", json={"email": "asha@example.com", "password": PASSWORD}).json()
    headers = {"Authorization": f"Bearer {tokens['access_token']}"}

    assert client.post("/api/auth/logout", headers=headers).status_code == 200
    resp = client.post("/api/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert resp.status_code == 401


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
