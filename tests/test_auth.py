import pytest

from app.models.enums import RegistrationStatus, UserRole


@pytest.mark.asyncio
async def test_signup_creates_student_and_returns_token(client):
    payload = {"name": "Ama Mensah", "email": "Ama@Example.com", "password": "password123"}
    res = await client.post("/api/auth/signup", json=payload)

    assert res.status_code == 201
    body = res.json()
    assert body["access_token"]
    assert body["token_type"] == "bearer"
    assert body["user"]["email"] == "ama@example.com"
    assert body["user"]["role"] == "student"
    assert body["landing_view"] == "student-dashboard"


@pytest.mark.asyncio
async def test_signup_duplicate_email_rejected(client):
    payload = {"name": "Kofi", "email": "kofi@example.com", "password": "password123"}
    assert (await client.post("/api/auth/signup", json=payload)).status_code == 201

    res = await client.post("/api/auth/signup", json=payload)
    assert res.status_code == 400
    assert "already exists" in res.json()["detail"]


@pytest.mark.asyncio
async def test_signup_password_mismatch_is_422(client):
    payload = {
        "name": "Esi",
        "email": "esi@example.com",
        "password": "password123",
        "confirm_password": "password124",
    }
    res = await client.post("/api/auth/signup", json=payload)
    assert res.status_code == 422


@pytest.mark.asyncio
async def test_login_success_and_failure(client, make_user):
    await make_user("warden@example.com", role=UserRole.Staff, password="secret-pass")

    ok = await client.post("/api/auth/login", json={"email": "warden@example.com", "password": "secret-pass"})
    assert ok.status_code == 200
    assert ok.json()["landing_view"] == "staff-dashboard"

    bad = await client.post("/api/auth/login", json={"email": "warden@example.com", "password": "wrong"})
    assert bad.status_code == 401


@pytest.mark.asyncio
async def test_session_requires_token(client):
    res = await client.get("/api/auth/session")
    assert res.status_code in (401, 403)

    res = await client.get("/api/auth/session", headers={"Authorization": "Bearer not-a-jwt"})
    assert res.status_code == 401


@pytest.mark.asyncio
async def test_session_reports_registration_state(client, make_user, make_student, auth_headers):
    newcomer = await make_user("new@example.com")
    res = await client.get("/api/auth/session", headers=auth_headers(newcomer))
    assert res.status_code == 200
    assert res.json()["has_registration"] is False
    assert res.json()["registration_status"] is None

    pending = await make_student("pending@example.com", status=RegistrationStatus.Pending)
    res = await client.get("/api/auth/session", headers=auth_headers(pending))
    assert res.json()["has_registration"] is True
    assert res.json()["registration_status"] == "pending"
    assert res.json()["landing_view"] == "student-dashboard"


@pytest.mark.asyncio
async def test_change_password(client, make_user, auth_headers):
    user = await make_user("change@example.com", password="old-password")
    headers = auth_headers(user)

    wrong = await client.post(
        "/api/account/change-password",
        json={"old_password": "nope", "new_password": "new-password"},
        headers=headers,
    )
    assert wrong.status_code == 400

    same = await client.post(
        "/api/account/change-password",
        json={"old_password": "old-password", "new_password": "old-password"},
        headers=headers,
    )
    assert same.status_code == 400

    ok = await client.post(
        "/api/account/change-password",
        json={"old_password": "old-password", "new_password": "new-password"},
        headers=headers,
    )
    assert ok.status_code == 200

    login = await client.post("/api/auth/login", json={"email": "change@example.com", "password": "new-password"})
    assert login.status_code == 200
