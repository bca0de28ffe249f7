import pytest

from app.services.audit_service import log_activity


@pytest.mark.asyncio
async def test_signup_is_audited(client, admin, auth_headers):
    await client.post(
        "/api/auth/signup",
        json={"name": "Audited", "email": "audited@example.com", "password": "password123"},
    )

    res = await client.get("/api/admin/audit-logs", params={"action": "USER_SIGNUP"}, headers=auth_headers(admin))
    assert res.status_code == 200
    logs = res.json()
    assert len(logs) == 1
    assert logs[0]["actor_role"] == "student"
    assert logs[0]["entity_type"] == "user"


@pytest.mark.asyncio
async def test_assignment_is_audited(client, admin, staff, make_student, make_room, auth_headers):
    room = await make_room("101")
    student = await make_student("logged@example.com")

    await client.post(
        f"/api/rooms/{room.id}/assign",
        json={"student_ids": [str(student.id)]},
        headers=auth_headers(staff),
    )

    res = await client.get(
        "/api/admin/audit-logs",
        params={"entity_type": "room", "actor_id": str(staff.id)},
        headers=auth_headers(admin),
    )
    logs = res.json()
    assert [entry["action"] for entry in logs] == ["ROOM_ASSIGNED"]
    assert logs[0]["entity_id"] == str(room.id)
    assert logs[0]["details"]["student_ids"] == [str(student.id)]


@pytest.mark.asyncio
async def test_audit_logs_admin_only(client, staff, auth_headers):
    await log_activity(action="MANUAL", remarks="direct write")
    res = await client.get("/api/admin/audit-logs", headers=auth_headers(staff))
    assert res.status_code == 403
