import pytest
from sqlmodel import select

from app.models.enums import RegistrationStatus
from app.models.registration import StudentRegistration
from app.models.room import Room
from app.models.room_assignment import RoomAssignment


FORM = {
    "full_name": "Yaw Boateng",
    "age": 19,
    "phone": "0244000000",
    "id_number": "STU-0001",
    "academic_year": 1,
}


@pytest.mark.asyncio
async def test_submit_then_resubmit_registration(client, make_user, auth_headers):
    student = await make_user("yaw@example.com")
    headers = auth_headers(student)

    res = await client.post("/api/registrations", json=FORM, headers=headers)
    assert res.status_code == 201
    first = res.json()
    assert first["status"] == "pending"
    assert first["graduation_status"] == "active"

    res = await client.post("/api/registrations", json={**FORM, "phone": "0244111111"}, headers=headers)
    assert res.status_code == 200
    assert res.json()["id"] == first["id"]
    assert res.json()["phone"] == "0244111111"

    me = await client.get("/api/registrations/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["phone"] == "0244111111"


@pytest.mark.asyncio
async def test_me_without_registration_is_404(client, make_user, auth_headers):
    student = await make_user("nobody@example.com")
    res = await client.get("/api/registrations/me", headers=auth_headers(student))
    assert res.status_code == 404


@pytest.mark.asyncio
async def test_invalid_form_rejected(client, make_user, auth_headers):
    student = await make_user("bad@example.com")
    res = await client.post("/api/registrations", json={**FORM, "age": 0}, headers=auth_headers(student))
    assert res.status_code == 422


@pytest.mark.asyncio
async def test_staff_cannot_submit_registration(client, staff, auth_headers):
    res = await client.post("/api/registrations", json=FORM, headers=auth_headers(staff))
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_review_flow(client, staff, make_user, auth_headers):
    student = await make_user("review@example.com")
    created = await client.post("/api/registrations", json=FORM, headers=auth_headers(student))
    registration_id = created.json()["id"]

    # Students cannot review or list
    assert (await client.get("/api/registrations", headers=auth_headers(student))).status_code == 403

    # Rejection requires notes
    res = await client.post(
        f"/api/registrations/{registration_id}/review",
        json={"status": "rejected"},
        headers=auth_headers(staff),
    )
    assert res.status_code == 400

    res = await client.post(
        f"/api/registrations/{registration_id}/review",
        json={"status": "rejected", "review_notes": "Photo missing"},
        headers=auth_headers(staff),
    )
    assert res.status_code == 200
    assert res.json()["status"] == "rejected"
    assert res.json()["reviewed_by"] == str(staff.id)

    # Resubmitting a rejected registration puts it back to pending
    res = await client.post("/api/registrations", json=FORM, headers=auth_headers(student))
    assert res.status_code == 200
    assert res.json()["status"] == "pending"
    assert res.json()["review_notes"] is None

    res = await client.post(
        f"/api/registrations/{registration_id}/review",
        json={"status": "approved"},
        headers=auth_headers(staff),
    )
    assert res.json()["status"] == "approved"

    # Approved registrations are locked
    res = await client.post("/api/registrations", json=FORM, headers=auth_headers(student))
    assert res.status_code == 400


@pytest.mark.asyncio
async def test_review_unknown_registration(client, staff, auth_headers):
    missing = "00000000-0000-0000-0000-000000000000"
    res = await client.post(
        f"/api/registrations/{missing}/review",
        json={"status": "approved"},
        headers=auth_headers(staff),
    )
    assert res.status_code == 404


@pytest.mark.asyncio
async def test_list_filters(client, staff, make_student, auth_headers):
    await make_student("abena@example.com", name="Abena Owusu", status=RegistrationStatus.Pending)
    await make_student("kwame@example.com", name="Kwame Asante", status=RegistrationStatus.Approved)

    res = await client.get("/api/registrations", params={"status": "pending"}, headers=auth_headers(staff))
    assert [r["full_name"] for r in res.json()] == ["Abena Owusu"]

    res = await client.get("/api/registrations", params={"search": "asante"}, headers=auth_headers(staff))
    assert [r["full_name"] for r in res.json()] == ["Kwame Asante"]

    res = await client.get("/api/registrations", headers=auth_headers(staff))
    assert len(res.json()) == 2


@pytest.mark.asyncio
async def test_pass_out_closes_assignment(client, session, staff, make_student, make_room, auth_headers):
    senior = await make_student("senior@example.com", name="Senior", academic_year=4)
    await make_student("junior@example.com", name="Junior", academic_year=2)
    room = await make_room("201", floor="2")

    await client.post(
        f"/api/rooms/{room.id}/assign",
        json={"student_ids": [str(senior.id)]},
        headers=auth_headers(staff),
    )

    candidates = await client.get("/api/registrations/pass-out/candidates", headers=auth_headers(staff))
    assert [c["email"] for c in candidates.json()] == ["senior@example.com"]

    res = await client.post(
        "/api/registrations/pass-out",
        json={"user_ids": [str(senior.id)]},
        headers=auth_headers(staff),
    )
    assert res.status_code == 200
    assert res.json() == {"passed_out": 1, "assignments_closed": 1}

    active = (await session.execute(
        select(RoomAssignment.id).where(
            RoomAssignment.student_id == senior.id,
            RoomAssignment.is_active == True,  # noqa: E712
        )
    )).all()
    assert active == []

    occupancy = (await session.execute(select(Room.current_occupancy).where(Room.id == room.id))).scalar_one()
    assert occupancy == 0

    # A second pass-out of the same student is rejected
    res = await client.post(
        "/api/registrations/pass-out",
        json={"user_ids": [str(senior.id)]},
        headers=auth_headers(staff),
    )
    assert res.status_code == 400


@pytest.mark.asyncio
async def test_rejecting_approved_student_frees_their_bed(client, session, staff, make_student, make_room, auth_headers):
    student = await make_student("revoked@example.com")
    room = await make_room("301", floor="3")
    student_id, room_id = student.id, room.id

    await client.post(
        f"/api/rooms/{room_id}/assign",
        json={"student_ids": [str(student_id)]},
        headers=auth_headers(staff),
    )

    registration_id = (await session.execute(
        select(StudentRegistration.id).where(StudentRegistration.user_id == student_id)
    )).scalar_one()

    res = await client.post(
        f"/api/registrations/{registration_id}/review",
        json={"status": "rejected", "review_notes": "ID card expired"},
        headers=auth_headers(staff),
    )
    assert res.status_code == 200

    active = (await session.execute(
        select(RoomAssignment.id).where(
            RoomAssignment.student_id == student_id,
            RoomAssignment.is_active == True,  # noqa: E712
        )
    )).all()
    assert active == []

    room_row = (await session.execute(select(Room).where(Room.id == room_id))).scalar_one()
    await session.refresh(room_row)
    assert room_row.current_occupancy == 0
    assert room_row.status.value == "Vacant"
