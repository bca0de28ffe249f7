import pytest
from sqlmodel import select
from sqlalchemy import func

from app.models.enums import RegistrationStatus, RoomCondition
from app.models.room import Room
from app.models.room_assignment import RoomAssignment


async def active_count(session, **filters):
    query = select(func.count(RoomAssignment.id)).where(RoomAssignment.is_active == True)  # noqa: E712
    for key, value in filters.items():
        query = query.where(getattr(RoomAssignment, key) == value)
    return (await session.execute(query)).scalar_one()


async def stored_occupancy(session, room_id):
    return (await session.execute(select(Room.current_occupancy).where(Room.id == room_id))).scalar_one()


# ===================================================================
# INVENTORY
# ===================================================================
@pytest.mark.asyncio
async def test_create_room_admin_only(client, admin, staff, auth_headers):
    payload = {"room_number": "101", "floor": "1", "max_occupancy": 3}

    assert (await client.post("/api/rooms", json=payload, headers=auth_headers(staff))).status_code == 403

    res = await client.post("/api/rooms", json=payload, headers=auth_headers(admin))
    assert res.status_code == 201
    assert res.json()["status"] == "Vacant"
    assert res.json()["current_occupancy"] == 0

    dup = await client.post("/api/rooms", json=payload, headers=auth_headers(admin))
    assert dup.status_code == 400


@pytest.mark.asyncio
async def test_students_cannot_browse_rooms(client, make_user, auth_headers):
    student = await make_user("student@example.com")
    assert (await client.get("/api/rooms", headers=auth_headers(student))).status_code == 403


@pytest.mark.asyncio
async def test_list_filters_and_search(client, staff, make_student, make_room, auth_headers):
    a = await make_room("101", floor="1")
    await make_room("102", floor="1")
    await make_room("201", floor="2", condition=RoomCondition.UnderRepair)
    student = await make_student("finder@example.com")

    await client.post(
        f"/api/rooms/{a.id}/assign",
        json={"student_ids": [str(student.id)]},
        headers=auth_headers(staff),
    )
    headers = auth_headers(staff)

    res = await client.get("/api/rooms", params={"floor": "1"}, headers=headers)
    assert [r["room_number"] for r in res.json()] == ["101", "102"]

    res = await client.get("/api/rooms", params={"status": "Maintenance"}, headers=headers)
    assert [r["room_number"] for r in res.json()] == ["201"]

    res = await client.get("/api/rooms", params={"search": "FINDER@"}, headers=headers)
    rooms = res.json()
    assert [r["room_number"] for r in rooms] == ["101"]
    assert rooms[0]["occupants"][0]["email"] == "finder@example.com"
    assert rooms[0]["available_beds"] == 1
    assert rooms[0]["status"] == "Occupied"


@pytest.mark.asyncio
async def test_stats_by_floor(client, staff, make_room, auth_headers):
    await make_room("101", floor="1", max_occupancy=2)
    await make_room("102", floor="1", max_occupancy=3)
    await make_room("201", floor="2", condition=RoomCondition.Maintenance)

    res = await client.get("/api/rooms/stats", headers=auth_headers(staff))
    assert res.status_code == 200
    body = res.json()
    assert body["total_rooms"] == 3
    assert body["total_capacity"] == 7
    assert body["total_occupancy"] == 0
    assert body["floors"]["1"] == {"total": 2, "occupied": 0, "vacant": 2, "full": 0, "maintenance": 0}
    assert body["floors"]["2"]["maintenance"] == 1


@pytest.mark.asyncio
async def test_available_students_excludes_assigned_and_pending(client, staff, make_student, make_room, auth_headers):
    room = await make_room("101")
    placed = await make_student("placed@example.com", name="Placed")
    await make_student("waiting@example.com", name="Waiting")
    await make_student("pending@example.com", name="Pending", status=RegistrationStatus.Pending)

    await client.post(
        f"/api/rooms/{room.id}/assign",
        json={"student_ids": [str(placed.id)]},
        headers=auth_headers(staff),
    )

    res = await client.get("/api/rooms/available-students", headers=auth_headers(staff))
    assert [s["email"] for s in res.json()] == ["waiting@example.com"]


@pytest.mark.asyncio
async def test_update_room_condition_and_capacity(client, staff, make_student, make_room, auth_headers):
    room = await make_room("101", max_occupancy=2)
    s1 = await make_student("one@example.com")
    s2 = await make_student("two@example.com")
    headers = auth_headers(staff)

    await client.post(
        f"/api/rooms/{room.id}/assign",
        json={"student_ids": [str(s1.id), str(s2.id)]},
        headers=headers,
    )

    res = await client.patch(f"/api/rooms/{room.id}", json={"max_occupancy": 1}, headers=headers)
    assert res.status_code == 400

    res = await client.patch(f"/api/rooms/{room.id}", json={"max_occupancy": 3}, headers=headers)
    assert res.status_code == 200
    assert res.json()["status"] == "Occupied"

    res = await client.patch(f"/api/rooms/{room.id}", json={"condition": "Under Repair"}, headers=headers)
    assert res.json()["status"] == "Maintenance"


# ===================================================================
# ASSIGNMENT
# ===================================================================
@pytest.mark.asyncio
async def test_assign_and_occupancy(client, session, staff, make_student, make_room, auth_headers):
    room = await make_room("101", max_occupancy=2)
    s1 = await make_student("a@example.com")
    s2 = await make_student("b@example.com")

    res = await client.post(
        f"/api/rooms/{room.id}/assign",
        json={"student_ids": [str(s1.id), str(s2.id)]},
        headers=auth_headers(staff),
    )
    assert res.status_code == 200
    body = res.json()
    assert body["room"]["current_occupancy"] == 2
    assert body["room"]["status"] == "Full"
    assert len(body["assignments"]) == 2
    assert body["reassigned_from"] == []

    occ = await client.get(f"/api/rooms/{room.id}/occupancy", headers=auth_headers(staff))
    assert occ.json()["current_occupancy"] == 2
    assert occ.json()["max_occupancy"] == 2

    assert await stored_occupancy(session, room.id) == 2


@pytest.mark.asyncio
async def test_full_room_rejects_extra_student_without_changes(client, session, staff, make_student, make_room, auth_headers):
    room = await make_room("101", max_occupancy=2)
    s1 = await make_student("a@example.com")
    s2 = await make_student("b@example.com")
    s3 = await make_student("c@example.com")
    headers = auth_headers(staff)

    await client.post(
        f"/api/rooms/{room.id}/assign",
        json={"student_ids": [str(s1.id), str(s2.id)]},
        headers=headers,
    )

    res = await client.post(
        f"/api/rooms/{room.id}/assign",
        json={"student_ids": [str(s3.id)]},
        headers=headers,
    )
    assert res.status_code == 409
    assert "Room capacity is 2, current occupancy is 2" in res.json()["detail"]

    assert await active_count(session, room_id=room.id) == 2
    assert await active_count(session, student_id=s3.id) == 0
    assert await stored_occupancy(session, room.id) == 2


@pytest.mark.asyncio
async def test_batch_larger_than_free_beds_fails_atomically(client, session, staff, make_student, make_room, auth_headers):
    room = await make_room("101", max_occupancy=2)
    students = [await make_student(f"s{i}@example.com") for i in range(3)]

    res = await client.post(
        f"/api/rooms/{room.id}/assign",
        json={"student_ids": [str(s.id) for s in students]},
        headers=auth_headers(staff),
    )
    assert res.status_code == 409
    assert await active_count(session) == 0


@pytest.mark.asyncio
async def test_conflict_requires_force(client, session, staff, make_student, make_room, auth_headers):
    first = await make_room("101")
    second = await make_room("102")
    student = await make_student("mover@example.com")
    headers = auth_headers(staff)

    await client.post(
        f"/api/rooms/{first.id}/assign",
        json={"student_ids": [str(student.id)]},
        headers=headers,
    )

    check = await client.post(
        f"/api/rooms/{second.id}/conflicts",
        json={"student_ids": [str(student.id)]},
        headers=headers,
    )
    assert check.json()["has_conflicts"] is True
    assert check.json()["conflicts"][0]["room_number"] == "101"

    res = await client.post(
        f"/api/rooms/{second.id}/assign",
        json={"student_ids": [str(student.id)]},
        headers=headers,
    )
    assert res.status_code == 409
    detail = res.json()["detail"]
    assert detail["conflicts"] == [
        {"student_id": str(student.id), "room_id": str(first.id), "room_number": "101"}
    ]
    assert await active_count(session, room_id=first.id) == 1

    res = await client.post(
        f"/api/rooms/{second.id}/assign",
        json={"student_ids": [str(student.id)], "force": True},
        headers=headers,
    )
    assert res.status_code == 200
    assert res.json()["reassigned_from"][0]["room_id"] == str(first.id)

    # Exactly one active assignment, now in the second room
    assert await active_count(session, student_id=student.id) == 1
    assert await active_count(session, room_id=second.id) == 1
    assert await stored_occupancy(session, first.id) == 0
    assert await stored_occupancy(session, second.id) == 1


@pytest.mark.asyncio
async def test_force_into_same_room_does_not_double_count(client, session, staff, make_student, make_room, auth_headers):
    room = await make_room("101", max_occupancy=1)
    student = await make_student("stay@example.com")
    headers = auth_headers(staff)

    await client.post(f"/api/rooms/{room.id}/assign", json={"student_ids": [str(student.id)]}, headers=headers)
    res = await client.post(
        f"/api/rooms/{room.id}/assign",
        json={"student_ids": [str(student.id)], "force": True},
        headers=headers,
    )
    assert res.status_code == 200
    assert await active_count(session, student_id=student.id) == 1
    assert await stored_occupancy(session, room.id) == 1


@pytest.mark.asyncio
async def test_assign_rejections(client, staff, make_user, make_student, make_room, auth_headers):
    broken = await make_room("101", condition=RoomCondition.Maintenance)
    room = await make_room("102")
    approved = await make_student("ok@example.com")
    pending = await make_student("wait@example.com", status=RegistrationStatus.Pending)
    headers = auth_headers(staff)

    res = await client.post(f"/api/rooms/{broken.id}/assign", json={"student_ids": [str(approved.id)]}, headers=headers)
    assert res.status_code == 400

    res = await client.post(f"/api/rooms/{room.id}/assign", json={"student_ids": [str(pending.id)]}, headers=headers)
    assert res.status_code == 400

    res = await client.post(f"/api/rooms/{room.id}/assign", json={"student_ids": []}, headers=headers)
    assert res.status_code == 422

    missing = "00000000-0000-0000-0000-000000000000"
    res = await client.post(f"/api/rooms/{missing}/assign", json={"student_ids": [str(approved.id)]}, headers=headers)
    assert res.status_code == 404


@pytest.mark.asyncio
async def test_vacate_is_idempotent(client, session, staff, make_student, make_room, auth_headers):
    room = await make_room("101")
    student = await make_student("out@example.com")
    headers = auth_headers(staff)

    await client.post(f"/api/rooms/{room.id}/assign", json={"student_ids": [str(student.id)]}, headers=headers)

    res = await client.post(f"/api/rooms/{room.id}/vacate", headers=headers)
    assert res.status_code == 200
    assert res.json()["vacated"] == 1
    assert res.json()["room"]["status"] == "Vacant"

    again = await client.post(f"/api/rooms/{room.id}/vacate", headers=headers)
    assert again.status_code == 200
    assert again.json()["vacated"] == 0
    assert await active_count(session, room_id=room.id) == 0

    # History is kept
    history = (await session.execute(
        select(RoomAssignment.vacated_at).where(RoomAssignment.room_id == room.id)
    )).scalars().all()
    assert len(history) == 1 and history[0] is not None


# ===================================================================
# FURNITURE
# ===================================================================
@pytest.mark.asyncio
async def test_furniture_inventory(client, staff, make_room, auth_headers):
    room = await make_room("101")
    headers = auth_headers(staff)

    res = await client.post(f"/api/rooms/{room.id}/furniture", json={"item_name": "Bed"}, headers=headers)
    assert res.status_code == 201
    item_id = res.json()["id"]
    assert res.json()["condition"] == "Good"

    res = await client.patch(f"/api/rooms/furniture/{item_id}", json={"condition": "Poor"}, headers=headers)
    assert res.status_code == 200
    assert res.json()["condition"] == "Poor"

    res = await client.get(f"/api/rooms/{room.id}/furniture", headers=headers)
    assert [i["item_name"] for i in res.json()] == ["Bed"]
