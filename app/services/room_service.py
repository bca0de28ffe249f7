# app/services/room_service.py
"""
Room inventory and assignment consistency.

Read side: rooms joined with their active assignments (occupancy,
occupants, floor stats, students still waiting for a room).

Write side: assign / vacate. Each write runs as ONE transaction on the
caller's session. The database backs the rules up:

    - partial unique index: one active assignment per student
    - CHECK constraint: 0 <= current_occupancy <= max_occupancy

so two staff members racing on the same room cannot both win.
"""

from collections import defaultdict
from datetime import datetime, timezone
from typing import Iterable, Optional
from uuid import UUID

from loguru import logger
from sqlmodel import select
from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    AssignmentConflictError,
    CapacityExceededError,
    NotFoundError,
    ValidationError,
)
from app.models.enums import (
    GraduationStatus,
    RegistrationStatus,
    RoomCondition,
    RoomStatus,
    UNAVAILABLE_CONDITIONS,
    UserRole,
)
from app.models.registration import StudentRegistration
from app.models.room import Room
from app.models.room_assignment import RoomAssignment
from app.models.user import User
from app.schemas.registration import AvailableStudent
from app.schemas.room import FloorStats, Occupant, RoomDetail, RoomRead


# ============================================================================
# DERIVED STATUS
# ============================================================================
def is_out_of_service(room: Room) -> bool:
    return RoomCondition(room.condition) in UNAVAILABLE_CONDITIONS


def derive_status(room: Room, occupancy: int) -> RoomStatus:
    """Status is never stored independently: condition first, then occupancy."""
    if is_out_of_service(room):
        return RoomStatus.Maintenance
    if occupancy <= 0:
        return RoomStatus.Vacant
    if occupancy >= room.max_occupancy:
        return RoomStatus.Full
    return RoomStatus.Occupied


# ============================================================================
# LOOKUPS
# ============================================================================
async def get_room(session: AsyncSession, room_id: UUID, for_update: bool = False) -> Room | None:
    query = select(Room).where(Room.id == room_id)
    if for_update:
        query = query.with_for_update()
    result = await session.execute(query)
    return result.scalar_one_or_none()


async def compute_occupancy(session: AsyncSession, room_id: UUID) -> int:
    result = await session.execute(
        select(func.count(RoomAssignment.id)).where(
            RoomAssignment.room_id == room_id,
            RoomAssignment.is_active == True,  # noqa: E712
        )
    )
    return result.scalar_one()


async def find_conflicts(
    session: AsyncSession,
    student_ids: Iterable[UUID],
    for_update: bool = False,
) -> list[dict]:
    """Active assignments held by any of `student_ids`."""
    ids = list(student_ids)
    if not ids:
        return []

    query = (
        select(RoomAssignment.student_id, RoomAssignment.room_id, Room.room_number)
        .join(Room, Room.id == RoomAssignment.room_id)
        .where(
            RoomAssignment.student_id.in_(ids),
            RoomAssignment.is_active == True,  # noqa: E712
        )
    )
    if for_update:
        query = query.with_for_update(of=RoomAssignment)

    result = await session.execute(query)
    return [
        {"student_id": row.student_id, "room_id": row.room_id, "room_number": row.room_number}
        for row in result.all()
    ]


# ============================================================================
# OCCUPANCY SYNC (call inside an open transaction)
# ============================================================================
async def sync_room(session: AsyncSession, room: Room) -> Room:
    occupancy = await compute_occupancy(session, room.id)
    room.current_occupancy = occupancy
    room.status = derive_status(room, occupancy)
    room.updated_at = datetime.now(timezone.utc)
    session.add(room)
    return room


async def sync_rooms(session: AsyncSession, room_ids: Iterable[UUID]) -> None:
    for room_id in set(room_ids):
        room = await session.get(Room, room_id)
        if room is not None:
            await sync_room(session, room)
    await session.flush()


# ============================================================================
# READ SIDE
# ============================================================================
async def _occupants_by_room(session: AsyncSession, room_ids: list[UUID]) -> dict[UUID, list[Occupant]]:
    if not room_ids:
        return {}

    result = await session.execute(
        select(RoomAssignment, User)
        .join(User, User.id == RoomAssignment.student_id)
        .where(
            RoomAssignment.room_id.in_(room_ids),
            RoomAssignment.is_active == True,  # noqa: E712
        )
        .order_by(RoomAssignment.assigned_at)
    )

    occupants: dict[UUID, list[Occupant]] = defaultdict(list)
    for assignment, user in result.all():
        occupants[assignment.room_id].append(
            Occupant(
                student_id=user.id,
                email=user.email,
                name=user.name,
                assigned_at=assignment.assigned_at,
            )
        )
    return occupants


def _to_detail(room: Room, occupants: list[Occupant]) -> RoomDetail:
    data = RoomRead.model_validate(room).model_dump()
    data["current_occupancy"] = len(occupants)
    data["occupants"] = occupants
    data["available_beds"] = max(room.max_occupancy - len(occupants), 0)
    return RoomDetail(**data)


async def list_rooms(
    session: AsyncSession,
    floor: Optional[str] = None,
    status: Optional[RoomStatus] = None,
    search: Optional[str] = None,
) -> list[RoomDetail]:
    query = select(Room).order_by(Room.room_number)
    if floor:
        query = query.where(Room.floor == floor)
    if status:
        query = query.where(Room.status == status)

    result = await session.execute(query)
    rooms = result.scalars().all()
    occupants = await _occupants_by_room(session, [room.id for room in rooms])

    term = search.strip().lower() if search else None
    details = []
    for room in rooms:
        room_occupants = occupants.get(room.id, [])
        if term and not (
            term in room.room_number.lower()
            or term in room.floor.lower()
            or any(term in o.email.lower() for o in room_occupants)
        ):
            continue
        details.append(_to_detail(room, room_occupants))

    return details


async def get_room_detail(session: AsyncSession, room_id: UUID) -> RoomDetail:
    room = await get_room(session, room_id)
    if not room:
        raise NotFoundError("Room not found")

    occupants = await _occupants_by_room(session, [room.id])
    return _to_detail(room, occupants.get(room.id, []))


async def floor_stats(session: AsyncSession) -> dict[str, FloorStats]:
    result = await session.execute(select(Room).order_by(Room.floor))
    stats: dict[str, FloorStats] = {}

    for room in result.scalars().all():
        floor = stats.setdefault(room.floor, FloorStats())
        floor.total += 1

        status = RoomStatus(room.status)
        if status == RoomStatus.Occupied:
            floor.occupied += 1
        elif status == RoomStatus.Vacant:
            floor.vacant += 1
        elif status == RoomStatus.Full:
            floor.full += 1
        else:
            floor.maintenance += 1

    return stats


async def capacity_totals(session: AsyncSession) -> tuple[int, int, int]:
    """(rooms, beds, occupied beds)"""
    result = await session.execute(
        select(
            func.count(Room.id),
            func.coalesce(func.sum(Room.max_occupancy), 0),
            func.coalesce(func.sum(Room.current_occupancy), 0),
        )
    )
    total_rooms, capacity, occupancy = result.one()
    return int(total_rooms), int(capacity), int(occupancy)


async def list_available_students(session: AsyncSession) -> list[AvailableStudent]:
    """Approved, still-active students that hold no active assignment."""
    assigned = select(RoomAssignment.student_id).where(RoomAssignment.is_active == True)  # noqa: E712

    result = await session.execute(
        select(StudentRegistration, User)
        .join(User, User.id == StudentRegistration.user_id)
        .where(
            User.role == UserRole.Student,
            StudentRegistration.status == RegistrationStatus.Approved,
            StudentRegistration.graduation_status == GraduationStatus.Active,
            StudentRegistration.user_id.not_in(assigned),
        )
        .order_by(StudentRegistration.full_name)
    )

    return [
        AvailableStudent(
            user_id=user.id,
            registration_id=registration.id,
            full_name=registration.full_name,
            id_number=registration.id_number,
            email=user.email,
        )
        for registration, user in result.all()
    ]


async def get_student_room(session: AsyncSession, student_id: UUID) -> tuple[Room | None, list[str]]:
    """The student's current room and the names of their roommates."""
    result = await session.execute(
        select(Room)
        .join(RoomAssignment, RoomAssignment.room_id == Room.id)
        .where(
            RoomAssignment.student_id == student_id,
            RoomAssignment.is_active == True,  # noqa: E712
        )
    )
    room = result.scalar_one_or_none()
    if not room:
        return None, []

    occupants = await _occupants_by_room(session, [room.id])
    roommates = [o.name for o in occupants.get(room.id, []) if o.student_id != student_id]
    return room, roommates


# ============================================================================
# INVENTORY WRITES
# ============================================================================
async def create_room(session: AsyncSession, data: dict) -> Room:
    room = Room(**data)
    room.current_occupancy = 0
    room.status = derive_status(room, 0)

    session.add(room)
    try:
        await session.commit()
        await session.refresh(room)
    except IntegrityError:
        await session.rollback()
        raise ValidationError(f"Room {data.get('room_number')} already exists")

    logger.info(f"Room {room.room_number} created on floor {room.floor}")
    return room


async def update_room(session: AsyncSession, room_id: UUID, changes: dict) -> Room:
    try:
        room = await get_room(session, room_id, for_update=True)
        if not room:
            raise NotFoundError("Room not found")

        new_max = changes.get("max_occupancy")
        if new_max is not None:
            occupancy = await compute_occupancy(session, room.id)
            if new_max < occupancy:
                raise ValidationError(
                    f"Room {room.room_number} has {occupancy} occupant(s); "
                    f"capacity cannot drop to {new_max}"
                )

        for key, value in changes.items():
            setattr(room, key, value)

        await sync_room(session, room)
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ValidationError("Failed to update room")
    except Exception:
        await session.rollback()
        raise

    return room


# ============================================================================
# ASSIGNMENT ELIGIBILITY
# ============================================================================
async def _ensure_eligible(session: AsyncSession, student_ids: list[UUID]) -> None:
    result = await session.execute(
        select(User.id)
        .join(StudentRegistration, StudentRegistration.user_id == User.id)
        .where(
            User.id.in_(student_ids),
            User.role == UserRole.Student,
            StudentRegistration.status == RegistrationStatus.Approved,
            StudentRegistration.graduation_status == GraduationStatus.Active,
        )
    )
    eligible = set(result.scalars().all())
    missing = [str(sid) for sid in student_ids if sid not in eligible]
    if missing:
        raise ValidationError(
            "Only approved, active students can be assigned a room: " + ", ".join(missing)
        )


# ============================================================================
# ASSIGN (one transaction)
# ============================================================================
async def assign_students(
    session: AsyncSession,
    room_id: UUID,
    student_ids: list[UUID],
    force: bool = False,
) -> tuple[Room, list[RoomAssignment], list[dict]]:
    """
    Assign `student_ids` to the room.

    Fails before any write when the room is missing or out of service,
    a student is not eligible, capacity would be exceeded, or a student
    already holds an active assignment and `force` is False.

    With `force`, the conflicting assignments are closed and the new ones
    opened in the same transaction.

    Returns (room, new assignments, assignments that were closed).
    """
    ids = list(dict.fromkeys(student_ids))
    if not ids:
        raise ValidationError("Please select at least one student")

    try:
        room = await get_room(session, room_id, for_update=True)
        if not room:
            raise NotFoundError("Room not found")

        if is_out_of_service(room):
            raise ValidationError(f"Room {room.room_number} is under maintenance")

        await _ensure_eligible(session, ids)

        conflicts = await find_conflicts(session, ids, for_update=True)
        occupancy = await compute_occupancy(session, room.id)

        # Students forced back into the room they already hold do not add beds
        staying = {c["student_id"] for c in conflicts if c["room_id"] == room.id} if force else set()
        projected = occupancy - len(staying) + len(ids)
        if projected > room.max_occupancy:
            raise CapacityExceededError(room.room_number, room.max_occupancy, occupancy, len(ids))

        if conflicts and not force:
            raise AssignmentConflictError(conflicts)

        now = datetime.now(timezone.utc)

        if conflicts:
            await session.execute(
                update(RoomAssignment)
                .where(
                    RoomAssignment.student_id.in_([c["student_id"] for c in conflicts]),
                    RoomAssignment.is_active == True,  # noqa: E712
                )
                .values(is_active=False, vacated_at=now)
                .execution_options(synchronize_session=False)
            )

        assignments = [
            RoomAssignment(room_id=room.id, student_id=sid, is_active=True, assigned_at=now)
            for sid in ids
        ]
        session.add_all(assignments)
        await session.flush()

        await sync_rooms(session, {room.id} | {c["room_id"] for c in conflicts})
        await session.commit()

    except IntegrityError:
        # Unique index or occupancy CHECK tripped by a concurrent writer
        await session.rollback()
        logger.warning(f"Concurrent assignment change detected on room {room_id}")
        raise AssignmentConflictError(
            [], "Room assignments changed while saving. Reload and try again."
        )
    except Exception:
        await session.rollback()
        raise

    logger.info(
        f"Assigned {len(ids)} student(s) to room {room.room_number}"
        + (f" ({len(conflicts)} reassigned)" if conflicts else "")
    )
    return room, assignments, conflicts


# ============================================================================
# VACATE (idempotent)
# ============================================================================
async def vacate_room(session: AsyncSession, room_id: UUID) -> tuple[Room, int]:
    try:
        room = await get_room(session, room_id, for_update=True)
        if not room:
            raise NotFoundError("Room not found")

        vacated = await compute_occupancy(session, room.id)

        if vacated:
            await session.execute(
                update(RoomAssignment)
                .where(
                    RoomAssignment.room_id == room.id,
                    RoomAssignment.is_active == True,  # noqa: E712
                )
                .values(is_active=False, vacated_at=datetime.now(timezone.utc))
                .execution_options(synchronize_session=False)
            )

        await sync_room(session, room)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info(f"Room {room.room_number} vacated ({vacated} assignment(s) closed)")
    return room, vacated


# ============================================================================
# CLOSE ASSIGNMENTS FOR STUDENTS (used by pass-out; no commit)
# ============================================================================
async def release_students(session: AsyncSession, student_ids: list[UUID]) -> int:
    conflicts = await find_conflicts(session, student_ids, for_update=True)
    if not conflicts:
        return 0

    await session.execute(
        update(RoomAssignment)
        .where(
            RoomAssignment.student_id.in_(student_ids),
            RoomAssignment.is_active == True,  # noqa: E712
        )
        .values(is_active=False, vacated_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session=False)
    )
    await sync_rooms(session, {c["room_id"] for c in conflicts})
    return len(conflicts)
