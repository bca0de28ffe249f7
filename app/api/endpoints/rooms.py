# app/api/endpoints/rooms.py

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID

from app.api.deps import get_db_session
from app.core.exceptions import NotFoundError, http_error
from app.core.rbac import require_admin, require_staff
from app.models.enums import RoomStatus
from app.models.user import User
from app.schemas.registration import AvailableStudent
from app.schemas.room import (
    AssignmentConflict,
    AssignmentRead,
    AssignRequest,
    AssignResult,
    ConflictCheckRequest,
    ConflictCheckResponse,
    FurnitureCreate,
    FurnitureRead,
    FurnitureUpdate,
    OccupancyRead,
    RoomCreate,
    RoomDetail,
    RoomRead,
    RoomStatsResponse,
    RoomUpdate,
    VacateResult,
)
from app.services import furniture_service, room_service
from app.services.audit_service import log_activity
from app.services.auth_service import get_user_by_id
from app.services.email_service import send_room_assigned_email

router = APIRouter(prefix="/api/rooms", tags=["Rooms"])


# ===================================================================
# INVENTORY (read)
# ===================================================================
@router.get("", response_model=List[RoomDetail])
async def list_rooms(
    floor: Optional[str] = Query(None),
    status: Optional[RoomStatus] = Query(None),
    search: Optional[str] = Query(None, description="Room number, floor or occupant email"),
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_staff),
):
    return await room_service.list_rooms(session, floor=floor, status=status, search=search)


@router.get("/stats", response_model=RoomStatsResponse)
async def room_stats(
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_staff),
):
    floors = await room_service.floor_stats(session)
    total_rooms, capacity, occupancy = await room_service.capacity_totals(session)
    return RoomStatsResponse(
        floors=floors,
        total_rooms=total_rooms,
        total_capacity=capacity,
        total_occupancy=occupancy,
    )


@router.get("/available-students", response_model=List[AvailableStudent])
async def available_students(
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_staff),
):
    return await room_service.list_available_students(session)


# ===================================================================
# INVENTORY (write)
# ===================================================================
@router.post("", response_model=RoomRead, status_code=status.HTTP_201_CREATED)
async def create_room(
    payload: RoomCreate,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_db_session),
    admin: User = Depends(require_admin),
):
    try:
        room = await room_service.create_room(session, payload.model_dump())
    except ValueError as e:
        raise http_error(e)

    background_tasks.add_task(
        log_activity,
        action="ROOM_CREATED",
        actor_id=admin.id,
        actor_role=admin.role.value,
        entity_type="room",
        entity_id=room.id,
        details={"room_number": room.room_number},
    )
    return room


# -------------------------------------------------------------------
# FURNITURE ITEM UPDATE (declared before /{room_id} routes)
# -------------------------------------------------------------------
@router.patch("/furniture/{item_id}", response_model=FurnitureRead)
async def update_furniture(
    item_id: UUID,
    payload: FurnitureUpdate,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_staff),
):
    try:
        return await furniture_service.update_furniture(session, item_id, payload)
    except ValueError as e:
        raise http_error(e)


@router.get("/{room_id}", response_model=RoomDetail)
async def get_room(
    room_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_staff),
):
    try:
        return await room_service.get_room_detail(session, room_id)
    except ValueError as e:
        raise http_error(e)


@router.patch("/{room_id}", response_model=RoomRead)
async def update_room(
    room_id: UUID,
    payload: RoomUpdate,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_staff),
):
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    try:
        return await room_service.update_room(session, room_id, changes)
    except ValueError as e:
        raise http_error(e)


# ===================================================================
# OCCUPANCY & ASSIGNMENT
# ===================================================================
@router.get("/{room_id}/occupancy", response_model=OccupancyRead)
async def room_occupancy(
    room_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_staff),
):
    room = await room_service.get_room(session, room_id)
    if not room:
        raise http_error(NotFoundError("Room not found"))

    return OccupancyRead(
        room_id=room.id,
        room_number=room.room_number,
        current_occupancy=await room_service.compute_occupancy(session, room.id),
        max_occupancy=room.max_occupancy,
    )


@router.post("/{room_id}/conflicts", response_model=ConflictCheckResponse)
async def check_conflicts(
    room_id: UUID,
    payload: ConflictCheckRequest,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_staff),
):
    """Students in `student_ids` that already hold a room (this one included)."""
    if not await room_service.get_room(session, room_id):
        raise http_error(NotFoundError("Room not found"))

    conflicts = await room_service.find_conflicts(session, payload.student_ids)
    return ConflictCheckResponse(
        has_conflicts=bool(conflicts),
        conflicts=[AssignmentConflict(**c) for c in conflicts],
    )


@router.post("/{room_id}/assign", response_model=AssignResult)
async def assign_students(
    room_id: UUID,
    payload: AssignRequest,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(require_staff),
):
    try:
        room, assignments, reassigned = await room_service.assign_students(
            session, room_id, payload.student_ids, force=payload.force
        )
    except ValueError as e:
        raise http_error(e)

    for assignment in assignments:
        student = await get_user_by_id(session, assignment.student_id)
        if student:
            background_tasks.add_task(
                send_room_assigned_email,
                {
                    "name": student.name,
                    "email": student.email,
                    "room_number": room.room_number,
                    "floor": room.floor,
                },
            )

    background_tasks.add_task(
        log_activity,
        action="ROOM_ASSIGNED",
        actor_id=current_user.id,
        actor_role=current_user.role.value,
        entity_type="room",
        entity_id=room.id,
        details={
            "student_ids": [str(a.student_id) for a in assignments],
            "reassigned_from": [str(c["room_id"]) for c in reassigned],
            "force": payload.force,
        },
    )

    return AssignResult(
        room=RoomRead.model_validate(room),
        assignments=[AssignmentRead.model_validate(a) for a in assignments],
        reassigned_from=[AssignmentConflict(**c) for c in reassigned],
    )


@router.post("/{room_id}/vacate", response_model=VacateResult)
async def vacate_room(
    room_id: UUID,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(require_staff),
):
    try:
        room, vacated = await room_service.vacate_room(session, room_id)
    except ValueError as e:
        raise http_error(e)

    if vacated:
        background_tasks.add_task(
            log_activity,
            action="ROOM_VACATED",
            actor_id=current_user.id,
            actor_role=current_user.role.value,
            entity_type="room",
            entity_id=room.id,
            details={"vacated": vacated},
        )

    return VacateResult(room=RoomRead.model_validate(room), vacated=vacated)


# ===================================================================
# FURNITURE
# ===================================================================
@router.get("/{room_id}/furniture", response_model=List[FurnitureRead])
async def list_furniture(
    room_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_staff),
):
    try:
        return await furniture_service.list_furniture(session, room_id)
    except ValueError as e:
        raise http_error(e)


@router.post("/{room_id}/furniture", response_model=FurnitureRead, status_code=status.HTTP_201_CREATED)
async def add_furniture(
    room_id: UUID,
    payload: FurnitureCreate,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_staff),
):
    try:
        return await furniture_service.add_furniture(session, room_id, payload)
    except ValueError as e:
        raise http_error(e)
