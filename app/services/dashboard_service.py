# app/services/dashboard_service.py

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select
from sqlalchemy import func

from app.models.enums import (
    GraduationStatus,
    RegistrationStatus,
    RequestPriority,
    RequestStatus,
    RoomStatus,
    UserRole,
)
from app.models.registration import StudentRegistration
from app.models.room import Room
from app.models.service_request import ServiceRequest
from app.models.user import User
from app.schemas.announcement import AnnouncementRead
from app.schemas.dashboard import AdminStats, StaffStats, StudentOverview
from app.schemas.registration import RegistrationRead
from app.schemas.request import RequestRead
from app.schemas.room import RoomRead
from app.services import announcement_service, request_service, room_service
from app.services.registration_service import get_registration_for_user

OPEN_REQUEST_STATUSES = [RequestStatus.Pending, RequestStatus.InProgress]


async def _count(session: AsyncSession, query) -> int:
    result = await session.execute(query)
    return int(result.scalar_one() or 0)


# ===================================================================
# ADMIN
# ===================================================================
async def admin_stats(session: AsyncSession) -> AdminStats:
    total_users = await _count(session, select(func.count(User.id)))

    pending = await _count(
        session,
        select(func.count(StudentRegistration.id)).where(
            StudentRegistration.status == RegistrationStatus.Pending
        ),
    )

    active_students = await _count(
        session,
        select(func.count(StudentRegistration.id)).where(
            StudentRegistration.status == RegistrationStatus.Approved,
            StudentRegistration.graduation_status == GraduationStatus.Active,
        ),
    )

    staff = await _count(
        session,
        select(func.count(User.id)).where(User.role.in_([UserRole.Staff, UserRole.Admin])),
    )

    return AdminStats(
        total_users=total_users,
        pending_registrations=pending,
        active_students=active_students,
        staff_members=staff,
    )


# ===================================================================
# STAFF
# ===================================================================
async def staff_stats(session: AsyncSession, viewer: User) -> StaffStats:
    status_rows = await session.execute(
        select(Room.status, func.count(Room.id)).group_by(Room.status)
    )
    by_status = {RoomStatus(row[0]): row[1] for row in status_rows.all()}

    total_rooms, capacity, occupancy = await room_service.capacity_totals(session)

    pending = await _count(
        session,
        select(func.count(StudentRegistration.id)).where(
            StudentRegistration.status == RegistrationStatus.Pending
        ),
    )

    open_requests = await _count(
        session,
        select(func.count(ServiceRequest.id)).where(
            ServiceRequest.status.in_(OPEN_REQUEST_STATUSES)
        ),
    )

    high_priority = await _count(
        session,
        select(func.count(ServiceRequest.id)).where(
            ServiceRequest.status.in_(OPEN_REQUEST_STATUSES),
            ServiceRequest.priority == RequestPriority.High,
        ),
    )

    recent = await request_service.list_requests(session, viewer, limit=5)

    return StaffStats(
        total_rooms=total_rooms,
        occupied_rooms=by_status.get(RoomStatus.Occupied, 0),
        vacant_rooms=by_status.get(RoomStatus.Vacant, 0),
        full_rooms=by_status.get(RoomStatus.Full, 0),
        maintenance_rooms=by_status.get(RoomStatus.Maintenance, 0),
        total_capacity=capacity,
        total_occupancy=occupancy,
        pending_registrations=pending,
        open_requests=open_requests,
        high_priority_requests=high_priority,
        recent_requests=[RequestRead.model_validate(r) for r in recent],
    )


# ===================================================================
# STUDENT
# ===================================================================
async def student_overview(session: AsyncSession, student: User) -> StudentOverview:
    registration = await get_registration_for_user(session, student.id)
    room, roommates = await room_service.get_student_room(session, student.id)
    requests = await request_service.list_requests(session, student, limit=5)
    announcements = await announcement_service.list_announcements(
        session, floor=room.floor if room else None, limit=5
    )

    return StudentOverview(
        registration=RegistrationRead.model_validate(registration) if registration else None,
        room=RoomRead.model_validate(room) if room else None,
        roommates=roommates,
        requests=[RequestRead.model_validate(r) for r in requests],
        announcements=[AnnouncementRead.model_validate(a) for a in announcements],
    )
