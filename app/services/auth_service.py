# app/services/auth_service.py

from sqlmodel import select
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from loguru import logger
from datetime import datetime, timezone
import uuid

from app.core.config import settings
from app.core.exceptions import NotFoundError, ValidationError
from app.core.security import (
    hash_password,
    verify_password,
    create_access_token,
)
from app.models.enums import UserRole
from app.models.user import User
from app.models.registration import StudentRegistration
from app.models.room_assignment import RoomAssignment
from app.models.service_request import ServiceRequest
from app.schemas.auth import TokenWithUser
from app.schemas.user import UserRead
from app.services.room_service import release_students, sync_rooms


# Screen each role lands on after login
LANDING_VIEWS = {
    UserRole.Student: "student-dashboard",
    UserRole.Staff: "staff-dashboard",
    UserRole.Admin: "admin-dashboard",
}


def landing_view_for(role: UserRole) -> str:
    return LANDING_VIEWS.get(role, "student-dashboard")


# ============================================================================
# FETCH USER BY EMAIL
# ============================================================================
async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == email.lower().strip()))
    return result.scalar_one_or_none()


# ============================================================================
# FETCH USER BY ID
# ============================================================================
async def get_user_by_id(session: AsyncSession, user_id: uuid.UUID) -> User | None:
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


# ============================================================================
# CREATE USER
# ============================================================================
async def create_user(
    session: AsyncSession,
    name: str,
    email: str,
    password: str,
    role: UserRole = UserRole.Student,
) -> User:

    if not password:
        raise ValidationError("Password is required")

    user = User(
        id=uuid.uuid4(),
        name=name.strip(),
        email=email.lower().strip(),
        password_hash=hash_password(password),
        role=role,
    )

    session.add(user)

    try:
        await session.commit()
        await session.refresh(user)
    except IntegrityError:
        await session.rollback()
        raise ValidationError("User with this email already exists")

    logger.info(f"Created {role.value} account {user.email}")
    return user


# ============================================================================
# AUTHENTICATE (any role)
# ============================================================================
async def authenticate_user(session: AsyncSession, email: str, password: str) -> User | None:
    user = await get_user_by_email(session, email)
    if not user:
        return None

    if not verify_password(password, user.password_hash):
        return None

    return user


# ============================================================================
# CREATE LOGIN RESPONSE
# ============================================================================
def create_login_response(user: User) -> TokenWithUser:
    token = create_access_token(
        subject=str(user.id),
        data={"role": user.role.value},
    )

    return TokenWithUser(
        access_token=token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=UserRead.model_validate(user),
        landing_view=landing_view_for(user.role),
    )


# ============================================================================
# CHANGE PASSWORD
# ============================================================================
async def change_password(session: AsyncSession, user: User, old_password: str, new_password: str) -> None:
    if not verify_password(old_password, user.password_hash):
        raise ValidationError("Old password incorrect")

    if old_password == new_password:
        raise ValidationError("New password must be different")

    user.password_hash = hash_password(new_password)
    user.updated_at = datetime.now(timezone.utc)
    session.add(user)
    await session.commit()


# ============================================================================
# LIST USERS (with registration summary, newest first)
# ============================================================================
async def list_users_with_registrations(session: AsyncSession) -> list[tuple[User, StudentRegistration | None]]:
    result = await session.execute(
        select(User, StudentRegistration)
        .outerjoin(StudentRegistration, StudentRegistration.user_id == User.id)
        .order_by(User.created_at.desc())
    )
    return list(result.all())


# ============================================================================
# UPDATE ROLE
# ============================================================================
async def update_user_role(
    session: AsyncSession,
    user_id: uuid.UUID,
    role: UserRole,
    acting_user: User,
) -> User:
    user = await get_user_by_id(session, user_id)
    if not user:
        raise NotFoundError("User not found")

    if user.id == acting_user.id and role != UserRole.Admin:
        raise ValidationError("Admins cannot demote themselves")

    released = 0
    try:
        # Only students hold beds
        if user.role == UserRole.Student and role != UserRole.Student:
            released = await release_students(session, [user.id])

        user.role = role
        user.updated_at = datetime.now(timezone.utc)
        session.add(user)
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    await session.refresh(user)

    logger.info(
        f"Role of {user.email} changed to {role.value}"
        + (" (room released)" if released else "")
    )
    return user


# ============================================================================
# DELETE USER (hard delete, with dependent rows)
# ============================================================================
async def delete_user_by_id(session: AsyncSession, user_id: uuid.UUID, acting_user: User) -> None:
    user = await get_user_by_id(session, user_id)
    if not user:
        raise NotFoundError("User not found")

    if user.id == acting_user.id:
        raise ValidationError("Admins cannot delete their own account")

    # Rooms the user currently occupies need their occupancy re-synced
    active = await session.execute(
        select(RoomAssignment.room_id).where(
            RoomAssignment.student_id == user.id,
            RoomAssignment.is_active == True,  # noqa: E712
        )
    )
    affected_rooms = set(active.scalars().all())

    try:
        await session.execute(delete(RoomAssignment).where(RoomAssignment.student_id == user.id))
        await session.execute(delete(ServiceRequest).where(ServiceRequest.user_id == user.id))
        await session.execute(
            delete(StudentRegistration).where(StudentRegistration.user_id == user.id)
        )
        await session.delete(user)
        await session.flush()
        await sync_rooms(session, affected_rooms)
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ValidationError("Failed to delete user")

    logger.info(f"Deleted user {user.email}")
