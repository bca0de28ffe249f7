# app/api/endpoints/users.py

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from uuid import UUID

from app.api.deps import get_db_session
from app.core.exceptions import http_error
from app.core.rbac import require_admin
from app.schemas.user import RoleUpdate, UserCreate, UserRead, UserWithRegistration
from app.services.auth_service import (
    create_user,
    delete_user_by_id,
    list_users_with_registrations,
    update_user_role,
)
from app.services.audit_service import log_activity
from app.models.user import User

router = APIRouter(prefix="/api/users", tags=["Users"])


# -------------------------------------------------------------------
# List all users with their registration status (Admin only)
# -------------------------------------------------------------------
@router.get("", response_model=List[UserWithRegistration])
async def list_users(
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_admin)
):
    rows = await list_users_with_registrations(session)
    return [
        UserWithRegistration(
            **UserRead.model_validate(user).model_dump(),
            registration_status=registration.status if registration else None,
            registration_id=registration.id if registration else None,
        )
        for user, registration in rows
    ]


# -------------------------------------------------------------------
# Create staff / admin account (Admin only)
# -------------------------------------------------------------------
@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_new_user(
    data: UserCreate,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_db_session),
    admin: User = Depends(require_admin)
):
    try:
        user = await create_user(session, data.name, data.email, data.password, role=data.role)
    except ValueError as e:
        raise http_error(e)

    background_tasks.add_task(
        log_activity,
        action="USER_CREATED",
        actor_id=admin.id,
        actor_role=admin.role.value,
        entity_type="user",
        entity_id=user.id,
        details={"role": user.role.value},
    )
    return user


# -------------------------------------------------------------------
# Change role (Admin only)
# -------------------------------------------------------------------
@router.patch("/{user_id}/role", response_model=UserRead)
async def change_role(
    user_id: UUID,
    data: RoleUpdate,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_db_session),
    admin: User = Depends(require_admin)
):
    try:
        user = await update_user_role(session, user_id, data.role, admin)
    except ValueError as e:
        raise http_error(e)

    background_tasks.add_task(
        log_activity,
        action="USER_ROLE_CHANGED",
        actor_id=admin.id,
        actor_role=admin.role.value,
        entity_type="user",
        entity_id=user.id,
        details={"role": data.role.value},
    )
    return user


# -------------------------------------------------------------------
# Delete a user (Admin only)
# -------------------------------------------------------------------
@router.delete("/{user_id}")
async def delete_user(
    user_id: UUID,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_db_session),
    admin: User = Depends(require_admin)
):
    try:
        await delete_user_by_id(session, user_id, admin)
    except ValueError as e:
        raise http_error(e)

    background_tasks.add_task(
        log_activity,
        action="USER_DELETED",
        actor_id=admin.id,
        actor_role=admin.role.value,
        entity_type="user",
        entity_id=user_id,
    )
    return {"detail": "User deleted successfully"}
