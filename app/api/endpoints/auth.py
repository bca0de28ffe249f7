# app/api/endpoints/auth.py

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

# Schemas
from app.schemas.auth import LoginRequest, SessionRead, SignupRequest, TokenWithUser
from app.schemas.user import UserRead

# Models
from app.models.user import User
from app.models.enums import UserRole

# Services
from app.services.auth_service import (
    authenticate_user,
    create_login_response,
    create_user,
    landing_view_for,
)
from app.services.registration_service import get_registration_for_user
from app.services.audit_service import log_activity
from app.services.email_service import send_welcome_email
from app.core.exceptions import http_error

# Deps
from app.api.deps import get_db_session, get_current_user

router = APIRouter(prefix="/api/auth", tags=["Auth"])


# -------------------------------------------------------------------
# SIGNUP (public, always creates a student account)
# -------------------------------------------------------------------
@router.post("/signup", response_model=TokenWithUser, status_code=status.HTTP_201_CREATED)
async def signup(
    payload: SignupRequest,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_db_session),
):
    try:
        user = await create_user(
            session,
            name=payload.name,
            email=payload.email,
            password=payload.password,
            role=UserRole.Student,
        )
    except ValueError as e:
        raise http_error(e)

    background_tasks.add_task(send_welcome_email, {"name": user.name, "email": user.email})
    background_tasks.add_task(
        log_activity,
        action="USER_SIGNUP",
        actor_id=user.id,
        actor_role=user.role.value,
        entity_type="user",
        entity_id=user.id,
    )

    return create_login_response(user)


# -------------------------------------------------------------------
# LOGIN (any role)
# -------------------------------------------------------------------
@router.post("/login", response_model=TokenWithUser)
async def login(
    payload: LoginRequest,
    session: AsyncSession = Depends(get_db_session),
):
    user = await authenticate_user(session, payload.email, payload.password)

    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return create_login_response(user)


# -------------------------------------------------------------------
# SESSION (auth gate: who am I, where do I land)
# -------------------------------------------------------------------
@router.get("/session", response_model=SessionRead)
async def current_session(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    registration = None
    if current_user.role == UserRole.Student:
        registration = await get_registration_for_user(session, current_user.id)

    return SessionRead(
        user=UserRead.model_validate(current_user),
        landing_view=landing_view_for(current_user.role),
        has_registration=registration is not None,
        registration_status=registration.status.value if registration else None,
    )
