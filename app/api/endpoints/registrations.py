# app/api/endpoints/registrations.py

from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    File,
    HTTPException,
    Query,
    Request,
    Response,
    UploadFile,
    status,
)
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID

from app.api.deps import get_db_session
from app.core.exceptions import http_error
from app.core.rate_limiter import limiter, PHOTO_UPLOAD_LIMIT
from app.core.rbac import AllowRoles, require_student
from app.core.storage import upload_student_photo
from app.models.enums import RegistrationStatus, UserRole
from app.models.user import User
from app.schemas.registration import (
    PassOutCandidate,
    PassOutRequest,
    PassOutResult,
    PhotoUploadResponse,
    RegistrationRead,
    RegistrationReview,
    RegistrationSubmit,
)
from app.services import registration_service
from app.services.auth_service import get_user_by_id
from app.services.audit_service import log_activity
from app.services.email_service import send_registration_reviewed_email

router = APIRouter(prefix="/api/registrations", tags=["Registrations"])

require_reviewer = AllowRoles(UserRole.Staff)


# ===================================================================
# STUDENT SIDE
# ===================================================================

# -------------------------------------------------------------------
# PHOTO UPLOAD (rate limited per client IP)
# -------------------------------------------------------------------
@router.post("/photo", response_model=PhotoUploadResponse)
@limiter.limit(PHOTO_UPLOAD_LIMIT)
async def upload_photo(
    request: Request,
    file: UploadFile = File(...),
    current_user: User = Depends(require_student),
):
    photo_url = await upload_student_photo(file, current_user.id)
    return PhotoUploadResponse(photo_url=photo_url)


# -------------------------------------------------------------------
# SUBMIT / RESUBMIT
# -------------------------------------------------------------------
@router.post("", response_model=RegistrationRead)
async def submit_registration(
    payload: RegistrationSubmit,
    response: Response,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(require_student),
):
    try:
        registration, created = await registration_service.submit_registration(
            session, current_user, payload
        )
    except ValueError as e:
        raise http_error(e)

    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK

    background_tasks.add_task(
        log_activity,
        action="REGISTRATION_SUBMITTED" if created else "REGISTRATION_RESUBMITTED",
        actor_id=current_user.id,
        actor_role=current_user.role.value,
        entity_type="registration",
        entity_id=registration.id,
    )
    return registration


@router.get("/me", response_model=RegistrationRead)
async def my_registration(
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(require_student),
):
    registration = await registration_service.get_registration_for_user(session, current_user.id)
    if not registration:
        raise HTTPException(status_code=404, detail="No registration submitted yet")
    return registration


# ===================================================================
# STAFF SIDE
# ===================================================================

@router.get("", response_model=List[RegistrationRead])
async def list_registrations(
    status: Optional[RegistrationStatus] = Query(None),
    search: Optional[str] = Query(None, description="Name, ID number or phone"),
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_reviewer),
):
    return await registration_service.list_registrations(session, status=status, search=search)


# -------------------------------------------------------------------
# PASS OUT (graduating students leave the hostel)
# -------------------------------------------------------------------
@router.get("/pass-out/candidates", response_model=List[PassOutCandidate])
async def pass_out_candidates(
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_reviewer),
):
    return await registration_service.list_pass_out_candidates(session)


@router.post("/pass-out", response_model=PassOutResult)
async def pass_out(
    payload: PassOutRequest,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(require_reviewer),
):
    try:
        passed_out, closed = await registration_service.pass_out_students(session, payload.user_ids)
    except ValueError as e:
        raise http_error(e)

    background_tasks.add_task(
        log_activity,
        action="STUDENTS_PASSED_OUT",
        actor_id=current_user.id,
        actor_role=current_user.role.value,
        entity_type="registration",
        details={"user_ids": [str(uid) for uid in payload.user_ids], "assignments_closed": closed},
    )
    return PassOutResult(passed_out=passed_out, assignments_closed=closed)


@router.get("/{registration_id}", response_model=RegistrationRead)
async def get_registration(
    registration_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_reviewer),
):
    registration = await registration_service.get_registration(session, registration_id)
    if not registration:
        raise HTTPException(status_code=404, detail="Registration not found")
    return registration


# -------------------------------------------------------------------
# REVIEW (approve / reject)
# -------------------------------------------------------------------
@router.post("/{registration_id}/review", response_model=RegistrationRead)
async def review_registration(
    registration_id: UUID,
    payload: RegistrationReview,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(require_reviewer),
):
    try:
        registration = await registration_service.review_registration(
            session,
            registration_id,
            current_user,
            payload.status,
            payload.review_notes,
        )
    except ValueError as e:
        raise http_error(e)

    student = await get_user_by_id(session, registration.user_id)
    if student:
        background_tasks.add_task(
            send_registration_reviewed_email,
            {
                "name": registration.full_name,
                "email": student.email,
                "status": registration.status.value,
                "review_notes": registration.review_notes,
            },
        )

    background_tasks.add_task(
        log_activity,
        action="REGISTRATION_REVIEWED",
        actor_id=current_user.id,
        actor_role=current_user.role.value,
        entity_type="registration",
        entity_id=registration.id,
        remarks=payload.review_notes,
        details={"status": payload.status.value},
    )
    return registration
