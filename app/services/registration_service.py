# app/services/registration_service.py

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select
from sqlalchemy import func, or_, update
from sqlalchemy.exc import IntegrityError
from loguru import logger
from datetime import datetime, timezone
from typing import Optional
import uuid

from app.core.config import settings
from app.core.exceptions import NotFoundError, ValidationError
from app.models.enums import GraduationStatus, RegistrationStatus, UserRole
from app.models.registration import StudentRegistration
from app.models.user import User
from app.schemas.registration import PassOutCandidate, RegistrationSubmit
from app.services.room_service import release_students


# ------------------------------------------------------------
# GET REGISTRATION FOR A USER
# ------------------------------------------------------------
async def get_registration_for_user(session: AsyncSession, user_id: uuid.UUID) -> StudentRegistration | None:
    result = await session.execute(
        select(StudentRegistration).where(StudentRegistration.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def get_registration(session: AsyncSession, registration_id: uuid.UUID) -> StudentRegistration | None:
    result = await session.execute(
        select(StudentRegistration).where(StudentRegistration.id == registration_id)
    )
    return result.scalar_one_or_none()


# ------------------------------------------------------------
# SUBMIT / RESUBMIT
# ------------------------------------------------------------
async def submit_registration(
    session: AsyncSession,
    user: User,
    data: RegistrationSubmit,
) -> tuple[StudentRegistration, bool]:
    """
    Creates the user's registration, or updates it in place when it is
    still pending or was rejected. Either way it goes back to `pending`.

    Returns (registration, created).
    """
    if user.role != UserRole.Student:
        raise ValidationError("Only student accounts can submit a registration")

    existing = await get_registration_for_user(session, user.id)

    if existing and existing.status == RegistrationStatus.Approved:
        raise ValidationError("Your registration has already been approved")

    fields = data.model_dump()

    if existing:
        # Keep the previous photo when the resubmission carries none
        if not fields.get("photo_url"):
            fields["photo_url"] = existing.photo_url

        for key, value in fields.items():
            setattr(existing, key, value)

        existing.status = RegistrationStatus.Pending
        existing.review_notes = None
        existing.reviewed_at = None
        existing.reviewed_by = None
        existing.updated_at = datetime.now(timezone.utc)
        registration = existing
        created = False
    else:
        registration = StudentRegistration(user_id=user.id, **fields)
        created = True

    session.add(registration)

    try:
        await session.commit()
        await session.refresh(registration)
    except IntegrityError:
        await session.rollback()
        raise ValidationError("Failed to save registration")

    logger.info(
        f"Registration {'submitted' if created else 'updated'} for {user.email}; awaiting review"
    )
    return registration, created


# ------------------------------------------------------------
# LIST (staff view, newest first, filtered server-side)
# ------------------------------------------------------------
async def list_registrations(
    session: AsyncSession,
    status: Optional[RegistrationStatus] = None,
    search: Optional[str] = None,
) -> list[StudentRegistration]:
    query = select(StudentRegistration).order_by(StudentRegistration.created_at.desc())

    if status:
        query = query.where(StudentRegistration.status == status)

    if search:
        term = f"%{search.strip().lower()}%"
        query = query.where(
            or_(
                func.lower(StudentRegistration.full_name).like(term),
                func.lower(StudentRegistration.id_number).like(term),
                StudentRegistration.phone.like(f"%{search.strip()}%"),
            )
        )

    result = await session.execute(query)
    return result.scalars().all()


# ------------------------------------------------------------
# REVIEW (approve / reject)
# ------------------------------------------------------------
async def review_registration(
    session: AsyncSession,
    registration_id: uuid.UUID,
    reviewer: User,
    status: RegistrationStatus,
    review_notes: Optional[str] = None,
) -> StudentRegistration:
    if status == RegistrationStatus.Pending:
        raise ValidationError("Please select a status for the review")

    registration = await get_registration(session, registration_id)
    if not registration:
        raise NotFoundError("Registration not found")

    if status == RegistrationStatus.Rejected and not (review_notes and review_notes.strip()):
        raise ValidationError("Review notes are required when rejecting a registration")

    released = 0
    try:
        # Losing approval also gives up the bed
        if status != RegistrationStatus.Approved:
            released = await release_students(session, [registration.user_id])

        registration.status = status
        registration.review_notes = review_notes
        registration.reviewed_at = datetime.now(timezone.utc)
        registration.reviewed_by = reviewer.id
        registration.updated_at = datetime.now(timezone.utc)

        session.add(registration)
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    await session.refresh(registration)

    if released:
        logger.info(f"Room assignment of registration {registration.id} closed on {status.value}")

    logger.info(f"Registration {registration.id} {status.value} by {reviewer.email}")
    return registration


# ------------------------------------------------------------
# PASS OUT
# ------------------------------------------------------------
async def list_pass_out_candidates(session: AsyncSession) -> list[PassOutCandidate]:
    result = await session.execute(
        select(StudentRegistration, User)
        .join(User, User.id == StudentRegistration.user_id)
        .where(
            StudentRegistration.status == RegistrationStatus.Approved,
            StudentRegistration.graduation_status == GraduationStatus.Active,
            StudentRegistration.academic_year >= settings.PASS_OUT_MIN_ACADEMIC_YEAR,
        )
        .order_by(StudentRegistration.full_name)
    )

    return [
        PassOutCandidate(
            registration_id=registration.id,
            user_id=user.id,
            full_name=registration.full_name,
            email=user.email,
            academic_year=registration.academic_year,
        )
        for registration, user in result.all()
    ]


async def pass_out_students(session: AsyncSession, user_ids: list[uuid.UUID]) -> tuple[int, int]:
    """
    Marks the students as passed out and closes their active room
    assignments in the same transaction.

    Returns (registrations updated, assignments closed).
    """
    ids = list(dict.fromkeys(user_ids))

    try:
        result = await session.execute(
            select(StudentRegistration).where(
                StudentRegistration.user_id.in_(ids),
                StudentRegistration.status == RegistrationStatus.Approved,
                StudentRegistration.graduation_status == GraduationStatus.Active,
            )
        )
        registrations = result.scalars().all()

        found = {r.user_id for r in registrations}
        missing = [str(uid) for uid in ids if uid not in found]
        if missing:
            raise ValidationError(
                "Only approved, active students can be passed out: " + ", ".join(missing)
            )

        await session.execute(
            update(StudentRegistration)
            .where(StudentRegistration.user_id.in_(ids))
            .values(graduation_status=GraduationStatus.PassedOut, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )

        closed = await release_students(session, ids)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info(f"{len(ids)} student(s) passed out, {closed} room assignment(s) closed")
    return len(ids), closed
