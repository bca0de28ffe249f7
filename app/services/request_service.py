# app/services/request_service.py

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select
from loguru import logger
from datetime import datetime, timezone
from typing import Optional
import uuid

from app.core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from app.models.enums import RequestPriority, RequestStatus, UserRole
from app.models.service_request import ServiceRequest
from app.models.user import User
from app.schemas.request import RequestCreate, RequestUpdate


# Terminal states cannot be reopened
ALLOWED_TRANSITIONS = {
    RequestStatus.Pending: {RequestStatus.InProgress, RequestStatus.Completed, RequestStatus.Rejected},
    RequestStatus.InProgress: {RequestStatus.Completed, RequestStatus.Rejected},
    RequestStatus.Completed: set(),
    RequestStatus.Rejected: set(),
}


async def create_request(session: AsyncSession, user: User, data: RequestCreate) -> ServiceRequest:
    request = ServiceRequest(
        user_id=user.id,
        type=data.type.strip(),
        description=data.description.strip(),
        priority=data.priority,
        room_number=data.room_number,
    )

    session.add(request)
    await session.commit()
    await session.refresh(request)

    logger.info(f"{request.type} request {request.id} opened by {user.email}")
    return request


async def get_request(session: AsyncSession, request_id: uuid.UUID, viewer: User) -> ServiceRequest:
    result = await session.execute(select(ServiceRequest).where(ServiceRequest.id == request_id))
    request = result.scalar_one_or_none()
    if not request:
        raise NotFoundError("Request not found")

    if viewer.role == UserRole.Student and request.user_id != viewer.id:
        raise PermissionDeniedError("You can only view your own requests")

    return request


async def list_requests(
    session: AsyncSession,
    viewer: User,
    status: Optional[RequestStatus] = None,
    priority: Optional[RequestPriority] = None,
    type: Optional[str] = None,
    limit: Optional[int] = None,
) -> list[ServiceRequest]:
    """Students see their own requests; staff and admins see all."""
    query = select(ServiceRequest).order_by(ServiceRequest.created_at.desc())

    if viewer.role == UserRole.Student:
        query = query.where(ServiceRequest.user_id == viewer.id)
    if status:
        query = query.where(ServiceRequest.status == status)
    if priority:
        query = query.where(ServiceRequest.priority == priority)
    if type:
        query = query.where(ServiceRequest.type == type)
    if limit:
        query = query.limit(limit)

    result = await session.execute(query)
    return result.scalars().all()


async def update_request(
    session: AsyncSession,
    request_id: uuid.UUID,
    actor: User,
    data: RequestUpdate,
) -> ServiceRequest:
    request = await get_request(session, request_id, actor)
    changes = data.model_dump(exclude_unset=True, exclude_none=True)

    if not changes:
        raise ValidationError("Nothing to update")

    new_status = changes.get("status")
    if new_status and new_status != request.status:
        current = RequestStatus(request.status)
        if new_status not in ALLOWED_TRANSITIONS[current]:
            raise ValidationError(
                f"Cannot move a request from '{current.value}' to '{new_status.value}'"
            )

    for key, value in changes.items():
        setattr(request, key, value)
    request.updated_at = datetime.now(timezone.utc)

    session.add(request)
    await session.commit()
    await session.refresh(request)

    logger.info(f"Request {request.id} updated by {actor.email}: {changes}")
    return request
