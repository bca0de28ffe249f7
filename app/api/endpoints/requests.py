# app/api/endpoints/requests.py

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID

from app.api.deps import get_db_session, get_current_user
from app.core.exceptions import http_error
from app.core.rbac import require_staff, require_student
from app.models.enums import RequestPriority, RequestStatus
from app.models.user import User
from app.schemas.request import RequestCreate, RequestRead, RequestUpdate
from app.services import request_service
from app.services.audit_service import log_activity

router = APIRouter(prefix="/api/requests", tags=["Service Requests"])


@router.post("", response_model=RequestRead, status_code=status.HTTP_201_CREATED)
async def create_request(
    payload: RequestCreate,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(require_student),
):
    return await request_service.create_request(session, current_user, payload)


# -------------------------------------------------------------------
# LIST: students get their own, staff get everything
# -------------------------------------------------------------------
@router.get("", response_model=List[RequestRead])
async def list_requests(
    status: Optional[RequestStatus] = Query(None),
    priority: Optional[RequestPriority] = Query(None),
    type: Optional[str] = Query(None),
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    return await request_service.list_requests(
        session, current_user, status=status, priority=priority, type=type
    )


@router.get("/{request_id}", response_model=RequestRead)
async def get_request(
    request_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    try:
        return await request_service.get_request(session, request_id, current_user)
    except ValueError as e:
        raise http_error(e)


@router.patch("/{request_id}", response_model=RequestRead)
async def update_request(
    request_id: UUID,
    payload: RequestUpdate,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(require_staff),
):
    try:
        request = await request_service.update_request(session, request_id, current_user, payload)
    except ValueError as e:
        raise http_error(e)

    background_tasks.add_task(
        log_activity,
        action="REQUEST_UPDATED",
        actor_id=current_user.id,
        actor_role=current_user.role.value,
        entity_type="request",
        entity_id=request.id,
        details=payload.model_dump(mode="json", exclude_none=True),
    )
    return request
