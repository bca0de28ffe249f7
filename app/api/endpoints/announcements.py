# app/api/endpoints/announcements.py

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID

from app.api.deps import get_db_session, get_current_user
from app.core.exceptions import http_error
from app.core.rbac import require_staff
from app.models.enums import UserRole
from app.models.user import User
from app.schemas.announcement import AnnouncementCreate, AnnouncementRead, AnnouncementUpdate
from app.services import announcement_service

router = APIRouter(prefix="/api/announcements", tags=["Announcements"])


@router.post("", response_model=AnnouncementRead, status_code=status.HTTP_201_CREATED)
async def create_announcement(
    payload: AnnouncementCreate,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(require_staff),
):
    return await announcement_service.create_announcement(session, current_user, payload)


@router.get("", response_model=List[AnnouncementRead])
async def list_announcements(
    floor: Optional[str] = Query(None),
    include_inactive: bool = Query(False),
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    # Deactivated notices are only visible to staff
    if current_user.role == UserRole.Student:
        include_inactive = False

    return await announcement_service.list_announcements(
        session, include_inactive=include_inactive, floor=floor
    )


@router.patch("/{announcement_id}", response_model=AnnouncementRead)
async def update_announcement(
    announcement_id: UUID,
    payload: AnnouncementUpdate,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_staff),
):
    try:
        return await announcement_service.update_announcement(session, announcement_id, payload)
    except ValueError as e:
        raise http_error(e)


@router.delete("/{announcement_id}", response_model=AnnouncementRead)
async def delete_announcement(
    announcement_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_staff),
):
    try:
        return await announcement_service.deactivate_announcement(session, announcement_id)
    except ValueError as e:
        raise http_error(e)
