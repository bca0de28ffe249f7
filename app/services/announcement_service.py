from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select
from sqlalchemy import or_
from loguru import logger
from datetime import datetime, timezone
from typing import Optional
import uuid

from app.core.exceptions import NotFoundError, ValidationError
from app.models.announcement import Announcement
from app.models.user import User
from app.schemas.announcement import AnnouncementCreate, AnnouncementUpdate


async def create_announcement(session: AsyncSession, author: User, data: AnnouncementCreate) -> Announcement:
    announcement = Announcement(
        title=data.title.strip(),
        message=data.message.strip(),
        type=data.type,
        target_floor=data.target_floor or None,
        created_by=author.id,
    )
    session.add(announcement)
    await session.commit()
    await session.refresh(announcement)

    logger.info(f"Announcement '{announcement.title}' posted by {author.email}")
    return announcement


async def list_announcements(
    session: AsyncSession,
    include_inactive: bool = False,
    floor: Optional[str] = None,
    limit: Optional[int] = None,
) -> list[Announcement]:
    query = select(Announcement).order_by(Announcement.created_at.desc())

    if not include_inactive:
        query = query.where(Announcement.is_active == True)  # noqa: E712
    if floor:
        # Floor-specific notices plus the ones meant for everybody
        query = query.where(
            or_(Announcement.target_floor.is_(None), Announcement.target_floor == floor)
        )
    if limit:
        query = query.limit(limit)

    result = await session.execute(query)
    return result.scalars().all()


async def _get(session: AsyncSession, announcement_id: uuid.UUID) -> Announcement:
    result = await session.execute(select(Announcement).where(Announcement.id == announcement_id))
    announcement = result.scalar_one_or_none()
    if not announcement:
        raise NotFoundError("Announcement not found")
    return announcement


async def update_announcement(
    session: AsyncSession,
    announcement_id: uuid.UUID,
    data: AnnouncementUpdate,
) -> Announcement:
    announcement = await _get(session, announcement_id)
    # target_floor may be cleared to reach every floor; other nulls mean "leave as is"
    changes = {
        key: value
        for key, value in data.model_dump(exclude_unset=True).items()
        if value is not None or key == "target_floor"
    }
    if not changes:
        raise ValidationError("Nothing to update")

    for key, value in changes.items():
        setattr(announcement, key, value)
    announcement.updated_at = datetime.now(timezone.utc)

    session.add(announcement)
    await session.commit()
    await session.refresh(announcement)
    return announcement


async def deactivate_announcement(session: AsyncSession, announcement_id: uuid.UUID) -> Announcement:
    """Soft delete: the row stays, students stop seeing it."""
    announcement = await _get(session, announcement_id)
    announcement.is_active = False
    announcement.updated_at = datetime.now(timezone.utc)

    session.add(announcement)
    await session.commit()
    await session.refresh(announcement)

    logger.info(f"Announcement {announcement.id} deactivated")
    return announcement
