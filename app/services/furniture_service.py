from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select
from datetime import datetime, timezone
import uuid

from app.core.exceptions import NotFoundError, ValidationError
from app.models.furniture import FurnitureItem
from app.schemas.room import FurnitureCreate, FurnitureUpdate
from app.services.room_service import get_room


async def list_furniture(session: AsyncSession, room_id: uuid.UUID) -> list[FurnitureItem]:
    if not await get_room(session, room_id):
        raise NotFoundError("Room not found")

    result = await session.execute(
        select(FurnitureItem)
        .where(FurnitureItem.room_id == room_id)
        .order_by(FurnitureItem.item_name)
    )
    return result.scalars().all()


async def add_furniture(session: AsyncSession, room_id: uuid.UUID, data: FurnitureCreate) -> FurnitureItem:
    if not await get_room(session, room_id):
        raise NotFoundError("Room not found")

    item = FurnitureItem(room_id=room_id, item_name=data.item_name.strip(), condition=data.condition)
    session.add(item)
    await session.commit()
    await session.refresh(item)
    return item


async def update_furniture(session: AsyncSession, item_id: uuid.UUID, data: FurnitureUpdate) -> FurnitureItem:
    result = await session.execute(select(FurnitureItem).where(FurnitureItem.id == item_id))
    item = result.scalar_one_or_none()
    if not item:
        raise NotFoundError("Furniture item not found")

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise ValidationError("Nothing to update")

    for key, value in changes.items():
        setattr(item, key, value)
    item.updated_at = datetime.now(timezone.utc)

    session.add(item)
    await session.commit()
    await session.refresh(item)
    return item
