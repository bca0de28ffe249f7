from sqlmodel import SQLModel, Field, Column
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy import Enum as PGEnum
from datetime import datetime, timezone
import uuid

from app.models.enums import RoomCondition, enum_values


class FurnitureItem(SQLModel, table=True):
    __tablename__ = "furniture_items"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(PG_UUID(as_uuid=True), primary_key=True)
    )

    room_id: uuid.UUID = Field(
        sa_column=Column(
            PG_UUID(as_uuid=True),
            ForeignKey("rooms.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )

    item_name: str = Field(sa_column=Column(String, nullable=False))

    condition: RoomCondition = Field(
        default=RoomCondition.Good,
        sa_column=Column(
            PGEnum(RoomCondition, name="furniture_condition", values_callable=enum_values),
            nullable=False,
        )
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
