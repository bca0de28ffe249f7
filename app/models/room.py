# app/models/room.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy import CheckConstraint, DateTime, Integer, String
from sqlalchemy import Enum as PGEnum
from datetime import datetime, timezone
from typing import Optional
import uuid

from app.models.enums import RoomCondition, RoomStatus, enum_values


class Room(SQLModel, table=True):
    __tablename__ = "rooms"
    __table_args__ = (
        # Occupancy can never exceed capacity, whatever the client does
        CheckConstraint("max_occupancy > 0", name="ck_rooms_max_occupancy_positive"),
        CheckConstraint(
            "current_occupancy >= 0 AND current_occupancy <= max_occupancy",
            name="ck_rooms_occupancy_within_capacity",
        ),
    )

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(PG_UUID(as_uuid=True), primary_key=True)
    )

    room_number: str = Field(
        sa_column=Column(String, nullable=False, unique=True, index=True)
    )
    floor: str = Field(sa_column=Column(String, nullable=False, index=True))

    room_type: Optional[str] = Field(default=None, sa_column=Column(String, nullable=True))
    room_size: Optional[str] = Field(default=None, sa_column=Column(String, nullable=True))

    max_occupancy: int = Field(
        default=2,
        sa_column=Column(Integer, nullable=False, default=2)
    )

    # Synced from active room_assignments inside every assignment transaction
    current_occupancy: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0)
    )

    status: RoomStatus = Field(
        default=RoomStatus.Vacant,
        sa_column=Column(
            PGEnum(RoomStatus, name="room_status", values_callable=enum_values),
            nullable=False,
        )
    )

    condition: RoomCondition = Field(
        default=RoomCondition.Good,
        sa_column=Column(
            PGEnum(RoomCondition, name="room_condition", values_callable=enum_values),
            nullable=False,
        )
    )

    last_inspection: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True)
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
