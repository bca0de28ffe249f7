# app/models/service_request.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy import Enum as PGEnum
from datetime import datetime, timezone
from typing import Optional
import uuid

from app.models.enums import RequestPriority, RequestStatus, enum_values


class ServiceRequest(SQLModel, table=True):
    """Maintenance / service request raised by a student (table `requests`)."""

    __tablename__ = "requests"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(PG_UUID(as_uuid=True), primary_key=True)
    )

    user_id: uuid.UUID = Field(
        sa_column=Column(
            PG_UUID(as_uuid=True),
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )

    # Free text: Maintenance, Room Change, Key Handover, Temporary Room, ...
    type: str = Field(sa_column=Column(String, nullable=False))

    priority: RequestPriority = Field(
        default=RequestPriority.Medium,
        sa_column=Column(
            PGEnum(RequestPriority, name="request_priority", values_callable=enum_values),
            nullable=False,
        )
    )

    status: RequestStatus = Field(
        default=RequestStatus.Pending,
        sa_column=Column(
            PGEnum(RequestStatus, name="request_status", values_callable=enum_values),
            nullable=False,
        )
    )

    room_number: Optional[str] = Field(default=None, sa_column=Column(String, nullable=True))
    description: str = Field(sa_column=Column(Text, nullable=False))

    # Team / staff member handling the request
    assigned_to: Optional[str] = Field(default=None, sa_column=Column(String, nullable=True))

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
