#app/models/audit.py

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, DateTime, JSON
from sqlalchemy.dialects.postgresql import JSONB
from typing import Optional, Dict, Any
from uuid import UUID, uuid4
from datetime import datetime, timezone


class AuditLog(SQLModel, table=True):
    __tablename__ = "audit_logs"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    # No FK: the trail outlives deleted users
    actor_id: Optional[UUID] = Field(default=None, index=True)
    actor_role: Optional[str] = None

    # e.g. ROOM_ASSIGNED, ROOM_VACATED, REGISTRATION_REVIEWED
    action: str = Field(index=True)

    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    remarks: Optional[str] = None

    # JSONB on Postgres, plain JSON elsewhere
    details: Dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON().with_variant(JSONB, "postgresql"))
    )

    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )
