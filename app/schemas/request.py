from pydantic import BaseModel, Field
from typing import Optional
from uuid import UUID
from datetime import datetime

from app.models.enums import RequestPriority, RequestStatus


class RequestCreate(BaseModel):
    type: str = Field(min_length=1)
    description: str = Field(min_length=1)
    priority: RequestPriority = RequestPriority.Medium
    room_number: Optional[str] = None


class RequestUpdate(BaseModel):
    """Staff-side changes: status transition and/or assignee."""
    status: Optional[RequestStatus] = None
    assigned_to: Optional[str] = None
    priority: Optional[RequestPriority] = None


class RequestRead(BaseModel):
    id: UUID
    user_id: UUID
    type: str
    priority: RequestPriority
    status: RequestStatus
    room_number: Optional[str] = None
    description: str
    assigned_to: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
