from pydantic import BaseModel, Field
from typing import Optional
from uuid import UUID
from datetime import datetime

from app.models.enums import AnnouncementType


class AnnouncementCreate(BaseModel):
    title: str = Field(min_length=1)
    message: str = Field(min_length=1)
    type: AnnouncementType = AnnouncementType.Info
    target_floor: Optional[str] = None


class AnnouncementUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    message: Optional[str] = Field(default=None, min_length=1)
    type: Optional[AnnouncementType] = None
    target_floor: Optional[str] = None
    is_active: Optional[bool] = None


class AnnouncementRead(BaseModel):
    id: UUID
    title: str
    message: str
    type: AnnouncementType
    target_floor: Optional[str] = None
    is_active: bool
    created_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
