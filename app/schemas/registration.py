# app/schemas/registration.py
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from uuid import UUID
from datetime import datetime

from app.models.enums import GraduationStatus, RegistrationStatus


# ------------------------------------------------------------
# STUDENT REGISTRATION FORM (submit / resubmit)
# ------------------------------------------------------------
class RegistrationSubmit(BaseModel):
    full_name: str = Field(min_length=1)
    age: int = Field(gt=0, lt=120)
    phone: str = Field(min_length=1)
    telephone: Optional[str] = None
    id_number: str = Field(min_length=1)
    photo_url: Optional[str] = None
    additional_reports: Optional[str] = None
    academic_year: Optional[int] = Field(default=None, ge=1, le=10)


# ------------------------------------------------------------
# REVIEW (staff / admin)
# ------------------------------------------------------------
class RegistrationReview(BaseModel):
    status: RegistrationStatus
    review_notes: Optional[str] = None


# ------------------------------------------------------------
# FULL READ RESPONSE
# ------------------------------------------------------------
class RegistrationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    full_name: str
    age: int
    phone: str
    telephone: Optional[str] = None
    id_number: str
    photo_url: Optional[str] = None
    additional_reports: Optional[str] = None
    status: RegistrationStatus
    graduation_status: GraduationStatus
    academic_year: Optional[int] = None
    review_notes: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime


class PhotoUploadResponse(BaseModel):
    photo_url: str


# ------------------------------------------------------------
# PASS OUT
# ------------------------------------------------------------
class PassOutCandidate(BaseModel):
    registration_id: UUID
    user_id: UUID
    full_name: str
    email: str
    academic_year: Optional[int] = None


class PassOutRequest(BaseModel):
    user_ids: List[UUID] = Field(min_length=1)


class PassOutResult(BaseModel):
    passed_out: int
    assignments_closed: int


# ------------------------------------------------------------
# STUDENTS THAT CAN BE GIVEN A ROOM
# ------------------------------------------------------------
class AvailableStudent(BaseModel):
    user_id: UUID
    registration_id: UUID
    full_name: str
    id_number: str
    email: str
